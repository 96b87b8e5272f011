import enum
import logging
import numbers
import weakref
import OpenGL.error
from .CapabilityValidator import validateContext
from .errors import (ContextCapabilityError, InvalidParameterError, LicError, ProgramBuildError,
                     ResourceAllocationError)
from .GpuResources import LicGpuResources
from .LicEngine import LicEngine, buildLicProgram
from .Magnifier import Magnifier
from .NoiseProvider import NoiseProvider
from .RenderContext import PygameRenderContext
from .ResultExtractor import extractResult
from .StructuredGrid2D import StructuredGrid2D
from .VectorFieldSampler import sampleVectorField

logger = logging.getLogger(__name__)


class LicState(enum.Enum):
    Uninitialized = "Uninitialized"
    ContextValidated = "ContextValidated"
    ResourcesPrepared = "ResourcesPrepared"
    Executing = "Executing"
    Completed = "Completed"
    Failed = "Failed"


class StructuredGridLIC2D:
    """GPU Line Integral Convolution of a vector field on a 2D structured grid.

    The input grid carries a 2-component vector field on its points; an
    optional noise image replaces the internally generated noise. The output
    is a grid ``Magnification`` times finer along each axis with a single
    point scalar array ``"LIC"``.

    The rendering context is only observed: the filter keeps a weak
    reference, never destroys a context it did not create and re-validates
    the context before every execution. When no context was set, the first
    execution creates a hidden pygame context that the filter owns.

    Failures never raise out of ``setContext``/``requestData``/``execute``;
    they are reported through the return values and the two flags
    ``getFBOSuccess()`` and ``getLICSuccess()``.

    Args:
        steps (int): number of integration steps in each direction, > 0.
        stepSize (float): step length in normalized [0,1] grid space, > 0.
        magnification (int): output upsampling, clamped to >= 1.
        noiseSeed (int): seed of the internal noise.
        showProgress (bool): print a tqdm bar over the passes.
        contextOptions (dict): window_size/gl_major/gl_minor of an owned context.
    """

    def __init__(self, steps=1, stepSize=1.0, magnification=1, noiseSeed=0, showProgress=False, contextOptions=None):
        self.Steps = steps
        self.StepSize = stepSize
        self.magnifier = Magnifier(magnification)
        self.noiseProvider = NoiseProvider(noiseSeed)
        self.showProgress = showProgress
        self.contextOptions = dict(contextOptions or {})
        self.Context = None
        self.OwnWindow = False
        self._ownedContext = None
        self.LICProgram = None
        self.FBOSuccess = False
        self.LICSuccess = False
        self.state = LicState.Uninitialized

    # ------------------------------------------------------------------ context
    def setContext(self, context) -> bool:
        """Install ``context`` (non owning) after validating its OpenGL features.

        Passing None detaches the current context. Returns False and leaves
        the previous state untouched apart from the success flags when the
        context lacks a required feature.
        """
        if context is not None and context is self.getContext():
            return True
        self.FBOSuccess = False
        self.LICSuccess = False
        if context is None:
            self.releaseGraphicsResources()
            self.state = LicState.Uninitialized
            return True
        if not validateContext(context):
            logger.error(f"setContext: {context} does not support the LIC feature set")
            return False
        self.releaseGraphicsResources()
        self.Context = weakref.ref(context)
        self.state = LicState.ContextValidated
        return True

    def getContext(self):
        if self.Context is None:
            return None
        return self.Context()

    def releaseGraphicsResources(self) -> None:
        """Drop the program and any context the filter created itself."""
        context = self.getContext()
        if self.LICProgram is not None:
            if context is not None and context.isValid():
                try:
                    context.makeCurrent()
                    self.LICProgram.deleteProgram()
                except (OpenGL.error.Error, RuntimeError) as e:
                    logger.warning(f"Unable to delete the LIC program: {e}")
            self.LICProgram = None
        if self.OwnWindow and self._ownedContext is not None:
            self._ownedContext.destroy()
        self._ownedContext = None
        self.OwnWindow = False
        self.Context = None

    def __del__(self):
        try:
            self.releaseGraphicsResources()
        except Exception as e:
            logger.debug(f"Ignoring GL cleanup failure at interpreter teardown: {e}")

    def _ensureContext(self):
        context = self.getContext()
        if context is None and self.Context is None:
            context = self._createOwnedContext()
        if context is None:
            raise ContextCapabilityError("Rendering context has been destroyed")
        # the caller may have destroyed or swapped the context since setContext
        if not validateContext(context):
            raise ContextCapabilityError(f"{context} no longer supports the LIC feature set")
        try:
            context.makeCurrent()
        except RuntimeError as e:
            raise ContextCapabilityError(f"Unable to make {context} current: {e}") from e
        return context

    @staticmethod
    def _checkTextureLimits(context, fieldSize, outputSize):
        # runs before any CPU buffer of the output size is allocated
        try:
            maxSize = context.getMaxTextureSize()
        except OpenGL.error.Error as e:
            raise ResourceAllocationError(f"Unable to query GL_MAX_TEXTURE_SIZE: {e}") from e
        if max(*fieldSize, *outputSize) > maxSize:
            raise ResourceAllocationError(f"LIC raster {outputSize[0]}x{outputSize[1]} exceeds "
                                          f"GL_MAX_TEXTURE_SIZE {maxSize}")

    def _createOwnedContext(self):
        size = self.contextOptions.get("window_size", (64, 64))
        glVersion = (self.contextOptions.get("gl_major", 3), self.contextOptions.get("gl_minor", 3))
        try:
            context = PygameRenderContext(size, glVersion)
        except RuntimeError as e:
            raise ContextCapabilityError(f"Unable to create an offscreen context: {e}") from e
        self._ownedContext = context
        self.OwnWindow = True
        self.Context = weakref.ref(context)
        logger.info("No context set, created an owned offscreen context")
        return context

    # --------------------------------------------------------------- parameters
    def setSteps(self, steps: int) -> None:
        self.Steps = steps

    def getSteps(self) -> int:
        return self.Steps

    def setStepSize(self, stepSize: float) -> None:
        self.StepSize = stepSize

    def getStepSize(self) -> float:
        return self.StepSize

    def setMagnification(self, magnification: int) -> None:
        self.magnifier.setFactor(magnification)

    def getMagnification(self) -> int:
        return self.magnifier.getFactor()

    def setNoiseSeed(self, seed: int) -> None:
        self.noiseProvider.setSeed(seed)

    def getNoiseSeed(self) -> int:
        return self.noiseProvider.seed

    def getFBOSuccess(self) -> bool:
        return self.FBOSuccess

    def getLICSuccess(self) -> bool:
        return self.LICSuccess

    def getState(self) -> LicState:
        return self.state

    # ---------------------------------------------------------------- execution
    def _checkParameters(self):
        if not isinstance(self.Steps, numbers.Integral) or self.Steps <= 0:
            raise InvalidParameterError(f"Steps must be a positive integer, got {self.Steps!r}")
        if not self.StepSize > 0.0:
            raise InvalidParameterError(f"StepSize must be > 0.0, got {self.StepSize!r}")

    def execute(self, inputGrid: StructuredGrid2D, noise=None) -> StructuredGrid2D:
        """Run the LIC and return a new output grid; check the flags before using it."""
        outputGrid = StructuredGrid2D.fromDimensions(*inputGrid.getDimensions())
        self.requestData(inputGrid, outputGrid, noise)
        return outputGrid

    def requestData(self, inputGrid: StructuredGrid2D, outputGrid: StructuredGrid2D, noise=None) -> bool:
        """Fill ``outputGrid`` with the LIC of ``inputGrid``.

        Returns:
            bool: the value of ``getLICSuccess()`` after the execution. On
            failure the content of the output scalars is undefined.
        """
        self.FBOSuccess = False
        self.LICSuccess = False
        try:
            self._checkParameters()
            fieldData = sampleVectorField(inputGrid)
            context = self._ensureContext()
            self.state = LicState.ContextValidated

            width, height = inputGrid.getDimensions()
            outWidth, outHeight = self.magnifier.magnifiedSize(width, height)
            self._checkTextureLimits(context, (width, height), (outWidth, outHeight))
            noiseData = self.noiseProvider.getNoise(outWidth, outHeight, noise)
            outputGrid.allocateScalars(outWidth, outHeight)
            outputGrid.points = inputGrid.magnifiedPoints(self.getMagnification())

            with LicGpuResources(context, (width, height), (outWidth, outHeight)) as resources:
                resources.uploadVectorField(fieldData)
                resources.uploadNoise(noiseData)
                self.FBOSuccess = True
                self.state = LicState.ResourcesPrepared

                if self.LICProgram is None:
                    self.LICProgram = buildLicProgram()
                self.state = LicState.Executing
                engine = LicEngine(self.LICProgram, self.showProgress)
                finalTarget = engine.run(resources, self.Steps, self.StepSize)
                if not extractResult(resources, finalTarget, outputGrid):
                    raise LicError("LIC result could not be read back")
        except ProgramBuildError as e:
            # framebuffer setup already succeeded, only the LIC stage failed
            logger.error(f"LIC program build failed: {e}")
            self.LICSuccess = False
            self.state = LicState.Failed
            return False
        except (LicError, OpenGL.error.Error) as e:
            logger.error(f"LIC execution failed ({type(e).__name__}): {e}")
            self.FBOSuccess = False
            self.LICSuccess = False
            self.state = LicState.Failed
            return False
        self.LICSuccess = True
        self.state = LicState.Completed
        logger.info(f"LIC of {inputGrid} done: {outWidth}x{outHeight}, {self.Steps} steps of {self.StepSize}")
        return True

    def printSelf(self) -> str:
        return (f"{type(self).__name__}:\n"
                f"  Steps: {self.Steps}\n"
                f"  StepSize: {self.StepSize}\n"
                f"  Magnification: {self.getMagnification()}\n"
                f"  NoiseSeed: {self.getNoiseSeed()}\n"
                f"  Context: {self.getContext()}\n"
                f"  OwnWindow: {self.OwnWindow}\n"
                f"  FBOSuccess: {self.FBOSuccess}\n"
                f"  LICSuccess: {self.LICSuccess}\n"
                f"  State: {self.state.value}")

    def __repr__(self):
        return (f"StructuredGridLIC2D(Steps={self.Steps}, StepSize={self.StepSize}, "
                f"Magnification={self.getMagnification()}, FBOSuccess={self.FBOSuccess}, LICSuccess={self.LICSuccess})")

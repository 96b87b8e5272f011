"""GPU Line Integral Convolution of vector fields on 2D structured grids."""

from .errors import (LicError, ContextCapabilityError, ProgramBuildError, ResourceAllocationError,
                     ReadbackError, InvalidParameterError)
from .StructuredGrid2D import StructuredGrid2D
from .RenderContext import RenderContext, PygameRenderContext, tryCreateOffscreenContext
from .CapabilityValidator import validateContext, REQUIRED_FEATURES
from .NoiseProvider import NoiseProvider, lic_noise
from .VectorFieldSampler import sampleVectorField
from .Magnifier import Magnifier
from .StructuredGridLIC2D import StructuredGridLIC2D, LicState

__all__ = [
    "LicError",
    "ContextCapabilityError",
    "ProgramBuildError",
    "ResourceAllocationError",
    "ReadbackError",
    "InvalidParameterError",
    "StructuredGrid2D",
    "RenderContext",
    "PygameRenderContext",
    "tryCreateOffscreenContext",
    "validateContext",
    "REQUIRED_FEATURES",
    "NoiseProvider",
    "lic_noise",
    "sampleVectorField",
    "Magnifier",
    "StructuredGridLIC2D",
    "LicState",
]

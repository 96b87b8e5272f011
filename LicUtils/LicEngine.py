import logging
import glm
import numpy as np
import OpenGL.GL as gl
import OpenGL.error
from tqdm import tqdm
from .errors import LicError, ProgramBuildError
from .shaderManager import ShaderProgram, shaderPath

logger = logging.getLogger(__name__)


def buildLicProgram() -> ShaderProgram:
    """Compile and link the advection program; raises ProgramBuildError."""
    try:
        return ShaderProgram("lic_advect", shaderPath("lic_vertex.glsl"), shaderPath("lic_advect_fragment.glsl"))
    except OpenGL.error.Error as e:
        raise ProgramBuildError(f"OpenGL error while building the LIC program: {e}") from e


def passSchedule(steps: int) -> list:
    """(direction, seedPass, restartPass) of every GPU pass: Steps forward then Steps backward."""
    forward = [(1.0, i == 0, False) for i in range(steps)]
    backward = [(-1.0, False, i == 0) for i in range(steps)]
    return forward + backward


class LicEngine:
    """Runs the bidirectional streamline convolution as ping-pong render passes.

    Every pass advances all pixels by one step at once: it reads the position
    and accumulator textures written by the previous pass and writes the
    updated state into the other framebuffer. The first forward pass seeds
    each pixel at its own location and samples the noise there; the first
    backward pass rewinds the position to the seed but keeps the running sum.
    A pixel whose next point leaves [0,1]^2 stops advecting for the rest of
    that direction, so its average only counts the samples actually taken.
    """

    def __init__(self, program: ShaderProgram, showProgress: bool = False):
        self.program = program
        self.showProgress = showProgress

    def run(self, resources, steps: int, stepSize: float):
        """Execute 2*steps passes and return the PingPongTarget holding the final state."""
        width, height = resources.outputSize
        fieldWidth, fieldHeight = resources.fieldSize
        # GPUs do not guarantee double precision
        stepSize32 = np.float32(stepSize)
        source, destination = resources.targets
        try:
            gl.glViewport(0, 0, width, height)
            gl.glDisable(gl.GL_DEPTH_TEST)
            gl.glDisable(gl.GL_BLEND)
            schedule = passSchedule(steps)
            for direction, seedPass, restartPass in tqdm(schedule, desc="LIC passes", disable=not self.showProgress):
                gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, destination.fbo)
                self.program.setUniforms({
                    "uVectorField": resources.vector_texture,
                    "uNoise": resources.noise_texture,
                    "uPositionState": source.position_texture,
                    "uAccumState": source.accum_texture,
                    "uFieldSize": glm.vec2(fieldWidth, fieldHeight),
                    "uOutputSize": glm.vec2(width, height),
                    "uStepSize": stepSize32,
                    "uDirection": direction,
                    "uSeedPass": int(seedPass),
                    "uRestartPass": int(restartPass),
                })
                resources.drawQuad()
                # one pass must finish before the next one samples its output
                gl.glFinish()
                source, destination = destination, source
            gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
            gl.glUseProgram(0)
        except OpenGL.error.Error as e:
            raise LicError(f"OpenGL error during LIC passes: {e}") from e
        logger.debug(f"LIC finished {2 * steps} passes at {width}x{height}")
        return source

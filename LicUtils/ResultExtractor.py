import ctypes
import logging
import numpy as np
import OpenGL.GL as gl
import OpenGL.error
from .errors import ReadbackError

logger = logging.getLogger(__name__)


def readbackLic(resources, target) -> np.ndarray:
    """Copy the normalized accumulator channel of ``target`` to a (height, width) float32 array.

    The transfer goes through the bundle's pixel pack buffer; the call blocks
    until the data has arrived in CPU memory.
    """
    width, height = resources.outputSize
    nbytes = width * height * 4
    try:
        gl.glBindFramebuffer(gl.GL_READ_FRAMEBUFFER, target.fbo)
        gl.glReadBuffer(gl.GL_COLOR_ATTACHMENT1)
        gl.glPixelStorei(gl.GL_PACK_ALIGNMENT, 1)
        gl.glBindBuffer(gl.GL_PIXEL_PACK_BUFFER, resources.pbo)
        # channel z of the accumulator holds sum / count
        gl.glReadPixels(0, 0, width, height, gl.GL_BLUE, gl.GL_FLOAT, ctypes.c_void_p(0))
        pointer = gl.glMapBuffer(gl.GL_PIXEL_PACK_BUFFER, gl.GL_READ_ONLY)
        if not pointer:
            raise ReadbackError("glMapBuffer returned a null pointer")
        try:
            raw = ctypes.string_at(pointer, nbytes)
        finally:
            unmapped = gl.glUnmapBuffer(gl.GL_PIXEL_PACK_BUFFER)
        if not unmapped:
            raise ReadbackError("Pixel pack buffer was corrupted during readback")
    except OpenGL.error.Error as e:
        raise ReadbackError(f"OpenGL error during readback: {e}") from e
    finally:
        try:
            gl.glBindBuffer(gl.GL_PIXEL_PACK_BUFFER, 0)
            gl.glBindFramebuffer(gl.GL_READ_FRAMEBUFFER, 0)
        except OpenGL.error.Error as e:
            logger.warning(f"OpenGL error while unbinding the readback buffers: {e}")
    # row 0 is the bottom row of the framebuffer, which is lattice row j = 0
    return np.frombuffer(raw, dtype=np.float32).reshape(height, width).copy()


def extractResult(resources, target, outputGrid, name: str = "LIC") -> bool:
    """Store the LIC image into the output container's scalar array.

    Returns:
        bool: True when the readback completed and matched the container size.
    """
    try:
        image = readbackLic(resources, target)
    except ReadbackError as e:
        logger.error(f"LIC readback failed: {e}")
        return False
    scalars = outputGrid.getScalars(name)
    if scalars is None or scalars.shape != image.shape:
        logger.error(f"Output container {outputGrid} does not match the {image.shape[1]}x{image.shape[0]} LIC raster")
        return False
    scalars[...] = image
    return True

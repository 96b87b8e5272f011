import ctypes
import logging
import numpy as np
import OpenGL.GL as gl
import OpenGL.error
from .errors import ResourceAllocationError

logger = logging.getLogger(__name__)

# two triangles covering clip space
QUAD_VERTICES = np.array([-1.0, -1.0, 1.0, -1.0, 1.0, 1.0,
                          -1.0, -1.0, 1.0, 1.0, -1.0, 1.0], dtype=np.float32)

STATE_ATTACHMENTS = [gl.GL_COLOR_ATTACHMENT0, gl.GL_COLOR_ATTACHMENT1]


def create_float_texture(width, height, internal_format, data_format, data=None, filtering=gl.GL_NEAREST):
    texture_id = gl.glGenTextures(1)
    gl.glBindTexture(gl.GL_TEXTURE_2D, texture_id)
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, filtering)
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, filtering)
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_S, gl.GL_CLAMP_TO_EDGE)
    gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_T, gl.GL_CLAMP_TO_EDGE)
    gl.glPixelStorei(gl.GL_UNPACK_ALIGNMENT, 1)
    pixels = None if data is None else np.ascontiguousarray(data, dtype=np.float32)
    gl.glTexImage2D(gl.GL_TEXTURE_2D, 0, internal_format, width, height, 0, data_format, gl.GL_FLOAT, pixels)
    gl.glBindTexture(gl.GL_TEXTURE_2D, 0)
    return texture_id


class PingPongTarget:
    """One framebuffer with the two LIC state textures attached as render targets."""

    def __init__(self, width, height):
        self.position_texture = None
        self.accum_texture = None
        self.fbo = None
        try:
            self.position_texture = create_float_texture(width, height, gl.GL_RGBA32F, gl.GL_RGBA)
            self.accum_texture = create_float_texture(width, height, gl.GL_RGBA32F, gl.GL_RGBA)
            self.fbo = gl.glGenFramebuffers(1)
            gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, self.fbo)
            gl.glFramebufferTexture2D(gl.GL_FRAMEBUFFER, gl.GL_COLOR_ATTACHMENT0, gl.GL_TEXTURE_2D, self.position_texture, 0)
            gl.glFramebufferTexture2D(gl.GL_FRAMEBUFFER, gl.GL_COLOR_ATTACHMENT1, gl.GL_TEXTURE_2D, self.accum_texture, 0)
            gl.glDrawBuffers(len(STATE_ATTACHMENTS), STATE_ATTACHMENTS)
            status = gl.glCheckFramebufferStatus(gl.GL_FRAMEBUFFER)
            gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
        except OpenGL.error.Error:
            self.release()
            raise
        if status != gl.GL_FRAMEBUFFER_COMPLETE:
            self.release()
            raise ResourceAllocationError(f"Framebuffer incomplete (status 0x{int(status):x})")

    def release(self):
        if self.fbo is not None:
            gl.glDeleteFramebuffers(1, [self.fbo])
        textures = [t for t in (self.position_texture, self.accum_texture) if t is not None]
        if textures:
            gl.glDeleteTextures(textures)
        self.position_texture = None
        self.accum_texture = None
        self.fbo = None


class LicGpuResources:
    """Every per-execution GPU object of the LIC, acquired and released as one bundle.

    Use it as a context manager: the textures, framebuffers, quad geometry and
    the pixel pack buffer are released on every exit path, including a failed
    allocation half way through ``__enter__``.

    Args:
        context (RenderContext): validated context the objects are created in.
        fieldSize (tuple): (width, height) of the unmagnified vector field.
        outputSize (tuple): (width, height) of the magnified LIC raster.
    """

    def __init__(self, context, fieldSize, outputSize):
        self.context = context
        self.fieldSize = tuple(fieldSize)
        self.outputSize = tuple(outputSize)
        self.vector_texture = None
        self.noise_texture = None
        self.targets = []
        self.vao = None
        self.vbo = None
        self.pbo = None

    def __enter__(self):
        try:
            self.acquire()
        except BaseException:
            self.release()
            raise
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False

    def acquire(self):
        width, height = self.outputSize
        try:
            self.context.makeCurrent()
            maxSize = self.context.getMaxTextureSize()
        except (OpenGL.error.Error, RuntimeError) as e:
            raise ResourceAllocationError(f"Unable to query the rendering context: {e}") from e
        if max(width, height, *self.fieldSize) > maxSize:
            raise ResourceAllocationError(f"LIC raster {width}x{height} exceeds GL_MAX_TEXTURE_SIZE {maxSize}")
        try:
            self.vector_texture = create_float_texture(*self.fieldSize, gl.GL_RG32F, gl.GL_RG, filtering=gl.GL_LINEAR)
            self.noise_texture = create_float_texture(width, height, gl.GL_R32F, gl.GL_RED)
            for _ in range(2):
                self.targets.append(PingPongTarget(width, height))
            self._createQuad()
            self.pbo = gl.glGenBuffers(1)
            gl.glBindBuffer(gl.GL_PIXEL_PACK_BUFFER, self.pbo)
            gl.glBufferData(gl.GL_PIXEL_PACK_BUFFER, width * height * 4, None, gl.GL_STREAM_READ)
            gl.glBindBuffer(gl.GL_PIXEL_PACK_BUFFER, 0)
        except OpenGL.error.Error as e:
            raise ResourceAllocationError(f"OpenGL error while allocating LIC resources: {e}") from e
        logger.debug(f"Allocated LIC resources: field {self.fieldSize}, output {self.outputSize}")

    def _createQuad(self):
        self.vao = gl.glGenVertexArrays(1)
        self.vbo = gl.glGenBuffers(1)
        gl.glBindVertexArray(self.vao)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, self.vbo)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, QUAD_VERTICES.nbytes, QUAD_VERTICES, gl.GL_STATIC_DRAW)
        gl.glEnableVertexAttribArray(0)
        gl.glVertexAttribPointer(0, 2, gl.GL_FLOAT, gl.GL_FALSE, 0, ctypes.c_void_p(0))
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, 0)
        gl.glBindVertexArray(0)

    def uploadVectorField(self, data: np.ndarray):
        self._upload(self.vector_texture, self.fieldSize, gl.GL_RG, data)

    def uploadNoise(self, data: np.ndarray):
        self._upload(self.noise_texture, self.outputSize, gl.GL_RED, data)

    def _upload(self, texture_id, size, data_format, data):
        try:
            gl.glBindTexture(gl.GL_TEXTURE_2D, texture_id)
            gl.glPixelStorei(gl.GL_UNPACK_ALIGNMENT, 1)
            gl.glTexSubImage2D(gl.GL_TEXTURE_2D, 0, 0, 0, size[0], size[1], data_format, gl.GL_FLOAT,
                               np.ascontiguousarray(data, dtype=np.float32))
            gl.glBindTexture(gl.GL_TEXTURE_2D, 0)
        except OpenGL.error.Error as e:
            raise ResourceAllocationError(f"OpenGL error while uploading texture {texture_id}: {e}") from e

    def drawQuad(self):
        gl.glBindVertexArray(self.vao)
        gl.glDrawArrays(gl.GL_TRIANGLES, 0, 6)
        gl.glBindVertexArray(0)

    def release(self):
        if not self.context.isValid():
            # the GL objects died with the context
            logger.warning("Context destroyed before LIC resources were released")
            self._forget()
            return
        try:
            for target in self.targets:
                target.release()
            textures = [t for t in (self.vector_texture, self.noise_texture) if t is not None]
            if textures:
                gl.glDeleteTextures(textures)
            buffers = [b for b in (self.vbo, self.pbo) if b is not None]
            if buffers:
                gl.glDeleteBuffers(len(buffers), buffers)
            if self.vao is not None:
                gl.glDeleteVertexArrays(1, [self.vao])
        except OpenGL.error.Error as e:
            # cleanup errors are logged only
            logger.warning(f"OpenGL error while releasing LIC resources: {e}")
        finally:
            self._forget()

    def _forget(self):
        self.vector_texture = None
        self.noise_texture = None
        self.targets = []
        self.vao = None
        self.vbo = None
        self.pbo = None

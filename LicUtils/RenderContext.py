import logging
import re
import OpenGL.GL as gl
import pygame

logger = logging.getLogger(__name__)


def parseGLVersion(versionString) -> tuple:
    """'4.6 (Core Profile) Mesa 23.2.1' -> (4, 6); unparsable strings give (0, 0)."""
    if isinstance(versionString, bytes):
        versionString = versionString.decode(errors="replace")
    match = re.match(r"\s*(?:OpenGL ES\s+)?(\d+)\.(\d+)", versionString or "")
    if match is None:
        return (0, 0)
    return (int(match.group(1)), int(match.group(2)))


class RenderContext:
    """Interface the LIC filter expects from a rendering context.

    The filter only observes a context: it never creates GL state outside
    of it and never destroys it. Subclasses wrap whatever window system
    owns the real OpenGL context.
    """

    def makeCurrent(self) -> None:
        raise NotImplementedError()

    def isValid(self) -> bool:
        raise NotImplementedError()

    def getGLVersion(self) -> tuple:
        gl_version = gl.glGetString(gl.GL_VERSION)
        return parseGLVersion(gl_version)

    def getExtensions(self) -> set:
        major, _ = self.getGLVersion()
        if major >= 3:
            # core profiles reject glGetString(GL_EXTENSIONS)
            count = int(gl.glGetIntegerv(gl.GL_NUM_EXTENSIONS))
            names = [gl.glGetStringi(gl.GL_EXTENSIONS, i) for i in range(count)]
        else:
            raw = gl.glGetString(gl.GL_EXTENSIONS) or b""
            names = raw.split()
        return {name.decode() if isinstance(name, bytes) else str(name) for name in names}

    def getMaxTextureSize(self) -> int:
        return int(gl.glGetIntegerv(gl.GL_MAX_TEXTURE_SIZE))


class PygameRenderContext(RenderContext):
    """Hidden pygame window holding an OpenGL context, used for offscreen LIC.

    Args:
        size (tuple): window size; the LIC renders into framebuffers so this can stay small.
        glVersion (tuple): requested (major, minor) core profile version.
    """

    def __init__(self, size=(64, 64), glVersion=(3, 3)):
        self.size = tuple(size)
        self.glVersion = tuple(glVersion)
        self.screen = None
        self._destroyed = False
        self._create()

    def _create(self):
        pygame.display.init()
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, self.glVersion[0])
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, self.glVersion[1])
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE)
        try:
            self.screen = pygame.display.set_mode(self.size, pygame.OPENGL | pygame.DOUBLEBUF | pygame.HIDDEN)
        except pygame.error as e:
            pygame.display.quit()
            raise RuntimeError(f"Unable to create an OpenGL {self.glVersion} context: {e}") from e
        logger.info(f"OpenGL context created: Version {gl.glGetString(gl.GL_VERSION).decode()}")

    def makeCurrent(self) -> None:
        # pygame keeps its single GL context current for the whole display lifetime
        if not self.isValid():
            raise RuntimeError("OpenGL context has been destroyed")

    def isValid(self) -> bool:
        return (not self._destroyed) and pygame.display.get_init() and pygame.display.get_surface() is not None

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self.screen = None
        pygame.display.quit()
        logger.debug("OpenGL context destroyed")

    def __repr__(self):
        return f"PygameRenderContext(size={self.size}, glVersion={self.glVersion}, valid={self.isValid()})"


def tryCreateOffscreenContext(size=(64, 64), glVersion=(3, 3)):
    """Return a PygameRenderContext, or None when the platform cannot provide one."""
    try:
        return PygameRenderContext(size, glVersion)
    except (RuntimeError, pygame.error) as e:
        logger.warning(f"No offscreen OpenGL context available: {e}")
        return None

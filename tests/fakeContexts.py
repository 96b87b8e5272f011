from LicUtils.RenderContext import RenderContext

CORE_33_EXTENSIONS = set()
LEGACY_EXTENSIONS = {
    "GL_ARB_texture_non_power_of_two",
    "GL_ARB_texture_float",
    "GL_ARB_draw_buffers",
    "GL_EXT_framebuffer_object",
    "GL_ARB_pixel_buffer_object",
}


class FakeContext(RenderContext):
    """Context double reporting a fixed OpenGL version and extension list, no real GL behind it."""

    def __init__(self, glVersion=(3, 3), extensions=None, maxTextureSize=16384):
        self.glVersion = glVersion
        self.extensions = set(CORE_33_EXTENSIONS if extensions is None else extensions)
        self.maxTextureSize = maxTextureSize
        self.valid = True
        self.makeCurrentCalls = 0

    def makeCurrent(self):
        self.makeCurrentCalls += 1

    def isValid(self):
        return self.valid

    def getGLVersion(self):
        return self.glVersion

    def getExtensions(self):
        return self.extensions

    def getMaxTextureSize(self):
        return self.maxTextureSize

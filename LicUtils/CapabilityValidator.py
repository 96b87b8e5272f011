import logging
from collections import namedtuple
import OpenGL.error

logger = logging.getLogger(__name__)

# feature name, OpenGL version in which it became core, extensions providing it earlier
GLFeature = namedtuple("GLFeature", ["name", "coreVersion", "extensions"])

REQUIRED_FEATURES = [
    GLFeature("programmable pipeline", (2, 0), ()),
    GLFeature("non power of two textures", (2, 0), ("GL_ARB_texture_non_power_of_two",)),
    GLFeature("floating point textures", (3, 0), ("GL_ARB_texture_float",)),
    GLFeature("multiple render targets", (2, 0), ("GL_ARB_draw_buffers",)),
    GLFeature("framebuffer objects", (3, 0), ("GL_ARB_framebuffer_object", "GL_EXT_framebuffer_object")),
    GLFeature("pixel buffer objects", (2, 1), ("GL_ARB_pixel_buffer_object", "GL_EXT_pixel_buffer_object")),
]


def missingFeatures(glVersion, extensions) -> list:
    """Names of the required features neither the version nor the extension list provide."""
    missing = []
    for feature in REQUIRED_FEATURES:
        if tuple(glVersion) >= feature.coreVersion:
            continue
        if any(ext in extensions for ext in feature.extensions):
            continue
        missing.append(feature.name)
    return missing


def validateContext(context) -> bool:
    """All-or-nothing check that ``context`` supports the LIC feature set.

    Args:
        context (RenderContext): context to inspect, made current for the query.

    Returns:
        bool: True when every feature in REQUIRED_FEATURES is available.
    """
    if context is None:
        logger.error("No rendering context to validate.")
        return False
    if not context.isValid():
        logger.error(f"Rendering context {context} is no longer valid.")
        return False
    try:
        context.makeCurrent()
        glVersion = context.getGLVersion()
        extensions = context.getExtensions()
    except (OpenGL.error.Error, RuntimeError) as e:
        logger.error(f"Unable to query the features of {context}: {e}")
        return False
    missing = missingFeatures(glVersion, extensions)
    if missing:
        logger.error(f"OpenGL {glVersion[0]}.{glVersion[1]} context lacks required features: {', '.join(missing)}")
        return False
    logger.debug(f"OpenGL {glVersion[0]}.{glVersion[1]} context supports the LIC feature set")
    return True

class LicError(RuntimeError):
    """Base class of the failures the LIC filter turns into success flags."""
    pass


class ContextCapabilityError(LicError):
    """The rendering context is missing, invalid or lacks a required OpenGL feature."""
    pass


class ProgramBuildError(LicError):
    """The GLSL integration program failed to compile or link."""
    pass


class ResourceAllocationError(LicError):
    """A texture, framebuffer or buffer could not be allocated on the GPU."""
    pass


class ReadbackError(LicError):
    pass


class InvalidParameterError(LicError):
    """Steps/StepSize invariants violated or malformed input data."""
    pass

import unittest
from LicUtils.CapabilityValidator import missingFeatures, validateContext
from LicUtils.RenderContext import parseGLVersion
from fakeContexts import FakeContext, LEGACY_EXTENSIONS


class TestCapabilityValidator(unittest.TestCase):
    def test_core_context_is_accepted(self):
        self.assertTrue(validateContext(FakeContext((3, 3))), "A GL 3.3 context provides every feature in core.")

    def test_legacy_context_with_extensions_is_accepted(self):
        self.assertTrue(validateContext(FakeContext((2, 0), LEGACY_EXTENSIONS)))

    def test_missing_float_textures_is_rejected(self):
        extensions = LEGACY_EXTENSIONS - {"GL_ARB_texture_float"}
        context = FakeContext((2, 1), extensions)
        self.assertFalse(validateContext(context))
        self.assertEqual(missingFeatures((2, 1), extensions), ["floating point textures"])

    def test_every_missing_feature_is_reported(self):
        missing = missingFeatures((1, 5), set())
        self.assertEqual(len(missing), 6, f"GL 1.5 without extensions lacks everything, got {missing}")

    def test_gl1_context_is_rejected_even_with_extensions(self):
        self.assertEqual(missingFeatures((1, 5), LEGACY_EXTENSIONS), ["programmable pipeline"])

    def test_invalid_or_missing_context(self):
        context = FakeContext((4, 6))
        context.valid = False
        self.assertFalse(validateContext(context))
        self.assertFalse(validateContext(None))

    def test_validation_makes_context_current(self):
        context = FakeContext((4, 1))
        validateContext(context)
        self.assertEqual(context.makeCurrentCalls, 1)

    def test_parse_gl_version(self):
        self.assertEqual(parseGLVersion(b"4.6 (Core Profile) Mesa 23.2.1"), (4, 6))
        self.assertEqual(parseGLVersion("2.1 Metal - 88"), (2, 1))
        self.assertEqual(parseGLVersion("OpenGL ES 3.2 NVIDIA"), (3, 2))
        self.assertEqual(parseGLVersion(""), (0, 0))


if __name__ == '__main__':
    unittest.main()

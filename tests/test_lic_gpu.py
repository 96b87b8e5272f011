"""End to end runs on a real OpenGL context; skipped where none can be created.

pygame and PyOpenGL must talk to the same GL platform. On a headless machine run
them with ``PYOPENGL_PLATFORM=egl SDL_VIDEODRIVER=offscreen``, otherwise the
context cannot be created and this module is skipped.
"""
import unittest
import numpy as np
from LicUtils.AnalyticalFlowCreator import uniform_flow
from LicUtils.NoiseProvider import lic_noise
from LicUtils.RenderContext import tryCreateOffscreenContext
from LicUtils.StructuredGrid2D import StructuredGrid2D
from LicUtils.StructuredGridLIC2D import LicState, StructuredGridLIC2D

context = None


def setUpModule():
    global context
    context = tryCreateOffscreenContext()
    if context is None:
        raise unittest.SkipTest("No OpenGL 3.3 context available")


def tearDownModule():
    if context is not None:
        context.destroy()


def zero_field_grid(Xdim, Ydim):
    grid = StructuredGrid2D.uniform(Xdim, Ydim)
    grid.setVectors(np.zeros((Ydim, Xdim, 2), dtype=np.float32))
    return grid


class TestLicOnGpu(unittest.TestCase):
    def setUp(self):
        self.lic = StructuredGridLIC2D()
        self.assertTrue(self.lic.setContext(context))

    def tearDown(self):
        self.lic.releaseGraphicsResources()

    def test_constant_noise_gives_constant_output(self):
        noise = np.full((4, 4), 0.5, dtype=np.float32)
        output = self.lic.execute(zero_field_grid(4, 4), noise)
        self.assertTrue(self.lic.getFBOSuccess())
        self.assertTrue(self.lic.getLICSuccess())
        self.assertEqual(self.lic.getState(), LicState.Completed)
        np.testing.assert_allclose(output.getScalars("LIC"), 0.5, atol=1e-6)

    def test_magnified_constant_noise(self):
        self.lic.setMagnification(2)
        noise = np.full((4, 4), 0.5, dtype=np.float32)
        output = self.lic.execute(zero_field_grid(4, 4), noise)
        self.assertTrue(self.lic.getLICSuccess())
        self.assertEqual(output.getDimensions(), (8, 8))
        np.testing.assert_allclose(output.getScalars("LIC"), 0.5, atol=1e-5)

    def test_output_sizes(self):
        for magnification in (1, 2, 4):
            self.lic.setMagnification(magnification)
            output = self.lic.execute(zero_field_grid(5, 3))
            self.assertTrue(self.lic.getLICSuccess(), f"magnification {magnification}")
            self.assertEqual(output.getScalars("LIC").shape, (3 * magnification, 5 * magnification))

    def test_zero_field_reproduces_noise(self):
        self.lic.setSteps(5)
        self.lic.setStepSize(0.1)
        self.lic.setNoiseSeed(21)
        output = self.lic.execute(zero_field_grid(16, 8))
        self.assertTrue(self.lic.getLICSuccess())
        np.testing.assert_allclose(output.getScalars("LIC"), lic_noise((16, 8), 21), rtol=1e-5, atol=1e-6)

    def test_runs_are_deterministic(self):
        self.lic.setSteps(6)
        self.lic.setStepSize(0.02)
        self.lic.setMagnification(2)
        grid = uniform_flow((16, 16), direction=(1.0, 1.0))
        first = self.lic.execute(grid).getScalars("LIC").copy()
        second = self.lic.execute(grid).getScalars("LIC")
        self.assertTrue(np.array_equal(first, second), "Identical inputs must give bit identical output.")

    def test_uniform_flow_averages_along_rows(self):
        width, height, steps = 32, 4, 4
        self.lic.setSteps(steps)
        # one output texel per step
        self.lic.setStepSize(1.0 / (width - 1))
        noise = lic_noise((width, height), seed=5)
        output = self.lic.execute(uniform_flow((width, height), direction=(1.0, 0.0)), noise)
        self.assertTrue(self.lic.getLICSuccess())
        lic = output.getScalars("LIC")
        for y in range(height):
            for x in range(steps + 1, width - steps - 1):
                expected = noise[y, x - steps:x + steps + 1].mean()
                self.assertAlmostEqual(float(lic[y, x]), float(expected), places=5, msg=f"pixel ({x}, {y})")
        self.assertLess(float(lic.var()), float(noise.var()))

    def test_border_pixels_average_only_samples_taken(self):
        width, height, steps = 32, 4, 4
        self.lic.setSteps(steps)
        self.lic.setStepSize(1.0 / (width - 1))
        noise = lic_noise((width, height), seed=9)
        output = self.lic.execute(uniform_flow((width, height), direction=(1.0, 0.0)), noise)
        self.assertTrue(self.lic.getLICSuccess())
        lic = output.getScalars("LIC")
        for y in range(height):
            # the left column halts on its first backward step, the right column on its first forward step
            self.assertAlmostEqual(float(lic[y, 0]), float(noise[y, :steps + 1].mean()), places=5)
            self.assertAlmostEqual(float(lic[y, width - 1]), float(noise[y, width - steps - 1:].mean()), places=5)


if __name__ == '__main__':
    unittest.main()

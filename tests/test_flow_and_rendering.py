import os
import tempfile
import unittest
from unittest.mock import MagicMock
import numpy as np
from LicUtils.AnalyticalFlowCreator import AnalyticalFlowCreator, constant_rotation, uniform_flow
from LicUtils.LicRenderer import LicRenderingSteady, licToImage
from LicUtils.StructuredGrid2D import StructuredGrid2D
from LicUtils.StructuredGridLIC2D import StructuredGridLIC2D


class TestAnalyticalFlowCreator(unittest.TestCase):
    def test_rotation(self):
        grid = constant_rotation((5, 4), scale=2.0)
        self.assertEqual(grid.getDimensions(), (5, 4))
        np.testing.assert_allclose(grid.vectors[..., 0], -2.0 * grid.points[..., 1], rtol=1e-6)
        np.testing.assert_allclose(grid.vectors[..., 1], 2.0 * grid.points[..., 0], rtol=1e-6)

    def test_parameters(self):
        creator = AnalyticalFlowCreator((3, 3), parameters={'a': 2.0})
        creator.setExpression('a * x', 'y')
        creator.update_parameters({'a': 3.0})
        grid = creator.create_flow_field()
        np.testing.assert_allclose(grid.vectors[..., 0], 3.0 * grid.points[..., 0], rtol=1e-6)

    def test_uniform_flow(self):
        grid = uniform_flow((4, 4), direction=(0.0, 1.0))
        self.assertTrue(np.all(grid.vectors[..., 0] == 0.0))
        self.assertTrue(np.all(grid.vectors[..., 1] == 1.0))

    def test_warp_keeps_boundary(self):
        flat = AnalyticalFlowCreator((9, 9))
        warped = AnalyticalFlowCreator((9, 9), warp=0.1)
        np.testing.assert_allclose(warped.x[0, :], flat.x[0, :], atol=1e-12)
        np.testing.assert_allclose(warped.y[:, -1], flat.y[:, -1], atol=1e-12)
        self.assertGreater(np.abs(warped.x - flat.x).max(), 0.0)

    def test_missing_expression(self):
        with self.assertRaises(ValueError):
            AnalyticalFlowCreator((3, 3)).create_flow_field()


class TestLicRendering(unittest.TestCase):
    def test_lic_to_image_stretches_and_flips(self):
        lic = np.array([[0.2, 0.2], [0.6, 0.6]], dtype=np.float32)
        img = np.asarray(licToImage(lic))
        self.assertEqual(img.dtype, np.uint8)
        self.assertTrue(np.all(img[0] == 255), "Grid row 0 is the bottom image row.")
        self.assertTrue(np.all(img[1] == 0))
        self.assertEqual(licToImage(lic).mode, "L")

    def test_constant_image_is_not_stretched(self):
        img = np.asarray(licToImage(np.full((2, 2), 0.5, dtype=np.float32)))
        self.assertTrue(np.all(img == 128))

    def test_rendering_saves_png(self):
        lic = StructuredGridLIC2D()
        output = StructuredGrid2D.fromDimensions(4, 4)
        output.allocateScalars(4, 4)[...] = np.linspace(0.0, 1.0, 16).reshape(4, 4)
        lic.execute = MagicMock(return_value=output)
        lic.LICSuccess = True
        with tempfile.TemporaryDirectory() as folder:
            img = LicRenderingSteady(uniform_flow((4, 4)), lic, saveFolder=folder, saveName="flow")
            self.assertIsNotNone(img)
            self.assertTrue(os.path.exists(os.path.join(folder, "flow.png")))

    def test_failed_rendering_returns_none(self):
        lic = StructuredGridLIC2D()
        lic.execute = MagicMock(return_value=StructuredGrid2D.fromDimensions(4, 4))
        with tempfile.TemporaryDirectory() as folder:
            self.assertIsNone(LicRenderingSteady(uniform_flow((4, 4)), lic, saveFolder=folder))
            self.assertEqual(os.listdir(folder), [])


if __name__ == '__main__':
    unittest.main()

import os
import tempfile
import unittest
from unittest.mock import patch
import yaml
from LicUtils.config import DEFAULT_CONFIG, load_config, merge_config
import main


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = load_config()
        self.assertEqual(cfg, DEFAULT_CONFIG)
        cfg['lic']['steps'] = 99
        self.assertEqual(DEFAULT_CONFIG['lic']['steps'], 1, "Loading must not hand out the shared defaults.")

    def test_yaml_overrides_defaults(self):
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, "lic.yaml")
            with open(path, 'w') as file:
                yaml.safe_dump({'lic': {'steps': 20}, 'noise': {'seed': 4}}, file)
            cfg = load_config(path)
        self.assertEqual(cfg['lic']['steps'], 20)
        self.assertEqual(cfg['lic']['step_size'], DEFAULT_CONFIG['lic']['step_size'])
        self.assertEqual(cfg['noise']['seed'], 4)

    def test_missing_and_malformed_files(self):
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/lic.yaml")
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, "list.yaml")
            with open(path, 'w') as file:
                file.write("- 1\n- 2\n")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_merge_is_recursive(self):
        merged = merge_config({'a': {'b': 1, 'c': 2}}, {'a': {'c': 3}, 'd': 4})
        self.assertEqual(merged, {'a': {'b': 1, 'c': 3}, 'd': 4})

    def test_shipped_config_loads(self):
        path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "lic.yaml")
        cfg = load_config(path)
        self.assertGreater(cfg['lic']['steps'], 0)
        self.assertGreater(cfg['lic']['step_size'], 0.0)


class TestCommandLine(unittest.TestCase):
    def test_arguments_override_config(self):
        cfg = main.argParseAndPrepareConfig(["--steps", "12", "--step_size", "0.01", "--magnification", "3",
                                             "--seed", "5", "--name", "rot", "--progress"])
        self.assertEqual(cfg['lic']['steps'], 12)
        self.assertEqual(cfg['lic']['step_size'], 0.01)
        self.assertEqual(cfg['lic']['magnification'], 3)
        self.assertEqual(cfg['noise']['seed'], 5)
        self.assertEqual(cfg['output']['name'], "rot")
        self.assertTrue(cfg['lic']['show_progress'])

    @patch("main.LicRenderingSteady")
    def test_main_reports_failure(self, mockRendering):
        mockRendering.return_value = None
        self.assertEqual(main.main(["--steps", "2"]), 1)
        grid, lic = mockRendering.call_args[0]
        self.assertEqual(lic.getSteps(), 2)
        self.assertEqual(grid.getDimensions(), tuple(DEFAULT_CONFIG['flow']['grid_size']))


if __name__ == '__main__':
    unittest.main()

import json
import os
import tempfile
import unittest

from floorsketch.core.config import GeometryConfig
from floorsketch.core.errors import ConfigError
from floorsketch.file_io import load_config, save_config


class GeometryConfigTests(unittest.TestCase):
    def test_defaults(self):
        cfg = GeometryConfig()
        self.assertEqual(cfg.scale, 8.0)
        self.assertEqual(cfg.snap_radius, 15.0)
        self.assertEqual(cfg.closure_threshold, 20.0)
        self.assertEqual(cfg.collinear_tolerance_degrees, 1.0)
        self.assertEqual(cfg.min_vertices, 3)
        self.assertEqual(cfg.max_vertices, 100)

    def test_unit_conversion(self):
        cfg = GeometryConfig(scale=4)
        self.assertEqual(cfg.to_px(2.5), 10)
        self.assertEqual(cfg.to_real(10), 2.5)

    def test_invalid_values_raise(self):
        for bad in ({"scale": 0}, {"snap_radius": -1}, {"min_vertices": 2},
                    {"min_vertices": 5, "max_vertices": 4}, {"min_edge_length": 10, "max_edge_length": 5},
                    {"unit": ""}, {"scale": "big"}, {"closure_threshold": float("nan")}):
            with self.subTest(bad=bad):
                with self.assertRaises(ConfigError):
                    GeometryConfig(**bad)

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            GeometryConfig(scale=-1)

    def test_with_overrides_keeps_other_fields(self):
        cfg = GeometryConfig(scale=12).with_overrides(snap_radius=20)
        self.assertEqual(cfg.scale, 12)
        self.assertEqual(cfg.snap_radius, 20)


class FromDictTests(unittest.TestCase):
    def test_unknown_keys_are_ignored_with_warning(self):
        with self.assertLogs("floorsketch.core.config", level="WARNING") as logs:
            cfg = GeometryConfig.from_dict({"snap_radius": 20, "panel_width": 4})
        self.assertEqual(cfg.snap_radius, 20)
        self.assertIn("panel_width", logs.output[0])

    def test_whole_floats_accepted_for_vertex_counts(self):
        cfg = GeometryConfig.from_dict({"min_vertices": 4.0, "max_vertices": 50.0})
        self.assertEqual(cfg.min_vertices, 4)
        self.assertIsInstance(cfg.min_vertices, int)

    def test_non_mapping(self):
        with self.assertRaises(ConfigError):
            GeometryConfig.from_dict(["scale", 8])

    def test_to_dict_inverse(self):
        cfg = GeometryConfig(scale=10, unit="m")
        self.assertEqual(GeometryConfig.from_dict(cfg.to_dict()), cfg)


class ConfigFileTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "config.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_and_load(self):
        save_config(GeometryConfig(scale=16, closure_threshold=30), self.path)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["scale"], 16)
        cfg = load_config(self.path)
        self.assertEqual(cfg.scale, 16)
        self.assertEqual(cfg.closure_threshold, 30)

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config(os.path.join(self.tmp.name, "nope.json"))

    def test_invalid_json(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{scale: 8")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_invalid_values_in_file(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"scale": 0}, f)
        with self.assertRaises(ConfigError):
            load_config(self.path)


if __name__ == "__main__":
    unittest.main()

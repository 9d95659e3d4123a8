import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from bindings_partition.algorithms import PartitionAlgorithm
from bindings_partition.config import ENV_CONFIG_PATH, Config, PartitionerSettings
from bindings_partition.errors import UnknownAlgorithm


_YAML = """
partitioner:
  default_algorithm: round_robin
  show_progress: "yes"
  progress_description: bound-join
logger:
  level: DEBUG
  sinks:
    - type: memory
      name: yaml
""".strip()


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "partition.yaml"
        self.path.write_text(_YAML, encoding="utf-8")

    def tearDown(self) -> None:
        Config.set_singleton(None)
        self._tmp.cleanup()

    def test_load_and_get_dotted_keys(self) -> None:
        cfg = Config.load(self.path)
        self.assertEqual(cfg.get("partitioner.default_algorithm", str), "round_robin")
        self.assertTrue(cfg.get("partitioner.show_progress", bool))
        self.assertEqual(cfg.get("logger.sinks", list)[0]["name"], "yaml")
        self.assertEqual(cfg.source, self.path.resolve())

    def test_missing_keys(self) -> None:
        cfg = Config.load(self.path)
        self.assertIsNone(cfg.get("partitioner.unknown"))
        self.assertEqual(cfg.get("partitioner.unknown", int, default=7), 7)
        with self.assertRaises(KeyError):
            cfg.get("nothing.here", required=True)

    def test_defaults_are_merged_under_file_values(self) -> None:
        cfg = Config.load(self.path, defaults={"partitioner": {"show_progress": False, "extra": 1}})
        self.assertTrue(cfg.get("partitioner.show_progress", bool))
        self.assertEqual(cfg.get("partitioner.extra", int), 1)

    def test_type_coercion_and_errors(self) -> None:
        cfg = Config.from_mapping({"a": {"n": "12", "flag": "maybe", "items": [1, 2]}})
        self.assertEqual(cfg.get("a.n", int), 12)
        with self.assertRaises(ValueError):
            cfg.get("a.flag", bool)
        with self.assertRaises(TypeError):
            cfg.get("a.items", dict)

    def test_top_level_must_be_mapping(self) -> None:
        self.path.write_text("- just\n- a list\n", encoding="utf-8")
        with self.assertRaises(TypeError):
            Config.load(self.path)

    def test_empty_file_is_empty_config(self) -> None:
        self.path.write_text("", encoding="utf-8")
        self.assertEqual(Config.load(self.path).export(), {})

    def test_singleton_from_environment(self) -> None:
        Config.set_singleton(None)
        with mock.patch.dict(os.environ, {ENV_CONFIG_PATH: str(self.path)}):
            cfg = Config.get_singleton()
        self.assertEqual(cfg.get("logger.level", str), "DEBUG")
        self.assertIs(Config.get_singleton(), cfg)

    def test_singleton_defaults_to_empty(self) -> None:
        Config.set_singleton(None)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(Config.get_singleton().export(), {})


class PartitionerSettingsTests(unittest.TestCase):
    def tearDown(self) -> None:
        Config.set_singleton(None)

    def test_defaults(self) -> None:
        settings = PartitionerSettings.from_mapping(None)
        self.assertIs(settings.default_algorithm, PartitionAlgorithm.BEST_FIT_DECREASING)
        self.assertFalse(settings.show_progress)
        self.assertEqual(settings.progress_description, "BindingsPartition")

    def test_from_config_singleton(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "partition.yaml"
            path.write_text(_YAML, encoding="utf-8")
            Config.load_singleton(path)
        settings = PartitionerSettings.from_config()
        self.assertIs(settings.default_algorithm, PartitionAlgorithm.ROUND_ROBIN)
        self.assertTrue(settings.show_progress)
        self.assertEqual(settings.progress_description, "bound-join")

    def test_unknown_default_algorithm(self) -> None:
        with self.assertRaises(UnknownAlgorithm):
            PartitionerSettings.from_mapping({"default_algorithm": "first-fit"})

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            PartitionerSettings.from_mapping({"show_progress": "sometimes"})
        with self.assertRaises(ValueError):
            PartitionerSettings.from_mapping({"progress_description": "  "})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

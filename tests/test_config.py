"""
Tests for configuration loading and validation.
"""
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from moodmash.config.settings import (
    AppConfig,
    ConfigManager,
    ConfigValidationError,
    DEFAULT_CONFIG_PATH,
    NetworkConfig,
)
from moodmash.errors import MoodMashError


class TestConfigManager(unittest.TestCase):

    def setUp(self):
        self.manager = ConfigManager()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.env = mock.patch.dict(os.environ, {}, clear=False)
        self.env.start()
        for name in ConfigManager.ENV_MAPPINGS:
            os.environ.pop(name, None)

    def tearDown(self):
        self.env.stop()
        self.temp_dir.cleanup()

    def write_config(self, text: str) -> str:
        path = Path(self.temp_dir.name) / "config.yaml"
        path.write_text(text, encoding='utf-8')
        return str(path)

    def test_shipped_file_matches_defaults(self):
        self.assertEqual(self.manager.load(str(DEFAULT_CONFIG_PATH)), AppConfig())

    def test_defaults_without_file(self):
        config = self.manager.defaults()
        self.assertEqual(config.network.hidden_size, 32)
        self.assertEqual(config.prediction.morning_hours, (5, 11))

    def test_partial_file_keeps_other_defaults(self):
        config = self.manager.load(self.write_config("network:\n  epochs: 5\n  seed: 3\n"))
        self.assertEqual(config.network.epochs, 5)
        self.assertEqual(config.network.seed, 3)
        self.assertEqual(config.network.learning_rate, 0.01)
        self.assertEqual(config.recommendation.default_count, 5)

    def test_empty_file_gives_defaults(self):
        self.assertEqual(self.manager.load(self.write_config("")), AppConfig())

    def test_environment_overrides_file(self):
        path = self.write_config("network:\n  epochs: 5\n")
        os.environ['MOODMASH_EPOCHS'] = '9'
        os.environ['MOODMASH_LOG_LEVEL'] = 'DEBUG'
        config = self.manager.load(path)
        self.assertEqual(config.network.epochs, 9)
        self.assertEqual(config.logging.level, 'DEBUG')

    def test_environment_overrides_defaults(self):
        os.environ['MOODMASH_LEARNING_RATE'] = '0.5'
        self.assertEqual(self.manager.defaults().network.learning_rate, 0.5)

    def test_bad_environment_value(self):
        os.environ['MOODMASH_SEED'] = 'abc'
        with self.assertRaises(ConfigValidationError):
            self.manager.defaults()

    def test_unknown_key_is_rejected(self):
        with self.assertRaises(ConfigValidationError):
            self.manager.load(self.write_config("network:\n  layers: 3\n"))

    def test_config_errors_share_the_engine_base(self):
        with self.assertRaises(MoodMashError) as ctx:
            self.manager.load(self.write_config("recommendation:\n  unknown_limit: 3\n"))
        self.assertIsInstance(ctx.exception, ConfigValidationError)
        self.assertIn("unknown_limit", str(ctx.exception))

    def test_invalid_values_are_rejected(self):
        cases = [
            "network:\n  learning_rate: -1\n",
            "network:\n  input_size: 12\n",
            "prediction:\n  morning_hours: [11, 5]\n",
            "patterns:\n  circadian_threshold: 0\n",
            "logging:\n  level: LOUD\n",
        ]
        for text in cases:
            with self.subTest(text=text):
                with self.assertRaises(ConfigValidationError):
                    self.manager.load(self.write_config(text))

    def test_non_mapping_root_is_rejected(self):
        with self.assertRaises(ConfigValidationError):
            self.manager.load(self.write_config("- a\n- b\n"))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.manager.load(str(Path(self.temp_dir.name) / "absent.yaml"))

    def test_dotted_get(self):
        self.manager.load(str(DEFAULT_CONFIG_PATH))
        self.assertEqual(self.manager.get('network.epochs'), 100)
        with self.assertRaises(KeyError):
            self.manager.get('network.depth')

    def test_get_before_load(self):
        with self.assertRaises(RuntimeError):
            self.manager.get('network.epochs')


class TestNetworkConfig(unittest.TestCase):

    def test_dict_round_trip(self):
        config = NetworkConfig(hidden_size=16, learning_rate=0.05, epochs=7)
        self.assertEqual(NetworkConfig.from_dict(config.to_dict()), config)

    def test_exported_keys(self):
        self.assertEqual(
            set(NetworkConfig().to_dict()),
            {'inputSize', 'hiddenSize', 'outputSize', 'learningRate', 'epochs'},
        )


if __name__ == '__main__':
    unittest.main()

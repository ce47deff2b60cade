import io
import logging
import unittest
from pathlib import Path

from participation_intake.config import (
    ENV_DATA_DIR,
    ENV_LOG_LEVEL,
    ENV_OUTPUT_STAMP,
    ConfigError,
    load_settings,
)
from participation_intake.log import reset_logging, setup_logging


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings({})
        self.assertEqual(settings.data_dir, Path.cwd() / "participation-intake-data")
        self.assertIsNone(settings.output_stamp)
        self.assertEqual(settings.log_level, logging.INFO)

    def test_environment_overrides(self):
        settings = load_settings(
            {ENV_DATA_DIR: "/tmp/intake", ENV_OUTPUT_STAMP: "20260301T010203Z", ENV_LOG_LEVEL: "debug"}
        )
        self.assertEqual(settings.data_dir, Path("/tmp/intake"))
        self.assertEqual(settings.output_stamp, "20260301T010203Z")
        self.assertEqual(settings.log_level, logging.DEBUG)

    def test_invalid_log_level(self):
        with self.assertRaisesRegex(ConfigError, "invalid log level"):
            load_settings({ENV_LOG_LEVEL: "chatty"})


class LoggingSetupTests(unittest.TestCase):
    def tearDown(self):
        reset_logging()

    def test_labeled_prefixes(self):
        stream = io.StringIO()
        setup_logging(logging.INFO, stream=stream)
        logging.getLogger("participation_intake.pipeline").warning("Line %d: odd", 4)
        logging.getLogger("participation_intake.pipeline").debug("hidden")
        self.assertEqual(stream.getvalue(), "WARN Line 4: odd\n")

    def test_setup_is_repeatable(self):
        setup_logging(logging.INFO, stream=io.StringIO())
        logger = setup_logging(logging.DEBUG, stream=io.StringIO())
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()

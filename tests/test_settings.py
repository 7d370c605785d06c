# tests/test_settings.py

"""Tests for Settings constants and environment parsing."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from src.config.settings import (
    ConfigurationError,
    Settings,
    _env_bool,
    _env_float,
)


class TestSettings(unittest.TestCase):
    """Verify Settings values are sane."""

    def test_request_timeout_is_positive_int(self) -> None:
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_fetch_timeout_covers_retries(self) -> None:
        """The outer fetch bound leaves room for every retry."""
        self.assertGreater(
            Settings.FETCH_TIMEOUT,
            Settings.REQUEST_TIMEOUT * Settings.MAX_RETRIES,
        )

    def test_circuit_breaker_threshold_positive(self) -> None:
        self.assertGreater(Settings.CIRCUIT_BREAKER_THRESHOLD, 0)

    def test_extraction_constants(self) -> None:
        self.assertEqual(Settings.CONTEXT_WINDOW, 3000)
        self.assertEqual(Settings.DEFAULT_WAIT_MINUTES, 2.0)
        self.assertEqual(Settings.SERVICE_DURATION_MINUTES, 12.0)
        self.assertEqual(Settings.AVERAGE_LOAD_LITERS, 40.0)
        self.assertEqual(Settings.FUEL_KIND, "G")

    def test_stations_path_exists(self) -> None:
        self.assertIsInstance(Settings.STATIONS_PATH, Path)
        self.assertTrue(Settings.STATIONS_PATH.exists())

    def test_path_constants_are_paths(self) -> None:
        for attr in ("BASE_DIR", "OUTPUT_DIR", "LOGS_DIR"):
            with self.subTest(attr=attr):
                self.assertIsInstance(getattr(Settings, attr), Path)

    def test_default_headers_spanish(self) -> None:
        self.assertIn("es-ES", Settings.DEFAULT_HEADERS["Accept-Language"])


class TestEnvParsing(unittest.TestCase):
    """Helpers reading typed values from the environment."""

    def test_env_bool_truthy(self) -> None:
        for raw in ("1", "true", "TRUE", " yes ", "on"):
            with self.subTest(raw=raw):
                with patch.dict(os.environ, {"FLAG": raw}):
                    self.assertTrue(_env_bool("FLAG", False))

    def test_env_bool_falsy(self) -> None:
        with patch.dict(os.environ, {"FLAG": "false"}):
            self.assertFalse(_env_bool("FLAG", True))

    def test_env_bool_default(self) -> None:
        with patch.dict(os.environ, {"FLAG": "  "}):
            self.assertTrue(_env_bool("FLAG", True))
        with patch.dict(os.environ, {}, clear=True):
            self.assertFalse(_env_bool("FLAG", False))

    def test_env_float(self) -> None:
        with patch.dict(os.environ, {"NUM": "1500"}):
            self.assertEqual(_env_float("NUM", 1000.0), 1500.0)

    def test_env_float_garbled_uses_default(self) -> None:
        with patch.dict(os.environ, {"NUM": "mil"}):
            self.assertEqual(_env_float("NUM", 1000.0), 1000.0)


class TestRequireNotifier(unittest.TestCase):
    """Startup validation of Telegram credentials."""

    def test_missing_credentials(self) -> None:
        with patch.object(Settings, "TELEGRAM_BOT_TOKEN", ""), \
                patch.object(Settings, "TELEGRAM_CHAT_ID", ""):
            with self.assertRaises(ConfigurationError) as ctx:
                Settings.require_notifier()
        self.assertIn("TELEGRAM_BOT_TOKEN", str(ctx.exception))
        self.assertIn("TELEGRAM_CHAT_ID", str(ctx.exception))

    def test_configured(self) -> None:
        with patch.object(Settings, "TELEGRAM_BOT_TOKEN", "1:A"), \
                patch.object(Settings, "TELEGRAM_CHAT_ID", "42"):
            Settings.require_notifier()


if __name__ == "__main__":
    unittest.main()

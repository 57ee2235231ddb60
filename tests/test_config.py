import os
import unittest
from unittest.mock import patch

from invoice_pdf.config import Settings, env_bool, env_int


class EnvHelperTests(unittest.TestCase):
    def test_env_int_uses_default_for_missing_or_invalid_values(self) -> None:
        with patch.dict(os.environ, {"X_INT": "abc"}, clear=True):
            self.assertEqual(env_int("X_INT", 5), 5)
            self.assertEqual(env_int("X_MISSING", 7), 7)

    def test_env_int_enforces_minimum(self) -> None:
        with patch.dict(os.environ, {"X_INT": "0"}, clear=True):
            self.assertEqual(env_int("X_INT", 5, minimum=1), 5)
            self.assertEqual(env_int("X_INT", 5, minimum=0), 0)

    def test_env_bool_parses_common_spellings(self) -> None:
        with patch.dict(os.environ, {"A": "yes", "B": "0", "C": "maybe"}, clear=True):
            self.assertTrue(env_bool("A"))
            self.assertFalse(env_bool("B"))
            self.assertIsNone(env_bool("C"))
            self.assertTrue(env_bool("MISSING", True))


class SettingsTests(unittest.TestCase):
    def test_defaults_are_production(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()

        self.assertFalse(settings.is_development)
        self.assertFalse(settings.is_serverless)
        self.assertIsNone(settings.headless_override)
        self.assertEqual(settings.navigation_timeout_ms, 30000)
        self.assertEqual(settings.conversion_timeout_ms, 30000)
        self.assertIsNone(settings.sentry_dsn)

    def test_development_flag(self) -> None:
        with patch.dict(os.environ, {"INVOICE_ENV": "Development"}, clear=True):
            self.assertTrue(Settings.from_env().is_development)
        with patch.dict(os.environ, {"APP_ENV": "development"}, clear=True):
            self.assertTrue(Settings.from_env().is_development)

    def test_serverless_detected_from_vercel_marker(self) -> None:
        with patch.dict(os.environ, {"VERCEL": "1"}, clear=True):
            self.assertTrue(Settings.from_env().is_serverless)

    def test_explicit_serverless_flag_wins(self) -> None:
        with patch.dict(os.environ, {"VERCEL": "1", "INVOICE_SERVERLESS": "false"}, clear=True):
            self.assertFalse(Settings.from_env().is_serverless)

    def test_server_values(self) -> None:
        env = {
            "INVOICE_HOST": "127.0.0.1",
            "INVOICE_PORT": "9000",
            "INVOICE_HEADLESS": "true",
            "SENTRY_DSN": "https://key@sentry.example/1",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.host, "127.0.0.1")
        self.assertEqual(settings.port, 9000)
        self.assertTrue(settings.headless_override)
        self.assertEqual(settings.sentry_dsn, "https://key@sentry.example/1")


if __name__ == "__main__":
    unittest.main()

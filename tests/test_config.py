"""Tests for client and server configuration, and logging setup."""

import importlib
import json
import logging
import os
import tempfile
import unittest
from unittest import mock

from client.config import (
    API_URL_ENV,
    DEFAULTS,
    load_config,
    resolve_api_url,
    resolve_origin,
)


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("api_url", "origin"):
            self.assertIn(key, DEFAULTS)
        self.assertEqual(DEFAULTS["api_url"], "http://localhost:5000/api")


class TestLoadSaveConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["api_url"], "http://localhost:5000/api")

    def test_file_overrides_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump({"api_url": "http://box:9000/api", "plan": 100}, fh)
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["api_url"], "http://box:9000/api")
                # Defaults still present, unknown keys dropped
                self.assertEqual(cfg["origin"], "http://localhost:5000")
                self.assertNotIn("plan", cfg)

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["api_url"], "http://localhost:5000/api")

    def test_resolve_origin(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump({"origin": "https://speed.example.org"}, fh)
            with mock.patch("client.config._config_path", return_value=path):
                self.assertEqual(resolve_origin(), "https://speed.example.org")


class TestResolveApiUrl(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        path = os.path.join(self._tmp.name, "config.json")
        with open(path, "w", encoding="utf-8") as fh:
            json.dump({"api_url": "http://from-file/api"}, fh)
        self._patch = mock.patch("client.config._config_path", return_value=path)
        self._patch.start()

    def tearDown(self):
        self._patch.stop()
        self._tmp.cleanup()

    def test_cli_wins(self):
        with mock.patch.dict(os.environ, {API_URL_ENV: "http://from-env/api"}):
            self.assertEqual(resolve_api_url("http://from-cli/api"), "http://from-cli/api")

    def test_env_over_file(self):
        with mock.patch.dict(os.environ, {API_URL_ENV: "http://from-env/api"}):
            self.assertEqual(resolve_api_url(), "http://from-env/api")

    def test_file_fallback(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_api_url(), "http://from-file/api")


class TestServerConfig(unittest.TestCase):
    def test_defaults(self):
        import server.config as config_mod

        with mock.patch.dict(os.environ, {}, clear=True):
            importlib.reload(config_mod)
            self.assertEqual(config_mod.Config.PORT, 5000)
            self.assertEqual(config_mod.Config.HOST, "0.0.0.0")
            self.assertEqual(config_mod.Config.CORS_ORIGIN, "http://localhost:5173")
            self.assertEqual(config_mod.Config.LOG_FILE, "")
        importlib.reload(config_mod)

    def test_env_override(self):
        import server.config as config_mod

        env = {"PORT": "8088", "CORS_ORIGIN": "https://app.example"}
        with mock.patch.dict(os.environ, env):
            importlib.reload(config_mod)
            self.assertEqual(config_mod.Config.PORT, 8088)
            self.assertEqual(config_mod.Config.CORS_ORIGIN, "https://app.example")
        importlib.reload(config_mod)


class TestLoggingConfig(unittest.TestCase):
    def test_logging_setup(self):
        from server import logging_config

        try:
            logging_config.setup_logging("DEBUG", log_file="")
        except Exception as e:
            self.fail(f"setup_logging() raised {e}")
        logger = logging.getLogger()
        self.assertTrue(logger.hasHandlers())
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler(self):
        from server.logging_config import build_logging_config

        cfg = build_logging_config("INFO", log_file="logs/speedcheck.log")
        self.assertIn("file", cfg["handlers"])
        self.assertEqual(cfg["root"]["handlers"], ["console", "file"])

    def test_console_only(self):
        from server.logging_config import build_logging_config

        cfg = build_logging_config("INFO")
        self.assertEqual(cfg["root"]["handlers"], ["console"])
        self.assertEqual(cfg["handlers"]["console"]["class"], "rich.logging.RichHandler")


if __name__ == "__main__":
    unittest.main()

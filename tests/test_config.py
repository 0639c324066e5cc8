from __future__ import annotations

"""Tests for configuration helpers."""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from transmission_notifier.config import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WAIT_LIST_KEY,
    AppConfig,
    ConfigError,
    ConfigLoader,
    MonitorConfig,
)


class ConfigLoaderTests(unittest.TestCase):
    """Exercises ConfigLoader on good files, bad files and CLI overrides."""

    def _write_config(self, data) -> Path:
        temp_dir = tempfile.mkdtemp()
        path = Path(temp_dir) / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_load_valid_config(self) -> None:
        payload = {
            "telegram": {"bot_token": "TOKEN", "allowed_users": ["@alice", "bob"]},
            "transmission": {"host": "nas", "port": 9092, "username": "u", "password": "p"},
            "redis": {"url": "redis://cache:6379/1"},
            "monitor": {"poll_interval": 2.5},
        }
        config = ConfigLoader(self._write_config(payload)).load()
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.telegram.allowed_users, ["alice", "bob"])
        self.assertEqual(config.transmission.host, "nas")
        self.assertEqual(config.transmission.port, 9092)
        self.assertEqual(config.redis.url, "redis://cache:6379/1")
        self.assertEqual(config.redis.wait_list_key, DEFAULT_WAIT_LIST_KEY)
        self.assertEqual(config.monitor.poll_interval, 2.5)

    def test_empty_object_uses_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = ConfigLoader(self._write_config({})).load()
        self.assertEqual(config.transmission.port, 9091)
        self.assertEqual(config.transmission.path, "/transmission/rpc")
        self.assertEqual(config.monitor.poll_interval, DEFAULT_POLL_INTERVAL)
        self.assertEqual(config.telegram.allowed_users, [])

    def test_redis_url_falls_back_to_environment(self) -> None:
        with patch.dict(os.environ, {"REDIS_URL": "redis://env:6379/0"}):
            config = ConfigLoader(self._write_config({})).load()
        self.assertEqual(config.redis.url, "redis://env:6379/0")

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigError):
            ConfigLoader(Path(tempfile.mkdtemp()) / "nope.json").load()

    def test_invalid_json_raises(self) -> None:
        path = Path(tempfile.mkdtemp()) / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ConfigError):
            ConfigLoader(path).load()

    def test_non_positive_poll_interval_rejected(self) -> None:
        with self.assertRaises(ConfigError):
            MonitorConfig.from_dict({"poll_interval": 0})

    def test_allowed_users_must_be_a_list(self) -> None:
        loader = ConfigLoader(self._write_config({"telegram": {"allowed_users": "alice"}}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_unknown_protocol_rejected(self) -> None:
        loader = ConfigLoader(self._write_config({"transmission": {"protocol": "ftp"}}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_apply_overrides_respects_none_values(self) -> None:
        config = AppConfig()
        config.transmission.host = "localhost"

        overrides = {
            "host": "192.168.1.2",
            "port": None,
            "redis_url": None,
            "poll_interval": 5,
        }
        updated = ConfigLoader.apply_overrides(config, overrides)
        self.assertEqual(updated.transmission.host, "192.168.1.2")
        self.assertEqual(updated.transmission.port, 9091)
        self.assertEqual(updated.monitor.poll_interval, 5.0)

    def test_resolve_token_prefers_config_then_environment(self) -> None:
        config = AppConfig()
        with patch.dict(os.environ, {"TELEGRAM_TOKEN": "ENV"}):
            self.assertEqual(ConfigLoader.resolve_token(config), "ENV")
            config.telegram.bot_token = "FILE"
            self.assertEqual(ConfigLoader.resolve_token(config), "FILE")

    def test_resolve_token_missing_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                ConfigLoader.resolve_token(AppConfig())


if __name__ == "__main__":
    unittest.main()

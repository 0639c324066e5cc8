from __future__ import annotations

"""
Configuration plumbing for Transmission Notifier.

Reads one JSON file, fills in the gaps from the environment and refuses to
start when something important is missing.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

DEFAULT_RPC_PATH = "/transmission/rpc"
DEFAULT_RPC_TIMEOUT = 30.0
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_WAIT_LIST_KEY = "transmission_notifier:wait_list"
DEFAULT_POLL_INTERVAL = 1.0


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or makes no sense."""


@dataclass
class TelegramConfig:
    """Bot credentials and the usernames allowed to talk to it."""

    bot_token: Optional[str] = None
    allowed_users: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TelegramConfig":
        """
        Build the Telegram section.

        Parameters
        ----------
        data : dict[str, Any] | None
            The ``telegram`` chunk of the config file, if any.

        Returns
        -------
        TelegramConfig
            Token (possibly ``None``) and the normalized allow-list.

        Raises
        ------
        ConfigError
            If ``allowed_users`` is not a list.
        """

        if data is None:
            return cls()
        users = data.get("allowed_users", [])
        if not isinstance(users, list):
            raise ConfigError("telegram.allowed_users must be a list of usernames")
        return cls(
            bot_token=data.get("bot_token"),
            allowed_users=[str(user).lstrip("@") for user in users],
        )


@dataclass
class TransmissionConfig:
    """Where the Transmission RPC endpoint lives and how to log into it."""

    host: str = "localhost"
    port: int = 9091
    path: str = DEFAULT_RPC_PATH
    protocol: str = "http"
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = DEFAULT_RPC_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransmissionConfig":
        """
        Build a TransmissionConfig from a JSON blob.

        Parameters
        ----------
        data : dict[str, Any] | None
            Configuration chunk dedicated to Transmission.

        Returns
        -------
        TransmissionConfig
            The settings TransmissionController expects.

        Raises
        ------
        ConfigError
            If the port or timeout are not numbers, or the protocol is unknown.
        """

        if data is None:
            return cls()
        try:
            port = int(data.get("port", 9091))
            timeout = float(data.get("timeout", DEFAULT_RPC_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid Transmission setting: {exc}") from exc

        protocol = str(data.get("protocol", "http")).lower()
        if protocol not in ("http", "https"):
            raise ConfigError(f"Unsupported Transmission protocol: {protocol}")

        return cls(
            host=data.get("host", "localhost"),
            port=port,
            path=data.get("path", DEFAULT_RPC_PATH),
            protocol=protocol,
            username=data.get("username"),
            password=data.get("password"),
            timeout=timeout,
        )


@dataclass
class RedisConfig:
    """Connection URL and hash key that hold the wait list."""

    url: str = DEFAULT_REDIS_URL
    wait_list_key: str = DEFAULT_WAIT_LIST_KEY

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RedisConfig":
        data = data or {}
        return cls(
            url=data.get("url") or os.environ.get("REDIS_URL") or DEFAULT_REDIS_URL,
            wait_list_key=data.get("wait_list_key", DEFAULT_WAIT_LIST_KEY),
        )


@dataclass
class MonitorConfig:
    """Cadence of the wait-list reconciliation loop."""

    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MonitorConfig":
        """
        Create the monitor section.

        Raises
        ------
        ConfigError
            If the interval is not a positive number of seconds.
        """

        if data is None:
            return cls()
        try:
            interval = float(data.get("poll_interval", DEFAULT_POLL_INTERVAL))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid monitor.poll_interval: {exc}") from exc
        if interval <= 0:
            raise ConfigError("monitor.poll_interval must be greater than zero")
        return cls(poll_interval=interval)


@dataclass
class LoggingConfig:
    """Lightweight logging configuration."""

    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "LoggingConfig":
        if data is None:
            return cls()
        return cls(level=str(data.get("level", "INFO")).upper())


@dataclass
class AppConfig:
    """Every section the bot and the CLI need, bundled together."""

    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    transmission: TransmissionConfig = field(default_factory=TransmissionConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        """
        Stitch together the full configuration set from JSON.

        Parameters
        ----------
        data : dict[str, Any]
            Entire configuration payload.

        Returns
        -------
        AppConfig
            Everything the app needs to know.

        Raises
        ------
        ConfigError
            If the payload is not an object or a section is malformed.
        """

        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a JSON object")

        return cls(
            telegram=TelegramConfig.from_dict(data.get("telegram")),
            transmission=TransmissionConfig.from_dict(data.get("transmission")),
            redis=RedisConfig.from_dict(data.get("redis")),
            monitor=MonitorConfig.from_dict(data.get("monitor")),
            logging=LoggingConfig.from_dict(data.get("logging")),
        )


class ConfigLoader:
    """Loads application configuration from JSON files."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> AppConfig:
        """
        Read and validate the configuration file.

        Returns
        -------
        AppConfig
            The fully parsed configuration bundle.

        Raises
        ------
        ConfigError
            When the file is missing or invalid.
        """

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Configuration file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON configuration: {exc.msg}") from exc

        return AppConfig.from_dict(payload)

    @staticmethod
    def apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> AppConfig:
        """
        Update the in-memory configuration with CLI overrides.

        ``None`` values mean "not given on the command line" and leave the
        file setting alone.

        Raises
        ------
        ConfigError
            If the overridden poll interval is not positive.
        """

        tx = config.transmission

        if overrides.get("token"):
            config.telegram.bot_token = overrides["token"]
        if overrides.get("host"):
            tx.host = overrides["host"]
        if overrides.get("port") is not None:
            tx.port = int(overrides["port"])
        if overrides.get("username") is not None:
            tx.username = overrides["username"]
        if overrides.get("password") is not None:
            tx.password = overrides["password"]
        if overrides.get("redis_url"):
            config.redis.url = overrides["redis_url"]
        if overrides.get("poll_interval") is not None:
            interval = float(overrides["poll_interval"])
            if interval <= 0:
                raise ConfigError("Poll interval must be greater than zero")
            config.monitor.poll_interval = interval

        return config

    @staticmethod
    def resolve_token(config: AppConfig) -> str:
        """
        Pick the bot token from the config or the ``TELEGRAM_TOKEN`` variable.

        Raises
        ------
        ConfigError
            If neither provides one.
        """

        token = config.telegram.bot_token or os.environ.get("TELEGRAM_TOKEN")
        if not token:
            raise ConfigError("Provide a Telegram token via --token, telegram.bot_token, or TELEGRAM_TOKEN env var.")
        return token

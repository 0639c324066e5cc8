from __future__ import annotations

"""
Convenience imports for the Transmission Notifier package.
"""

from .config import AppConfig, ConfigError, ConfigLoader, MonitorConfig, RedisConfig, TelegramConfig, TransmissionConfig
from .errors import NotifierError, PollingError, StoreError, SubmissionError, UnknownStatusError
from .models import COMPLETION_THRESHOLD, AddedTorrent, Classification, TorrentSnapshot, TorrentStatus, WaitListEntry
from .monitor import PassResult, WaitListMonitor
from .submission import SubmissionHandler
from .transmission import TransmissionController
from .wait_list import WaitListStore

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigLoader",
    "MonitorConfig",
    "RedisConfig",
    "TelegramConfig",
    "TransmissionConfig",
    "NotifierError",
    "PollingError",
    "StoreError",
    "SubmissionError",
    "UnknownStatusError",
    "COMPLETION_THRESHOLD",
    "AddedTorrent",
    "Classification",
    "TorrentSnapshot",
    "TorrentStatus",
    "WaitListEntry",
    "PassResult",
    "WaitListMonitor",
    "SubmissionHandler",
    "TransmissionController",
    "WaitListStore",
]

"""
Telegram bot components for transmission_notifier.
"""

from .controller import TelegramNotifierController, TORRENT_MIME_TYPE
from .messages import MessageFactory, STATUS_LABELS
from .notifier import TelegramNotifier

__all__ = [
    "TelegramNotifierController",
    "TORRENT_MIME_TYPE",
    "MessageFactory",
    "STATUS_LABELS",
    "TelegramNotifier",
]

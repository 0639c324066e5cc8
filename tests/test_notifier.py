from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

from telegram.error import Forbidden, NetworkError

from transmission_notifier.telegram.notifier import TelegramNotifier


def test_notify_sends_message() -> None:
    bot = MagicMock()
    bot.send_message = AsyncMock()
    delivered = asyncio.run(TelegramNotifier(bot).notify(555, "hello"))
    assert delivered is True
    bot.send_message.assert_awaited_once_with(chat_id=555, text="hello")


def test_notify_swallows_telegram_errors() -> None:
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=NetworkError("timed out"))
    assert asyncio.run(TelegramNotifier(bot).notify(555, "hello")) is False

    bot.send_message = AsyncMock(side_effect=Forbidden("bot was blocked by the user"))
    assert asyncio.run(TelegramNotifier(bot).notify(555, "hello")) is False


def test_notify_skips_missing_recipient() -> None:
    bot = MagicMock()
    bot.send_message = AsyncMock()
    assert asyncio.run(TelegramNotifier(bot).notify(0, "hello")) is False
    bot.send_message.assert_not_awaited()

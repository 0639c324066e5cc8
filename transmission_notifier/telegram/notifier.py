import logging
from typing import Any, Optional

from telegram.error import TelegramError

LOGGER = logging.getLogger(__name__)


class TelegramNotifier:
    """Fire-and-forget text delivery to a Telegram chat."""

    def __init__(self, bot: Any) -> None:
        self._bot = bot

    async def notify(self, recipient_id: Optional[int], text: str) -> bool:
        """Send ``text``; returns ``False`` instead of raising when Telegram says no."""
        if not recipient_id:
            LOGGER.warning("No chat to notify for message %r", text)
            return False
        try:
            await self._bot.send_message(chat_id=recipient_id, text=text)
        except TelegramError as exc:
            LOGGER.warning("Could not notify chat %s: %s", recipient_id, exc)
            return False
        return True

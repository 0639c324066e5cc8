import asyncio
import logging
from typing import Any, Iterable, Optional

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from transmission_notifier.errors import SubmissionError
from transmission_notifier.submission import SubmissionHandler
from transmission_notifier.transmission import TransmissionController

from .messages import MessageFactory

LOGGER = logging.getLogger(__name__)

TORRENT_MIME_TYPE = "application/x-bittorrent"
RECENT_LIMIT = 10


class TelegramNotifierController:
    """Bridges Telegram updates to Transmission and the wait list."""

    def __init__(
        self,
        transmission: TransmissionController,
        submissions: SubmissionHandler,
        messages: MessageFactory,
        allowed_users: Iterable[str] = (),
    ) -> None:
        self._transmission = transmission
        self._submissions = submissions
        self._messages = messages
        self._allowed_users = {user.lstrip("@").lower() for user in allowed_users}

    async def handle_start(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        if not await self._authorize(update):
            return
        await self._reply(update, self._messages.WELCOME)

    async def handle_help(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        if not await self._authorize(update):
            return
        await self._reply(update, self._messages.HELP)

    async def handle_list(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        if not await self._authorize(update):
            return
        loop = asyncio.get_running_loop()
        try:
            torrents = await loop.run_in_executor(None, self._transmission.list_recent, RECENT_LIMIT)
        except Exception as exc:
            LOGGER.exception("Failed to list Transmission torrents")
            await self._reply(update, self._messages.error(exc))
            return
        await self._reply(update, self._messages.format_recent(torrents))

    async def handle_document(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not await self._authorize(update):
            return

        message = update.message
        document = message.document if message else None
        if not document or document.mime_type != TORRENT_MIME_TYPE:
            LOGGER.debug("Ignoring message without a torrent file.")
            return

        chat_id = update.effective_chat.id if update.effective_chat else None
        if not chat_id:
            LOGGER.debug("Skipping torrent without chat.")
            return

        try:
            url = await self._resolve_file_url(context.bot, document.file_id)
            added = await self._submissions.submit(url, chat_id)
        except SubmissionError as exc:
            LOGGER.warning("Submission from chat %s failed: %s", chat_id, exc)
            await self._reply(update, self._messages.error(exc))
            return

        await self._reply(update, self._messages.torrent_added(added.name))

    @staticmethod
    async def _resolve_file_url(bot: Any, file_id: str) -> str:
        try:
            tg_file = await bot.get_file(file_id)
        except TelegramError as exc:
            raise SubmissionError(f"Could not fetch the torrent file: {exc}") from exc
        url = getattr(tg_file, "file_path", None)
        if not url:
            raise SubmissionError("Telegram did not return a download link for the torrent file")
        return url

    async def _reply(self, update: Update, text: str) -> None:
        message = update.message
        if not message and update.callback_query:
            message = update.callback_query.message
        if not message:
            return
        try:
            await message.reply_text(text)
        except TelegramError as exc:
            LOGGER.warning("Could not reply in chat %s: %s", message.chat_id, exc)

    async def _authorize(self, update: Update) -> bool:
        username = self._username(update)
        if username and username.lower() in self._allowed_users:
            return True
        LOGGER.warning("Access denied for chat %s (user %s)", self._chat_id(update), username)
        await self._reply(update, self._messages.NOT_AUTHENTICATED)
        return False

    @staticmethod
    def _username(update: Update) -> Optional[str]:
        if update.effective_user and update.effective_user.username:
            return update.effective_user.username
        if update.effective_chat:
            return update.effective_chat.username
        return None

    @staticmethod
    def _chat_id(update: Update) -> Optional[int]:
        return update.effective_chat.id if update.effective_chat else None

import logging
from typing import Dict, List

from transmission_notifier.errors import UnknownStatusError
from transmission_notifier.models import TorrentSnapshot, TorrentStatus

LOGGER = logging.getLogger(__name__)

STATUS_LABELS: Dict[TorrentStatus, str] = {
    TorrentStatus.STOPPED: "🚫 Stopped",
    TorrentStatus.CHECK_QUEUED: "❓ Checking",
    TorrentStatus.CHECKING: "❓ Checking",
    TorrentStatus.DOWNLOAD_QUEUED: "⬇️ Downloading",
    TorrentStatus.DOWNLOADING: "⬇️ Downloading",
    TorrentStatus.SEED_QUEUED: "⬆️ Seeding",
    TorrentStatus.SEEDING: "⬆️ Seeding",
    TorrentStatus.UNREACHABLE: "😞 Cannot find peers",
}

_missing = set(TorrentStatus) - set(STATUS_LABELS)
if _missing:
    raise RuntimeError(f"No status label for {sorted(_missing)}")


class MessageFactory:
    WELCOME = "Welcome"
    HELP = "Send me a torrent"
    NOT_AUTHENTICATED = "You are not authenticated to this bot"

    @staticmethod
    def status_label(status: int) -> str:
        """Label for a status ordinal; raises UnknownStatusError for anything unnamed."""
        return STATUS_LABELS[TorrentStatus.parse(status)]

    @staticmethod
    def torrent_finished(name: str) -> str:
        return f'✅ Torrent finished "{name}"'

    @staticmethod
    def torrent_added(name: str) -> str:
        return f'Added "{name}"'

    @staticmethod
    def error(exc: Exception) -> str:
        return f"Error: {exc}"

    def format_recent(self, torrents: List[TorrentSnapshot]) -> str:
        lines = []
        for idx, torrent in enumerate(torrents, start=1):
            try:
                label = self.status_label(torrent.status)
            except UnknownStatusError:
                LOGGER.warning("Torrent %s has unknown status %s", torrent.torrent_id, torrent.status)
                label = f"❔ Unknown status ({torrent.status})"
            lines.append(f"\n{idx}. {label}\n  {torrent.name}")
        return "Recent torrents (up to 10):\n" + "\n".join(lines)

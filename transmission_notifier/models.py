from __future__ import annotations

"""
Data models for Transmission Notifier.

Just enough structure to describe what sits in the wait list and what
Transmission says about it.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from .errors import UnknownStatusError


class TorrentStatus(IntEnum):
    """Status ordinals reported by the Transmission RPC ``status`` field."""

    STOPPED = 0
    CHECK_QUEUED = 1
    CHECKING = 2
    DOWNLOAD_QUEUED = 3
    DOWNLOADING = 4
    SEED_QUEUED = 5
    SEEDING = 6
    UNREACHABLE = 7

    @classmethod
    def parse(cls, value: object) -> "TorrentStatus":
        """
        Convert a raw ordinal into a member.

        Raises
        ------
        UnknownStatusError
            When the value is not one of the known ordinals.
        """

        try:
            return cls(int(value))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise UnknownStatusError(value) from exc


# Anything at or past this ordinal counts as a finished download.
COMPLETION_THRESHOLD = TorrentStatus.SEEDING


class Classification(str, Enum):
    """What a reconciliation pass decided about one wait-listed torrent."""

    PENDING = "pending"
    FINISHED = "finished"
    VANISHED = "vanished"


@dataclass(frozen=True)
class WaitListEntry:
    torrent_id: int
    recipient_id: int


@dataclass(frozen=True)
class AddedTorrent:
    """The id and display name Transmission assigned to a freshly added torrent."""

    torrent_id: int
    name: str


@dataclass(frozen=True)
class TorrentSnapshot:
    """One torrent as Transmission reported it at query time."""

    torrent_id: int
    status: int
    name: str
    added_date: Optional[float] = None

    @property
    def is_finished(self) -> bool:
        return self.status >= COMPLETION_THRESHOLD

    def classify(self) -> Classification:
        return Classification.FINISHED if self.is_finished else Classification.PENDING

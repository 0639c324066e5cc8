from __future__ import annotations

import pytest

from transmission_notifier.errors import UnknownStatusError
from transmission_notifier.models import TorrentSnapshot, TorrentStatus
from transmission_notifier.telegram.messages import STATUS_LABELS, MessageFactory


def test_every_status_has_a_label() -> None:
    assert set(STATUS_LABELS) == set(TorrentStatus)


@pytest.mark.parametrize(
    "status, label",
    [
        (0, "🚫 Stopped"),
        (2, "❓ Checking"),
        (4, "⬇️ Downloading"),
        (6, "⬆️ Seeding"),
        (7, "😞 Cannot find peers"),
    ],
)
def test_status_label(status: int, label: str) -> None:
    assert MessageFactory.status_label(status) == label


def test_unknown_status_is_rejected() -> None:
    with pytest.raises(UnknownStatusError):
        MessageFactory.status_label(9)
    with pytest.raises(UnknownStatusError):
        MessageFactory.status_label(None)  # type: ignore[arg-type]


def test_finished_message_quotes_the_name() -> None:
    assert MessageFactory.torrent_finished("X") == '✅ Torrent finished "X"'


def test_format_recent_numbers_entries_and_flags_unknown_status() -> None:
    report = MessageFactory().format_recent(
        [
            TorrentSnapshot(torrent_id=2, status=4, name="Newest"),
            TorrentSnapshot(torrent_id=1, status=42, name="Odd"),
        ]
    )
    assert report.startswith("Recent torrents (up to 10):\n")
    assert "\n1. ⬇️ Downloading\n  Newest" in report
    assert "\n2. ❔ Unknown status (42)\n  Odd" in report

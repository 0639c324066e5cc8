from __future__ import annotations

"""Tests for the all-or-nothing submission path."""

import unittest
from unittest.mock import MagicMock

from fakes import FakeRedis
from transmission_notifier.errors import SubmissionError
from transmission_notifier.models import AddedTorrent
from transmission_notifier.submission import SubmissionHandler
from transmission_notifier.wait_list import WaitListStore


class SubmissionHandlerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.redis = FakeRedis()
        self.store = WaitListStore(self.redis, key="test:wait_list")
        self.transmission = MagicMock()
        self.handler = SubmissionHandler(self.transmission, self.store)

    async def test_successful_submission_wait_lists_the_torrent(self) -> None:
        self.transmission.add_url.return_value = AddedTorrent(torrent_id=17, name="X")

        added = await self.handler.submit("https://example.com/x.torrent", 555)

        self.assertEqual(added.name, "X")
        self.transmission.add_url.assert_called_once_with("https://example.com/x.torrent")
        self.assertEqual(await self.store.get_all_snapshot(), {17: 555})

    async def test_resubmission_by_another_chat_overwrites(self) -> None:
        self.transmission.add_url.return_value = AddedTorrent(torrent_id=17, name="X")
        await self.handler.submit("https://example.com/x.torrent", 555)
        await self.handler.submit("https://example.com/x.torrent", 777)
        self.assertEqual(await self.store.get_all_snapshot(), {17: 777})

    async def test_transmission_rejection_stores_nothing(self) -> None:
        self.transmission.add_url.side_effect = SubmissionError("invalid or corrupt torrent file")
        with self.assertRaises(SubmissionError):
            await self.handler.submit("https://example.com/bad.torrent", 555)
        self.assertEqual(await self.store.get_all_snapshot(), {})

    async def test_unexpected_failure_is_reported_as_submission_error(self) -> None:
        self.transmission.add_url.side_effect = RuntimeError("boom")
        with self.assertRaises(SubmissionError):
            await self.handler.submit("https://example.com/x.torrent", 555)
        self.assertEqual(await self.store.get_all_snapshot(), {})

    async def test_store_failure_is_reported_as_submission_error(self) -> None:
        self.transmission.add_url.return_value = AddedTorrent(torrent_id=17, name="X")
        self.redis.go_down()
        with self.assertRaises(SubmissionError):
            await self.handler.submit("https://example.com/x.torrent", 555)
        self.redis.come_back()
        self.assertEqual(await self.store.get_all_snapshot(), {})

    async def test_empty_url_never_reaches_transmission(self) -> None:
        with self.assertRaises(SubmissionError):
            await self.handler.submit("", 555)
        self.transmission.add_url.assert_not_called()


if __name__ == "__main__":
    unittest.main()

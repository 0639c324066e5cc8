from __future__ import annotations

"""Adds a torrent to Transmission and puts its id on the wait list."""

import asyncio
import logging

from .errors import StoreError, SubmissionError
from .models import AddedTorrent
from .transmission import TransmissionController
from .wait_list import WaitListStore

LOGGER = logging.getLogger(__name__)


class SubmissionHandler:
    """All-or-nothing submission: nothing is wait-listed unless Transmission took the torrent."""

    def __init__(self, transmission: TransmissionController, wait_list: WaitListStore) -> None:
        self._transmission = transmission
        self._wait_list = wait_list

    async def submit(self, url: str, recipient_id: int) -> AddedTorrent:
        """
        Add ``url`` to Transmission and remember who wants to hear about it.

        Parameters
        ----------
        url : str
            A resolved, fetchable torrent URL.
        recipient_id : int
            Chat that gets the "finished" message.

        Returns
        -------
        AddedTorrent
            Id and display name, for the reply to the user.

        Raises
        ------
        SubmissionError
            On any failure. The user has to resubmit; nothing is retried here.
        """

        if not url:
            raise SubmissionError("No torrent URL to submit")

        loop = asyncio.get_running_loop()
        try:
            added = await loop.run_in_executor(None, self._transmission.add_url, url)
        except SubmissionError:
            LOGGER.warning("Transmission rejected torrent for chat %s", recipient_id, exc_info=True)
            raise
        except Exception as exc:
            LOGGER.exception("Unexpected failure while adding torrent for chat %s", recipient_id)
            raise SubmissionError(str(exc)) from exc

        try:
            await self._wait_list.put(added.torrent_id, recipient_id)
        except StoreError as exc:
            LOGGER.error("Torrent %s added but could not be wait-listed: %s", added.torrent_id, exc)
            raise SubmissionError(str(exc)) from exc

        LOGGER.info("Chat %s is waiting for torrent %s (%s)", recipient_id, added.torrent_id, added.name)
        return added

from __future__ import annotations

"""
The wait-list monitor.

Every ``interval_seconds`` after the previous pass ends, it snapshots the
wait list, asks Transmission about exactly those ids, prunes the ones
Transmission forgot, and tells each recipient when their torrent is done.

Notification happens before removal, so a crash in between repeats the
message on the next pass.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from .config import DEFAULT_POLL_INTERVAL
from .models import Classification
from .telegram.messages import MessageFactory
from .transmission import TransmissionController
from .wait_list import WaitListStore

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    async def notify(self, recipient_id: Optional[int], text: str) -> bool:
        ...


@dataclass
class PassResult:
    """Outcome of one reconciliation pass."""

    checked: int = 0
    pending: List[int] = field(default_factory=list)
    finished: List[int] = field(default_factory=list)
    vanished: List[int] = field(default_factory=list)
    notified: int = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def idle(self) -> bool:
        """True when the wait list was empty and Transmission was never asked."""
        return self.ok and self.checked == 0


class WaitListMonitor:
    """Polls Transmission for wait-listed torrents and notifies Telegram."""

    def __init__(
        self,
        wait_list: WaitListStore,
        transmission: TransmissionController,
        notifier: Notifier,
        messages: Optional[MessageFactory] = None,
        interval_seconds: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._wait_list = wait_list
        self._transmission = transmission
        self._notifier = notifier
        self._messages = messages or MessageFactory()
        self._interval = interval_seconds
        self._poll_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.passes = 0
        self.failed_passes = 0
        self.last_result: Optional[PassResult] = None

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def run_pass(self) -> PassResult:
        """
        Reconcile the wait list with Transmission once.

        Returns
        -------
        PassResult
            What was checked, finished, vanished, and how many messages went out.

        Raises
        ------
        StoreError, PollingError
            Whatever the collaborators raise; ``run_guarded_pass`` absorbs them.
        """

        snapshot = await self._wait_list.get_all_snapshot()
        result = PassResult(checked=len(snapshot))
        if not snapshot:
            return result

        LOGGER.debug("Checking %d torrents", len(snapshot))
        loop = asyncio.get_running_loop()
        torrents = await loop.run_in_executor(None, self._transmission.query_by_ids, list(snapshot))

        found = {torrent.torrent_id for torrent in torrents}
        vanished = [torrent_id for torrent_id in snapshot if torrent_id not in found]
        if vanished:
            LOGGER.info("Torrents no longer in Transmission, dropping: %s", vanished)
            await self._wait_list.remove_many(vanished)
            result.vanished = vanished

        for torrent in torrents:
            recipient_id = snapshot.get(torrent.torrent_id)
            if recipient_id is None:
                LOGGER.debug("Transmission returned unrequested torrent %s", torrent.torrent_id)
                continue
            if torrent.classify() is Classification.PENDING:
                result.pending.append(torrent.torrent_id)
                continue

            LOGGER.info("Torrent finished: %s", torrent.name)
            delivered = await self._notifier.notify(recipient_id, self._messages.torrent_finished(torrent.name))
            await self._wait_list.remove_many([torrent.torrent_id])
            result.finished.append(torrent.torrent_id)
            if delivered:
                result.notified += 1

        return result

    async def run_guarded_pass(self) -> PassResult:
        """Run one pass and turn any failure into a logged, counted ``PassResult``."""
        try:
            result = await self.run_pass()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # keep the loop alive
            self.failed_passes += 1
            LOGGER.warning("Wait list pass failed: %s", exc, exc_info=True)
            result = PassResult(error=exc)
        self.passes += 1
        self.last_result = result
        return result

    def enable_background_tasks(self, application: Any) -> None:
        application.post_init = self._chain_lifecycle_callback(application.post_init, self._start_for_application)
        application.post_stop = self._chain_lifecycle_callback(application.post_stop, self._stop_for_application)

    async def start(self) -> None:
        if self._poll_task:
            return
        self._stop_event = asyncio.Event()
        self._poll_task = asyncio.create_task(self._poll_loop(), name="wait-list-monitor")
        LOGGER.info("Wait list monitor started, interval %ss", self._interval)

    async def stop(self) -> None:
        """Signal the loop and wait for an in-flight pass to finish."""
        if not self._poll_task or not self._stop_event:
            return
        self._stop_event.set()
        await self._poll_task
        self._poll_task = None
        self._stop_event = None
        LOGGER.info("Wait list monitor stopped after %d passes (%d failed)", self.passes, self.failed_passes)

    async def _start_for_application(self, _: Any) -> None:
        await self.start()

    async def _stop_for_application(self, _: Any) -> None:
        await self.stop()

    async def _poll_loop(self) -> None:
        stop_event = self._stop_event
        while stop_event and not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            else:
                break
            await self.run_guarded_pass()

    @staticmethod
    def _chain_lifecycle_callback(
        existing: Optional[Callable[[Any], Awaitable[None]]],
        new_callback: Callable[[Any], Awaitable[None]],
    ) -> Callable[[Any], Awaitable[None]]:
        if existing is None:
            return new_callback

        async def combined(application: Any) -> None:
            await existing(application)
            await new_callback(application)

        return combined

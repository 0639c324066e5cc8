from __future__ import annotations

"""
Transmission integration.

Keeps the conversation going between the bot and the Transmission daemon
over RPC: add a torrent by URL, ask about a handful of ids, list what is
there. Every call is blocking; async callers push them to an executor.
"""

import logging
import threading
from typing import Any, Iterable, List, Optional

import transmission_rpc
from transmission_rpc.error import TransmissionError

from .config import TransmissionConfig
from .errors import PollingError, SubmissionError
from .models import AddedTorrent, TorrentSnapshot

LOGGER = logging.getLogger(__name__)

QUERY_FIELDS = ["id", "name", "status"]
LIST_FIELDS = ["id", "name", "status", "addedDate"]


class TransmissionController:
    """Coordinate adds and status lookups against Transmission RPC."""

    def __init__(self, config: TransmissionConfig):
        """
        Parameters
        ----------
        config : TransmissionConfig
            Connection details and credentials.
        """

        self.config = config
        self._client: Optional[transmission_rpc.Client] = None
        self._client_lock = threading.Lock()

    def add_url(self, url: str) -> AddedTorrent:
        """
        Hand a torrent URL to Transmission.

        Parameters
        ----------
        url : str
            Fetchable location of the ``.torrent`` file (or a magnet link).

        Returns
        -------
        AddedTorrent
            The id and display name Transmission assigned.

        Raises
        ------
        SubmissionError
            When Transmission rejects the URL or cannot be reached.
        """

        LOGGER.debug("Adding torrent from %s", url)
        try:
            torrent = self._get_client().add_torrent(url)
        except TransmissionError as exc:
            self._reset_client()
            raise SubmissionError(str(exc)) from exc

        torrent_id = self._field(torrent, "id")
        if torrent_id is None:
            raise SubmissionError("Transmission did not report an id for the new torrent")
        name = self._field(torrent, "name") or "(untitled)"
        LOGGER.info("Transmission accepted torrent %s (%s)", torrent_id, name)
        return AddedTorrent(torrent_id=int(torrent_id), name=str(name))

    def query_by_ids(self, torrent_ids: Iterable[int]) -> List[TorrentSnapshot]:
        """
        Fetch the status of specific torrents.

        Ids Transmission no longer knows are simply absent from the result.

        Raises
        ------
        PollingError
            When the RPC call fails.
        """

        ids = sorted(set(int(torrent_id) for torrent_id in torrent_ids))
        if not ids:
            return []
        try:
            torrents = self._get_client().get_torrents(ids=ids, arguments=QUERY_FIELDS)
        except TransmissionError as exc:
            self._reset_client()
            raise PollingError(str(exc)) from exc
        return [self._to_snapshot(torrent) for torrent in torrents]

    def list_recent(self, limit: int = 10) -> List[TorrentSnapshot]:
        """
        Return the most recently added torrents, newest first.

        Raises
        ------
        PollingError
            When the RPC call fails.
        """

        try:
            torrents = self._get_client().get_torrents(arguments=LIST_FIELDS)
        except TransmissionError as exc:
            self._reset_client()
            raise PollingError(str(exc)) from exc
        snapshots = [self._to_snapshot(torrent) for torrent in torrents]
        snapshots.sort(key=lambda snapshot: snapshot.added_date or 0, reverse=True)
        return snapshots[: max(0, limit)]

    def _get_client(self) -> transmission_rpc.Client:
        with self._client_lock:
            if self._client is None:
                self._client = self._build_rpc_client()
            return self._client

    def _reset_client(self) -> None:
        # Drop the cached session so the next call reconnects from scratch.
        with self._client_lock:
            self._client = None

    def _build_rpc_client(self) -> transmission_rpc.Client:
        try:
            return transmission_rpc.Client(
                protocol=self.config.protocol,
                host=self.config.host,
                port=self.config.port,
                path=self.config.path,
                username=self.config.username,
                password=self.config.password,
                timeout=self.config.timeout,
            )
        except TransmissionError:
            LOGGER.warning("Could not connect to Transmission at %s:%s", self.config.host, self.config.port)
            raise

    @classmethod
    def _to_snapshot(cls, torrent: Any) -> TorrentSnapshot:
        added = cls._field(torrent, "addedDate")
        return TorrentSnapshot(
            torrent_id=int(cls._field(torrent, "id")),
            status=int(cls._field(torrent, "status") or 0),
            name=cls._field(torrent, "name") or "(untitled)",
            added_date=float(added) if added is not None else None,
        )

    @staticmethod
    def _field(torrent: Any, key: str) -> Any:
        # Raw RPC values; ``Torrent.status`` itself is a string enum in transmission-rpc.
        fields = getattr(torrent, "fields", None)
        if isinstance(fields, dict) and key in fields:
            return fields[key]
        return getattr(torrent, key, None)

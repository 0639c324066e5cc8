from __future__ import annotations

"""
Durable wait list: torrent id -> chat id, stored in one Redis hash.

Each ``HSET``/``HDEL`` is atomic on its own, which is all the monitor and
the submission path need to run side by side without locks.
"""

import logging
from typing import Dict, Iterable, List

from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from .config import DEFAULT_WAIT_LIST_KEY, RedisConfig
from .errors import StoreError
from .models import WaitListEntry

LOGGER = logging.getLogger(__name__)


class WaitListStore:
    """Pending torrents and the chat waiting on each of them."""

    def __init__(self, client: Redis, key: str = DEFAULT_WAIT_LIST_KEY) -> None:
        self._client = client
        self._key = key

    @classmethod
    def from_config(cls, config: RedisConfig) -> "WaitListStore":
        client = from_url(
            config.url,
            encoding="utf-8",
            decode_responses=True,
            socket_keepalive=True,
            health_check_interval=30,
        )
        return cls(client, key=config.wait_list_key)

    @property
    def key(self) -> str:
        return self._key

    async def put(self, torrent_id: int, recipient_id: int) -> None:
        """Register (or re-register) a torrent; the last writer wins."""

        try:
            await self._client.hset(self._key, str(int(torrent_id)), str(int(recipient_id)))
        except RedisError as exc:
            raise StoreError(f"Could not save torrent {torrent_id}: {exc}") from exc
        LOGGER.debug("Wait list: torrent %s -> chat %s", torrent_id, recipient_id)

    async def remove_many(self, torrent_ids: Iterable[int]) -> int:
        """
        Forget the given torrents. Unknown ids are ignored.

        Returns
        -------
        int
            How many entries were actually deleted.

        Raises
        ------
        StoreError
            When Redis refuses the command.
        """

        fields = [str(int(torrent_id)) for torrent_id in torrent_ids]
        if not fields:
            return 0
        try:
            removed = await self._client.hdel(self._key, *fields)
        except RedisError as exc:
            raise StoreError(f"Could not remove torrents {', '.join(fields)}: {exc}") from exc
        return int(removed or 0)

    async def get_all_snapshot(self) -> Dict[int, int]:
        """
        Read the whole wait list in one go.

        Fields that are not integers are skipped with a warning.

        Raises
        ------
        StoreError
            When Redis refuses the command.
        """

        try:
            raw = await self._client.hgetall(self._key)
        except RedisError as exc:
            raise StoreError(f"Could not read the wait list: {exc}") from exc

        snapshot: Dict[int, int] = {}
        for field, value in (raw or {}).items():
            field = field.decode("utf-8") if isinstance(field, (bytes, bytearray)) else field
            value = value.decode("utf-8") if isinstance(value, (bytes, bytearray)) else value
            try:
                snapshot[int(field)] = int(value)
            except (TypeError, ValueError):
                LOGGER.warning("Skipping malformed wait list entry %r -> %r", field, value)
        return snapshot

    async def entries(self) -> List[WaitListEntry]:
        snapshot = await self.get_all_snapshot()
        return [WaitListEntry(torrent_id, recipient_id) for torrent_id, recipient_id in sorted(snapshot.items())]

    async def close(self) -> None:
        await self._client.aclose()

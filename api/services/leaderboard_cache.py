"""
In-process TTL cache for computed leaderboards.

Entries expire a fixed time after they are written and are reaped lazily on
read. When full, the least recently used entry is evicted. Reads move an
entry to the most recent position. No locking: the cache is only touched
from the event loop thread.
"""
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple
import logging
import time

logger = logging.getLogger(__name__)


class LeaderboardCache:
    """Bounded key -> value cache with absolute expiry."""

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # key -> (value, expires_at)
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        # Overwrites always produce a fresh entry
        self._entries.pop(key, None)

        if len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Leaderboard cache full, evicted {evicted}")

        self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

"""
In-Process Key-Value Store

Dictionary-backed store with per-key expiry, used for local development and
tests when no Redis URL is configured. Values are kept JSON-encoded so that
reads behave exactly like the Redis store (fresh copies, JSON types only).
"""

import fnmatch
import json
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .bases import KeyValueStore


class MemoryKVStore(KeyValueStore):
    """
    Process-local implementation of :class:`KeyValueStore`.

    Expired entries are dropped lazily on access.

    Attributes:
        clock: Monotonic time source in seconds (injectable for tests)

    Example:
        store = MemoryKVStore()
        await store.set("payment:0xabc", {"amount": "1"}, ttl_seconds=1800)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def _expires_at(self, ttl_seconds: Optional[int]) -> Optional[float]:
        if ttl_seconds is None:
            return None
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        return self.clock() + ttl_seconds

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None

        raw, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self._data[key]
            return None
        return raw

    async def get(self, key: str) -> Optional[Any]:
        raw = self._live(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        self._data[key] = (json.dumps(value), self._expires_at(ttl_seconds))

    async def keys(self, pattern: str) -> List[str]:
        return [key for key in list(self._data) if fnmatch.fnmatchcase(key, pattern) and self._live(key) is not None]

    async def set_if_absent(self, key: str, value: Any, ttl_seconds: int) -> bool:
        if self._live(key) is not None:
            return False
        self._data[key] = (json.dumps(value), self._expires_at(ttl_seconds))
        return True

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

"""
Abstract Base Class for Key-Value Stores

The payment records live in a Redis-protocol key-value store with native
per-key expiry. ``KeyValueStore`` is the narrow slice of that protocol the
gateway depends on; values are JSON-compatible objects and are encoded as JSON
by the implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class KeyValueStore(ABC):
    """
    Abstract Base Class for TTL-aware key-value stores.

    Key Responsibilities:
    1. get / set: Read and overwrite JSON values, optionally with an expiry
    2. keys: Enumerate live keys matching a glob pattern
    3. set_if_absent: Atomic conditional write used for short-lived locks
    4. delete / close: Lock cleanup and connection shutdown

    Expired keys must be invisible to every operation.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read a value.

        Returns:
            The decoded value, or None when the key is absent or expired.

        Raises:
            ValueError: If the stored bytes are not valid JSON.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """
        Overwrite a value; ``ttl_seconds`` sets (or refreshes) its expiry.
        Without ``ttl_seconds`` the key never expires.
        """
        pass

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """Return live keys matching a glob ``pattern`` (e.g. ``payment:*``), unordered."""
        pass

    @abstractmethod
    async def set_if_absent(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """
        Write ``value`` only when ``key`` does not exist.

        Returns:
            bool: True when the value was written, False when the key already existed.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    async def close(self) -> None:
        """Release connections. Stores without connections have nothing to do."""
        return None

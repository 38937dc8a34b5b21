"""In-memory key/value store with TTL support.

Used as the session backend when no Redis URL is configured, and in tests.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any


logger = logging.getLogger(__name__)


class InMemoryCache:
    """Thread-safe in-memory cache with per-key expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._data: dict[str, str] = {}
        self._expiry: dict[str, float] = {}
        self._lock = threading.Lock()
        self._clock = clock

        # Health tracking
        self._last_successful_operation: float | None = None
        self._total_operations = 0

    @property
    def is_available(self) -> bool:
        """Always true for the in-memory backend."""
        return True

    def get_health_status(self) -> dict[str, Any]:
        return {
            "backend": "memory",
            "enabled": True,
            "connected": True,
            "last_successful_operation": self._last_successful_operation,
            "total_operations": self._total_operations,
            "entries": len(self._data),
        }

    def _record_success(self) -> None:
        self._last_successful_operation = time.time()
        self._total_operations += 1

    def _evict_if_expired(self, key: str) -> None:
        expiry = self._expiry.get(key)
        if expiry is not None and expiry <= self._clock():
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired."""
        with self._lock:
            self._evict_if_expired(key)
            value = self._data.get(key)
            self._record_success()
            if value is not None:
                logger.debug("Cache hit for key: %s", key)
            return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value under key. A non-positive TTL stores without expiry."""
        with self._lock:
            self._data[key] = value
            if ttl_seconds > 0:
                self._expiry[key] = self._clock() + ttl_seconds
            else:
                self._expiry.pop(key, None)
            self._record_success()
            logger.debug("Cached key: %s (TTL: %ds)", key, ttl_seconds)
            return True

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return False

        with self._lock:
            for key in keys:
                self._data.pop(key, None)
                self._expiry.pop(key, None)
            self._record_success()
            logger.debug("Deleted %d cache key(s)", len(keys))
            return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock:
            self._data.clear()
            self._expiry.clear()
        logger.info("In-memory cache closed")


# Global cache client instance
cache_client = InMemoryCache()

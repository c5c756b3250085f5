"""In-memory settings cache with a fixed time-to-live.

Holds configuration values (company display details) that would otherwise
be looked up on every request. The cache is never authoritative: a stale or
missing entry only costs one extra lookup.

Example:
    cache = SettingsCache(ttl_seconds=300)

    value = cache.get("company")
    if value is EXPIRED:
        value = load_company_settings()
        cache.set("company", value)

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any, Final


class _Expired:
    """Sentinel type returned for missing or expired cache entries."""

    _instance: _Expired | None = None

    def __new__(cls) -> _Expired:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EXPIRED"

    def __bool__(self) -> bool:
        return False


EXPIRED: Final = _Expired()


class SettingsCache:
    """Thread-safe key/value cache where every entry expires after a TTL.

    ``None`` is a legitimate cached value (e.g. "no company settings
    configured"), so absence is signalled with the ``EXPIRED`` sentinel.

    Attributes:
        ttl_seconds: Lifetime of each entry in seconds.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of each entry in seconds (must be > 0).
            clock: Monotonic time source, injectable for tests.

        Raises:
            ValueError: If ttl_seconds is not positive.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the cached value, or ``EXPIRED`` if missing or stale."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return EXPIRED

            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return EXPIRED

            return value

    def set(self, key: str, value: Any) -> None:
        """Store a value, resetting its lifetime."""
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        """Return the cached value, calling ``loader`` on a miss.

        The loader runs outside the lock; two concurrent misses may both
        load, and the last one to finish wins.
        """
        value = self.get(key)
        if value is not EXPIRED:
            return value

        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

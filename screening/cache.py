"""In-memory TTL cache with lazy eviction."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    expires_at: float


class TTLCache(Generic[V]):
    """Key → value store where every entry carries its own expiry.

    Expired entries are dropped when read; there is no background sweep.
    Entries are replaced wholesale on ``set`` (last writer wins).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: V, ttl_ms: float) -> None:
        entry = CacheEntry(key, value, self._clock() + ttl_ms / 1000.0)
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        # counts entries not yet evicted, expired or not
        with self._lock:
            return {"size": len(self._entries)}

    def __len__(self) -> int:
        return self.stats()["size"]

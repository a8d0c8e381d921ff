"""In-memory TTL cache for computed API responses.

Calculations themselves never cache; the routers consult one application
owned ``ResultCache`` (see ``api.deps``). Entries are keyed by a hash of the
request inputs and guarded by a threading lock because FastAPI runs sync
handlers in a thread pool.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    computed_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


def cache_key(inputs: Dict[str, Any]) -> str:
    """Stable key for a request; independent of dict ordering."""
    return hashlib.sha256(json.dumps(inputs, sort_keys=True, default=str).encode()).hexdigest()


def evict_expired(entries: Dict[str, CacheEntry], now: float) -> Dict[str, CacheEntry]:
    return {key: entry for key, entry in entries.items() if not entry.expired(now)}


class ResultCache:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds is None:
            ttl_seconds = float(os.getenv("RESULT_CACHE_TTL_SECONDS", "3600"))
        if max_entries is None:
            max_entries = int(os.getenv("RESULT_CACHE_MAX_ENTRIES", "512"))
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(now):
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: Any) -> CacheEntry:
        now = self._clock()
        entry = CacheEntry(value=value, computed_at=now, expires_at=now + self.ttl_seconds)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._entries = evict_expired(self._entries, now)
                while len(self._entries) >= self.max_entries:
                    oldest = min(self._entries, key=lambda k: self._entries[k].computed_at)
                    del self._entries[oldest]
            self._entries[key] = entry
        return entry

    def get_or_compute(self, inputs: Dict[str, Any], compute: Callable[[], Any]) -> Tuple[Any, str, bool]:
        """Return ``(value, key, cached)``; ``compute`` runs only on a miss."""

        key = cache_key(inputs)
        value = self.get(key)
        if value is not None:
            logger.debug("result cache hit %s", key[:12])
            return value, key, True
        value = compute()
        self.put(key, value)
        return value, key, False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

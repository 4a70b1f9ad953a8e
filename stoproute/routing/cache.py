"""
Route result cache with TTL expiry and bounded size.

Keys are derived from stop membership only, not order: the shape of a route
depends on which stops it visits until optimization runs. When a new key is
inserted into a full cache, the single entry with the oldest ``created_at`` is
evicted first. ``get``/``put`` run under a lock so concurrent planners never
lose updates.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import threading
import time
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, Optional

from cachetools import TLRUCache

from .models import RouteResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 50


def cache_key(stop_ids: Iterable[str]) -> str:
    """
    Canonical, order-independent digest of a stop set.

    Example:
        >>> cache_key(["b", "a"]) == cache_key(["a", "b"])
        True
    """
    blob = json.dumps(sorted(stop_ids))
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CachedRoute:
    """A cached result and the time it was stored."""
    key: str
    result: RouteResult
    created_at: float


class RouteCache:
    """TTL cache of planned routes keyed by stop membership."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._timer = timer
        self._entries: TLRUCache[str, CachedRoute] = TLRUCache(
            maxsize=max_entries, ttu=self._expires_at, timer=timer
        )
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _expires_at(self, _key: str, entry: CachedRoute, _now: float) -> float:
        # Live while now - created_at <= ttl_seconds; cachetools drops items once now >= expiry.
        return math.nextafter(entry.created_at + self.ttl_seconds, math.inf)

    def get(self, stop_ids: Iterable[str]) -> Optional[RouteResult]:
        """Return the cached route for this stop set, or None when absent or stale."""
        key = cache_key(stop_ids)
        with self._lock:
            self._entries.expire()
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry.result

    def put(self, stop_ids: Iterable[str], result: RouteResult) -> None:
        """Store ``result``, evicting the oldest entry first when full."""
        key = cache_key(stop_ids)
        with self._lock:
            self._entries.expire()
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest = min(list(self._entries.values()), key=attrgetter("created_at"))
                del self._entries[oldest.key]
                logger.debug(f"Route cache full ({self.max_entries}), evicted {oldest.key[:12]}")
            self._entries[key] = CachedRoute(key=key, result=result, created_at=self._timer())

    def created_at(self, stop_ids: Iterable[str]) -> Optional[float]:
        """Timestamp of the live entry for this stop set, if any."""
        key = cache_key(stop_ids)
        with self._lock:
            self._entries.expire()
            entry = self._entries.get(key)
            return entry.created_at if entry is not None else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            self._entries.expire()
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
            }

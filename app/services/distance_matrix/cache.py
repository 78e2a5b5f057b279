"""
Bounded TTL cache for travel estimates.

Entries are keyed by the full-precision (origin, destination) coordinate pair,
expire after a fixed window and are evicted least-recently-used once the
size cap is reached, so sustained unique-coordinate traffic cannot grow the
process without bound.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from .base import DistanceResult, LatLng

CacheKey = Tuple[float, float, float, float]


def cache_key(origin: LatLng, destination: LatLng) -> CacheKey:
    return (origin.lat, origin.lng, destination.lat, destination.lng)


class TravelTimeCache:
    def __init__(self, ttl_seconds: float = 300.0, max_entries: int = 5000, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[float, DistanceResult]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, origin: LatLng, destination: LatLng) -> Optional[DistanceResult]:
        key = cache_key(origin, destination)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, result = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return result

    def set(self, origin: LatLng, destination: LatLng, result: DistanceResult) -> None:
        key = cache_key(origin, destination)
        with self._lock:
            self._entries[key] = (self._clock(), result)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

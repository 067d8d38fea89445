from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True)
class CacheEntry(Generic[PayloadT]):
    captured_at: float
    payload: PayloadT


class FeedCache(Generic[PayloadT]):
    """Single-entry cache that serves its payload while it is younger than the TTL.

    The entry is only ever replaced as a whole, so readers never observe a
    half-written payload.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry[PayloadT] | None = None

    def now(self) -> float:
        return self._clock()

    def get(self) -> PayloadT | None:
        entry = self._entry
        if entry is None:
            return None
        age = self._clock() - entry.captured_at
        if age < self._ttl_seconds:
            logger.debug("Feed cache hit (age %.1fs)", age)
            return entry.payload
        logger.debug("Feed cache expired (age %.1fs)", age)
        return None

    def peek(self) -> CacheEntry[PayloadT] | None:
        return self._entry

    def set(self, payload: PayloadT, captured_at: float | None = None) -> None:
        stamp = self._clock() if captured_at is None else captured_at
        self._entry = CacheEntry(captured_at=stamp, payload=payload)

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from app.core.config import Settings
from services.feed_cache import FeedCache
from services.feed_fetcher import FeedFetchError, FinnFeedFetcher
from services.listing_normalizer import ListingRecord, NumberFormatter, normalize_feed
from services.xml_decoder import FeedParseError

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    async def fetch(self, rows: int) -> bytes: ...


@dataclass(frozen=True)
class FeedPayload:
    updated_at: datetime
    cars: tuple[ListingRecord, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.cars)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdFeedService:
    """Serve the normalized dealer feed, refetching only when the cache is stale."""

    def __init__(
        self,
        fetcher: FeedSource,
        cache: FeedCache[FeedPayload],
        listing_cap: int,
        formatter: NumberFormatter | None = None,
        serve_stale_on_error: bool = False,
        single_flight: bool = False,
        utcnow: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._listing_cap = listing_cap
        self._formatter = formatter or NumberFormatter()
        self._serve_stale_on_error = serve_stale_on_error
        self._lock = asyncio.Lock() if single_flight else None
        self._utcnow = utcnow

    async def get_payload(self) -> FeedPayload:
        cached = self._cache.get()
        if cached is not None:
            return cached

        if self._lock is None:
            return await self._refresh()

        async with self._lock:
            # Another request may have refreshed the cache while we waited.
            cached = self._cache.get()
            if cached is not None:
                return cached
            return await self._refresh()

    async def _refresh(self) -> FeedPayload:
        started_at = self._cache.now()
        try:
            xml = await self._fetcher.fetch(self._listing_cap)
            cars = normalize_feed(xml, self._formatter, limit=self._listing_cap)
        except (FeedFetchError, FeedParseError) as exc:
            stale = self._cache.peek() if self._serve_stale_on_error else None
            if stale is None:
                raise
            logger.warning("Serving stale feed after refresh failure: %s", exc)
            return stale.payload

        payload = FeedPayload(updated_at=self._utcnow(), cars=tuple(cars))
        self._cache.set(payload, captured_at=started_at)
        logger.info("Feed refreshed with %s listings", payload.count)
        return payload


def build_ad_feed_service(
    settings: Settings,
    fetcher: FeedSource | None = None,
) -> AdFeedService:
    if fetcher is None:
        fetcher = FinnFeedFetcher(
            api_key=settings.finn_api_key or "",
            org_id=settings.finn_org_id or "",
            base_url=settings.finn_base_url,
            timeout=settings.request_timeout_seconds,
            max_response_bytes=settings.max_response_bytes,
        )
    return AdFeedService(
        fetcher=fetcher,
        cache=FeedCache(ttl_seconds=settings.cache_seconds),
        listing_cap=settings.listing_cap,
        formatter=NumberFormatter(settings.thousands_separator),
        serve_stale_on_error=settings.serve_stale_on_error,
        single_flight=settings.single_flight,
    )

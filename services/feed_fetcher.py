from __future__ import annotations

import logging

import httpx

from app.core.config import clamp_rows

logger = logging.getLogger(__name__)

SEARCH_PATH = "/iad/search/car-norway"
ACCEPT_HEADER = "application/atom+xml, application/xml;q=0.9, */*;q=0.1"
API_KEY_HEADER = "x-FINN-apikey"
BODY_EXCERPT_CHARS = 500


class FeedFetchError(RuntimeError):
    """Raised when the listing feed cannot be fetched."""


class FeedTransportError(FeedFetchError):
    """Raised when no response is received from the feed provider."""


class FeedTooLargeError(FeedFetchError):
    """Raised when the feed response exceeds the configured size limit."""


class UpstreamHTTPError(FeedFetchError):
    """Raised when the feed provider answers with a non-success status."""

    def __init__(self, status_code: int, status_text: str, body: str) -> None:
        super().__init__(f"Feed provider returned HTTP {status_code} {status_text}".rstrip())
        self.status_code = status_code
        self.status_text = status_text
        self.body = body


class FinnFeedFetcher:
    """Fetch the dealer's search feed from the FINN API."""

    def __init__(
        self,
        api_key: str,
        org_id: str,
        base_url: str = "https://cache.api.finn.no",
        timeout: float = 10.0,
        max_response_bytes: int = 5_000_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._org_id = org_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_response_bytes = max_response_bytes
        self._transport = transport

    @property
    def search_url(self) -> str:
        return f"{self._base_url}{SEARCH_PATH}"

    def build_params(self, rows: int) -> dict[str, str]:
        return {
            "orgId": str(self._org_id),
            "sort": "PUBLISHED_DESC",
            "rows": str(clamp_rows(rows)),
        }

    def build_headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self._api_key,
            "accept": ACCEPT_HEADER,
        }

    async def fetch(self, rows: int) -> bytes:
        params = self.build_params(rows)
        logger.info("Fetching FINN feed for org %s (rows=%s)", self._org_id, params["rows"])
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream(
                    "GET",
                    self.search_url,
                    params=params,
                    headers=self.build_headers(),
                ) as response:
                    if not response.is_success:
                        excerpt = await self._read_excerpt(response)
                        logger.warning(
                            "FINN feed request failed with HTTP %s %s",
                            response.status_code,
                            response.reason_phrase,
                        )
                        raise UpstreamHTTPError(response.status_code, response.reason_phrase, excerpt)
                    return await self._read_limited(response)
        except httpx.HTTPError as exc:
            raise FeedTransportError(f"Failed to reach feed provider: {exc}") from exc

    def _too_large(self, size: int) -> FeedTooLargeError:
        return FeedTooLargeError(
            f"Feed response of {size} bytes exceeds {self._max_response_bytes} bytes"
        )

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self._max_response_bytes:
            raise self._too_large(int(declared))

        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self._max_response_bytes:
                raise self._too_large(received)
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    async def _read_excerpt(response: httpx.Response) -> str:
        # Enough bytes for the excerpt even when every character is multi-byte.
        wanted = BODY_EXCERPT_CHARS * 4
        buffer = bytearray()
        async for chunk in response.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) >= wanted:
                break
        encoding = response.encoding or "utf-8"
        return bytes(buffer[:wanted]).decode(encoding, errors="replace")[:BODY_EXCERPT_CHARS]

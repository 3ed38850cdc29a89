"""Resolve, deduplicate and fetch include sources."""

from __future__ import annotations

from typing import Mapping

import httpx

from .dedup import InFlightRequests
from .fetcher import FetchClient, Fetcher, FetchResponse
from .resolver import to_fully_qualified_url


class DataProvider:
    """Chain the URL resolver, the in-flight table and a fetch client.

    Deduplication is keyed on the fully-qualified URL only; concurrent calls
    with different headers share whichever request was issued first. ``headers`` are sent
    with every request, under any per-call headers.
    """

    def __init__(
        self,
        base_url: str | None = None,
        cache: bool = True,
        fetch_client: FetchClient | None = None,
        timeout: float = 15.0,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        self.headers = httpx.Headers(headers or {})
        self.fetch_client = fetch_client or Fetcher(timeout=timeout)
        self.in_flight = InFlightRequests(enabled=cache)

    @property
    def cache_enabled(self) -> bool:
        return self.in_flight.enabled

    def to_fully_qualified_url(self, src: str) -> str:
        return to_fully_qualified_url(src, self.base_url)

    async def get(self, src: str, headers: Mapping[str, str] | None = None) -> FetchResponse:
        url = self.to_fully_qualified_url(src)
        merged = self.headers.copy()
        merged.update(headers or {})
        request_headers = dict(merged.items()) or None
        return await self.in_flight.run(
            url, lambda: self.fetch_client.get(url, headers=request_headers)
        )


__all__ = ["DataProvider"]

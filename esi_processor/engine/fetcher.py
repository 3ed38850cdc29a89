"""Async HTTP fetching of include fragments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Protocol

import httpx
import structlog


class FetchError(Exception):
    """Raised when a fragment cannot be retrieved."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    headers: dict[str, str] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


class FetchClient(Protocol):
    """Interface the data provider expects from an injected fetch client."""

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> FetchResponse: ...


class Fetcher:
    """Issue single GET requests through httpx.

    An injected ``httpx.AsyncClient`` is reused for every request and left
    open; otherwise a short-lived client is opened per request so that one
    fetcher can serve several event loops.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        headers: Mapping[str, str] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.logger = logger or structlog.get_logger("esi_processor.fetcher")
        self._client = client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> FetchResponse:
        return await self.fetch(FetchRequest(url=url, headers=dict(headers or {}), timeout=timeout))

    async def fetch(self, request: FetchRequest) -> FetchResponse:
        # header names are case-insensitive; request values replace defaults
        req_headers = httpx.Headers(self.headers)
        if request.headers:
            req_headers.update(request.headers)
        timeout = request.timeout or self.timeout

        try:
            if self._client is not None:
                response = await self._client.get(
                    request.url, headers=req_headers, timeout=timeout, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
                    response = await client.get(request.url, headers=req_headers)
        except httpx.TimeoutException as exc:
            self.logger.warning("fetch_error", url=request.url, error="timeout")
            raise FetchError(f"Request timed out: {request.url}", url=request.url) from exc
        except (httpx.RequestError, httpx.InvalidURL, ValueError) as exc:
            self.logger.warning("fetch_error", url=request.url, error=str(exc))
            raise FetchError(f"Request failed: {exc}", url=request.url) from exc

        if self._is_failure(response):
            self.logger.warning(
                "fetch_failed_status", url=request.url, status_code=response.status_code
            )
            raise FetchError(
                f"HTTP error: status code {response.status_code}",
                url=request.url,
                status_code=response.status_code,
            )
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return not 200 <= status_code < 300


__all__ = ["FetchClient", "FetchError", "FetchRequest", "FetchResponse", "Fetcher"]

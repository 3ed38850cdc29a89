"""Pytest fixtures providing an in-memory fragment server and processors."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any, Callable

import httpx
import pytest

from esi_processor.engine import ESIProcessor, Fetcher

BASE_URL = "http://fragments.test"


class FragmentServer:
    """Route table served through ``httpx.MockTransport``.

    Routes map a path to a body string, to a ``(status, body)`` tuple, to an
    exception instance (raised as a transport failure) or to a callable
    receiving the request.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.routes: dict[str, Any] = {}
        self.delay = delay
        self.hits: Counter[str] = Counter()
        self.requests: list[httpx.Request] = []

    def route(self, path: str, response: Any) -> "FragmentServer":
        self.routes[path] = response
        return self

    @property
    def total_hits(self) -> int:
        return sum(self.hits.values())

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.hits[request.url.path] += 1
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.routes.get(request.url.path, (404, "not found"))
        if callable(response):
            response = response(request)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        if isinstance(response, tuple):
            status, body = response
        else:
            status, body = 200, response
        return httpx.Response(status, text=body, headers={"Content-Type": "text/html"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def fetcher(self, **kwargs: Any) -> Fetcher:
        return Fetcher(client=self.client(), **kwargs)


@pytest.fixture
def server() -> FragmentServer:
    return FragmentServer()


@pytest.fixture
def slow_server() -> FragmentServer:
    return FragmentServer(delay=0.02)


@pytest.fixture
def make_processor() -> Callable[..., ESIProcessor]:
    def _builder(fragment_server: FragmentServer, **options: Any) -> ESIProcessor:
        options.setdefault("base_url", BASE_URL)
        return ESIProcessor(fetch_client=fragment_server.fetcher(), **options)

    return _builder


class CollectingSink:
    """In-memory ``write`` target."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def write(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def make_server() -> Callable[..., FragmentServer]:
    return FragmentServer

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest

from app.core.revalidation import ResponseCache
from app.v1_0.services import UserActionsService

BASE_URL = "http://backend.test"
API = f"{BASE_URL}/api/v1"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """
    Scripted stand-in for the REST backend, served through httpx.MockTransport.

    Replies are registered per (method, path) and consumed in order; the last
    one registered for a route keeps answering once the queue is drained.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Reply]] = {}

    def on(self, method: str, path: str, *replies: Reply) -> "FakeBackend":
        self._routes.setdefault((method.upper(), f"/api/v1{path}"), []).extend(replies)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "no route"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        if method is None:
            return list(self.requests)
        return [r for r in self.requests if r.method == method.upper()]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


class RecordingRevalidator:
    """Collects revalidated view paths instead of notifying pages."""

    def __init__(self) -> None:
        self.paths: list[str] = []

    async def revalidate_path(self, path: str) -> None:
        self.paths.append(path)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def revalidator() -> RecordingRevalidator:
    return RecordingRevalidator()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(clock=clock)


@pytest.fixture
def service(
    backend: FakeBackend, revalidator: RecordingRevalidator, cache: ResponseCache
) -> UserActionsService:
    return UserActionsService(
        BASE_URL,
        revalidator,
        cache,
        timeout=5.0,
        list_ttl=30.0,
        transport=backend.transport,
    )

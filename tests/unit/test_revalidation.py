"""
Tests for view revalidation: the time-bounded ResponseCache and the
ViewRevalidator that drops cached reads and notifies open pages.
"""

from __future__ import annotations

import asyncio

import pytest

from app.core.realtime import VIEWS_CHANNEL, ConnectionManager, build_event
from app.core.revalidation import ResponseCache, ViewRevalidator, normalize_path


class FakeSocket:
    """Minimal WebSocket double recording what the manager sends."""

    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.sent: list[dict] = []
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/users", "/users"), ("/users/", "/users"), ("users/7", "/users/7"), ("/", "/"), ("", "/")],
)
def test_normalize_path(raw, expected) -> None:
    assert normalize_path(raw) == expected


class TestResponseCache:
    def test_hit_within_ttl(self, cache, clock) -> None:
        cache.put("k", {"a": 1}, path="/users", ttl=30)
        clock.advance(29.9)

        assert cache.get("k") == {"a": 1}

    def test_expired_entry_is_a_miss(self, cache, clock) -> None:
        cache.put("k", {"a": 1}, path="/users", ttl=30)
        clock.advance(30)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_invalidate_only_matching_path(self, cache) -> None:
        cache.put("a", 1, path="/users", ttl=30)
        cache.put("b", 2, path="/users/", ttl=30)
        cache.put("c", 3, path="/users/7", ttl=30)

        assert cache.invalidate("/users") == 2
        assert cache.get("a") is None
        assert cache.get("c") == 3

    def test_put_purges_expired_keys(self, cache, clock) -> None:
        for page in range(1000):
            cache.put(f"/users?page={page}", page, path="/users", ttl=30)
        clock.advance(3600)

        cache.put("fresh", 1, path="/users", ttl=30)

        assert len(cache) == 1
        assert cache.get("fresh") == 1

    def test_put_after_invalidation_is_discarded(self, cache) -> None:
        generation = cache.generation("/users")
        cache.invalidate("/users/")

        assert cache.put("k", 1, path="/users", ttl=30, generation=generation) is False
        assert cache.get("k") is None
        assert cache.put("k", 2, path="/users", ttl=30, generation=cache.generation("/users")) is True
        assert cache.get("k") == 2

    def test_generation_is_per_path(self, cache) -> None:
        generation = cache.generation("/users")
        cache.invalidate("/users/7")

        assert cache.put("k", 1, path="/users", ttl=30, generation=generation) is True

    def test_unknown_key(self, cache) -> None:
        assert cache.get("missing") is None


class TestViewRevalidator:
    def test_drops_cache_and_broadcasts(self, cache) -> None:
        manager = ConnectionManager()
        revalidator = ViewRevalidator(cache, manager)
        socket = FakeSocket()
        cache.put("k", 1, path="/users", ttl=30)

        async def scenario():
            await manager.connect(VIEWS_CHANNEL, socket)
            await revalidator.revalidate_path("/users/")

        asyncio.run(scenario())

        assert socket.accepted is True
        assert cache.get("k") is None
        assert socket.sent == [
            {
                "type": "view.revalidated",
                "resource": "view",
                "action": "revalidated",
                "payload": {"path": "/users"},
            }
        ]

    def test_no_listeners_is_fine(self, cache) -> None:
        revalidator = ViewRevalidator(cache, ConnectionManager())

        asyncio.run(revalidator.revalidate_path("/users/1"))

    def test_broken_sockets_are_dropped(self, cache) -> None:
        manager = ConnectionManager()
        good, bad = FakeSocket(), FakeSocket(broken=True)

        async def scenario():
            await manager.connect(VIEWS_CHANNEL, good)
            await manager.connect(VIEWS_CHANNEL, bad)
            return await manager.broadcast(VIEWS_CHANNEL, build_event("view", "revalidated"))

        delivered = asyncio.run(scenario())

        assert delivered == 1
        assert manager.count(VIEWS_CHANNEL) == 1
        assert good.sent[0]["payload"] == {}


def test_disconnect_last_socket_removes_channel() -> None:
    manager = ConnectionManager()
    socket = FakeSocket()

    asyncio.run(manager.connect(VIEWS_CHANNEL, socket))
    manager.disconnect(VIEWS_CHANNEL, socket)
    manager.disconnect(VIEWS_CHANNEL, socket)

    assert manager.count(VIEWS_CHANNEL) == 0

# app/core/revalidation.py

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from app.core.logger import logger
from app.core.realtime import VIEWS_CHANNEL, ConnectionManager, build_event


def normalize_path(path: str) -> str:
    """`/users/` and `/users` name the same view."""
    path = "/" + (path or "").strip().strip("/")
    return path


class ViewInvalidator(Protocol):
    async def revalidate_path(self, path: str) -> None: ...


@dataclass(slots=True)
class _CacheEntry:
    expires_at: float
    path: str
    payload: Any


class ResponseCache:
    """
    Time-bounded reuse of backend read responses.

    Entries are keyed by request URL and tagged with the view path that
    renders them, so revalidating the path drops them. Each invalidation
    bumps the path's generation; a `put` recorded against an older
    generation is discarded.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._generations: Dict[str, int] = {}

    def generation(self, path: str) -> int:
        return self._generations.get(normalize_path(path), 0)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry.payload

    def put(
        self,
        key: str,
        payload: Any,
        *,
        path: str,
        ttl: float,
        generation: Optional[int] = None,
    ) -> bool:
        """Store `payload` unless `path` was invalidated since `generation` was read."""
        path = normalize_path(path)
        now = self._clock()
        self._purge_expired(now)
        if generation is not None and generation != self._generations.get(path, 0):
            return False
        self._entries[key] = _CacheEntry(expires_at=now + ttl, path=path, payload=payload)
        return True

    def invalidate(self, path: str) -> int:
        path = normalize_path(path)
        self._generations[path] = self._generations.get(path, 0) + 1
        stale = [k for k, e in self._entries.items() if e.path == path]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            del self._entries[k]

    def __len__(self) -> int:
        return len(self._entries)


class ViewRevalidator:
    """Marks a rendered view stale: drops its cached reads and notifies open pages."""

    def __init__(self, cache: ResponseCache, manager: ConnectionManager) -> None:
        self.cache = cache
        self.manager = manager

    async def revalidate_path(self, path: str) -> None:
        path = normalize_path(path)
        dropped = self.cache.invalidate(path)
        delivered = await self.manager.broadcast(
            VIEWS_CHANNEL, build_event("view", "revalidated", {"path": path})
        )
        logger.debug("[Revalidate] path=%s dropped=%s notified=%s", path, dropped, delivered)

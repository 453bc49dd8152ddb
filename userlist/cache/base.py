"""Subscription handles shared by all fetch cache consumers."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

from userlist.exceptions import FetchFailure
from userlist.models.cache import CacheEntry, CacheStatus

if TYPE_CHECKING:
    from userlist.cache.fetch import FetchCache

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Sequence[Any]]]
Listener = Callable[[CacheEntry], None]


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class SubscriptionHandle:
    """Live view of one cache entry, handed out by ``FetchCache.subscribe``.

    Every handle for the same key observes the same entry. Listeners added to a
    handle receive a fresh ``CacheEntry`` copy on every change of that entry.
    """

    def __init__(self, cache: "FetchCache", key: str, entry: CacheEntry) -> None:
        """Initialize handle.

        Args:
            cache: Owning fetch cache
            key: Resource key the handle observes
            entry: Snapshot of the entry at subscription time
        """
        self.key = key
        self._cache = cache
        self._last = entry
        self._listeners: list[Listener] = []
        self.closed = False

    def snapshot(self) -> CacheEntry:
        """Return a copy of the entry's current state."""
        if not self.closed:
            current = self._cache.get(self.key)
            if current is not None:
                self._last = current
        return self._last

    @property
    def data(self) -> list[Any] | None:
        return self.snapshot().data

    @property
    def status(self) -> CacheStatus:
        return self.snapshot().status

    @property
    def error(self) -> FetchFailure | None:
        return self.snapshot().error

    @property
    def is_validating(self) -> bool:
        return self.status == CacheStatus.VALIDATING

    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def revalidate(self) -> "asyncio.Future[None] | None":
        """Re-fetch the entry unless a fetch is already in flight."""
        if self.closed:
            logger.debug(f"Ignoring revalidate on closed handle for {self.key}")
            return None
        return self._cache.revalidate(self.key)

    def mutate(self, data: Any = UNSET, *, revalidate: bool = True) -> "asyncio.Future[None] | None":
        """Replace the cached data and/or force a re-fetch.

        Args:
            data: Optional replacement value applied locally before revalidating
            revalidate: Whether to trigger a re-fetch afterwards

        Returns:
            An awaitable for the in-flight fetch, if any
        """
        if self.closed:
            logger.debug(f"Ignoring mutate on closed handle for {self.key}")
            return None
        return self._cache.mutate(self.key, data, revalidate=revalidate)

    def close(self) -> None:
        """Detach from the cache. The entry is discarded with its last handle."""
        if self.closed:
            return
        self.snapshot()
        self.closed = True
        self._listeners.clear()
        self._cache._release(self)

    def _dispatch(self, entry: CacheEntry) -> None:
        self._last = entry
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception(f"Listener for {self.key} raised")

    def __enter__(self) -> "SubscriptionHandle":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SubscriptionHandle(key={self.key!r}, status={self.status.value})"

"""Stale-while-revalidate fetch cache."""

import asyncio
import logging
import time
from typing import Any

from userlist.cache.base import UNSET, Fetcher, Listener, SubscriptionHandle
from userlist.exceptions import FetchFailure
from userlist.models.cache import CacheEntry, CacheStatus

logger = logging.getLogger(__name__)


class FetchCache:
    """Keeps one revalidate-able snapshot per key, shared by all its subscribers.

    Previously fetched data stays available while a new fetch is in flight and
    is replaced only when that fetch succeeds. At most one fetch per key runs
    at a time: revalidating a key that is already validating returns a waiter
    on the pending fetch instead of starting another one. Fetch failures are
    recorded on the entry and never raised to callers.

    All methods must be called from the event loop that runs the fetches.
    """

    def __init__(self, revalidate_on_mount: bool = True) -> None:
        """Initialize the cache.

        Args:
            revalidate_on_mount: Fetch as soon as a key gets its first subscriber
        """
        self.revalidate_on_mount = revalidate_on_mount
        self._entries: dict[str, CacheEntry] = {}
        self._fetchers: dict[str, Fetcher] = {}
        self._handles: dict[str, list[SubscriptionHandle]] = {}
        self._inflight: dict[str, asyncio.Task[None]] = {}

    def subscribe(self, key: str, fetcher: Fetcher, listener: Listener | None = None) -> SubscriptionHandle:
        """Register interest in a key.

        Creates the entry on first subscription and schedules its initial
        fetch. Later subscribers attach to the existing entry, including one
        whose fetch is still pending; their fetcher is ignored. A fetch still
        running for a previously discarded entry is adopted by the new entry
        rather than started again.

        Args:
            key: Resource key, typically a URL
            fetcher: Coroutine function returning the record sequence for ``key``
            listener: Optional callback registered on the returned handle

        Returns:
            Live handle for the entry
        """
        created = key not in self._entries
        if created:
            entry = CacheEntry(key=key)
            pending = self._inflight.get(key)
            if pending is not None and not pending.done():
                entry.status = CacheStatus.VALIDATING
                logger.debug(f"Adopting in-flight fetch for {key}")
            self._entries[key] = entry
            self._fetchers[key] = fetcher
            self._handles[key] = []
            logger.debug(f"Created cache entry for {key}")

        handle = SubscriptionHandle(self, key, self._copy(self._entries[key]))
        if listener is not None:
            handle.add_listener(listener)
        self._handles[key].append(handle)

        if created and self.revalidate_on_mount:
            self._start(key)
        return handle

    def get(self, key: str) -> CacheEntry | None:
        """Return a copy of the entry for ``key``, or None if nobody subscribes to it."""
        entry = self._entries.get(key)
        return self._copy(entry) if entry is not None else None

    def keys(self) -> list[str]:
        return list(self._entries)

    def revalidate(self, key: str) -> asyncio.Future[None] | None:
        """Re-fetch ``key`` unless a fetch for it is already in flight.

        The returned awaitable is shielded: cancelling it, or timing out
        while waiting on it, leaves the shared fetch running for every other
        subscriber.

        Args:
            key: Resource key

        Returns:
            An awaitable completing when the in-flight fetch settles (the
            existing one when deduplicated), or None when the key is unknown
            or no event loop is running
        """
        task = self._start(key)
        return asyncio.shield(task) if task is not None else None

    def mutate(self, key: str, data: Any = UNSET, *, revalidate: bool = True) -> asyncio.Future[None] | None:
        """Force a re-fetch of ``key``, optionally applying a local value first.

        Without ``data`` this is ``revalidate(key)``. With ``data`` the entry's
        data is replaced and subscribers notified before revalidating. The
        dedup guard still applies, so this never starts a second concurrent
        fetch.

        Args:
            key: Resource key
            data: Optional replacement sequence (None clears the data)
            revalidate: Whether to re-fetch after applying ``data``

        Returns:
            An awaitable for the in-flight fetch, if any
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Mutate ignored, no subscribers for {key}")
            return None

        if data is not UNSET:
            entry.data = list(data) if data is not None else None
            logger.debug(f"Applied local mutation to {key}")
            self._notify(key)

        if not revalidate:
            return None
        return self.revalidate(key)

    async def aclose(self) -> None:
        """Cancel pending fetches and drop every entry."""
        tasks = list(self._inflight.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        for handles in self._handles.values():
            for handle in handles:
                handle.closed = True
        self._inflight.clear()
        self._handles.clear()
        self._fetchers.clear()
        self._entries.clear()
        logger.debug("Fetch cache closed")

    def _start(self, key: str) -> asyncio.Task[None] | None:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Revalidate ignored, no subscribers for {key}")
            return None

        if entry.status == CacheStatus.VALIDATING:
            logger.debug(f"Fetch already in flight for {key}")
            return self._inflight.get(key)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, cannot fetch {key}")
            return None

        # Status is set before the task is created so no other caller can slip in.
        entry.status = CacheStatus.VALIDATING
        task = loop.create_task(self._fetch(key, self._fetchers[key]), name=f"fetch:{key}")
        self._inflight[key] = task
        self._notify(key)
        return task

    async def _fetch(self, key: str, fetcher: Fetcher) -> None:
        logger.debug(f"Fetching {key}")
        failure: FetchFailure | None = None
        records: list[Any] = []
        try:
            result = await fetcher(key)
            if not isinstance(result, list | tuple):
                raise FetchFailure(
                    f"Expected a sequence of records, got {type(result).__name__}",
                    {"key": key},
                )
            records = list(result)
        except asyncio.CancelledError:
            logger.debug(f"Fetch cancelled for {key}")
            self._settle(key)
            raise
        except FetchFailure as e:
            failure = e
        except Exception as e:
            failure = FetchFailure(str(e) or type(e).__name__, {"key": key, "type": type(e).__name__})

        if failure is not None:
            self._settle(key, failure=failure)
        else:
            self._settle(key, records=records)

    def _settle(
        self,
        key: str,
        records: list[Any] | None = None,
        failure: FetchFailure | None = None,
    ) -> None:
        if self._inflight.get(key) is asyncio.current_task():
            del self._inflight[key]

        # Applied to whichever entry holds the key now; it may have been discarded.
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Dropping result for discarded entry {key}")
            return

        if failure is not None:
            entry.error = failure
            logger.warning(f"Fetch failed for {key}: {failure}")
        elif records is not None:
            entry.data = records
            entry.error = None
            entry.updated_at = time.time()
            logger.debug(f"Fetched {len(records)} records for {key}")

        entry.status = CacheStatus.SETTLED
        self._notify(key)

    def _notify(self, key: str) -> None:
        snapshot = self._copy(self._entries[key])
        for handle in list(self._handles.get(key, [])):
            handle._dispatch(snapshot)

    def _release(self, handle: SubscriptionHandle) -> None:
        handles = self._handles.get(handle.key)
        if handles is None or handle not in handles:
            return

        handles.remove(handle)
        if handles:
            return

        # Last reference gone; a running fetch stays in _inflight for a later subscriber to adopt.
        del self._handles[handle.key]
        del self._entries[handle.key]
        del self._fetchers[handle.key]
        logger.debug(f"Discarded cache entry for {handle.key}")

    @staticmethod
    def _copy(entry: CacheEntry) -> CacheEntry:
        return entry.model_copy(update={"data": list(entry.data) if entry.data is not None else None})

"""Time-bounded in-memory cache of marketplace listings."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

EntryT = TypeVar("EntryT")

DEFAULT_CACHE_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[EntryT]):
    entries: tuple[EntryT, ...]
    fetched_at: float


class MarketplaceCache(Generic[EntryT]):
    """Listings keyed by marketplace URL.

    Entries older than ``ttl_seconds`` are treated as absent. Nothing is evicted
    otherwise; a later ``set`` simply replaces the entry. ``lock(url)`` hands out
    one ``asyncio.Lock`` per URL so concurrent refreshes of the same marketplace
    collapse into a single fetch.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[EntryT]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, url: str) -> list[EntryT] | None:
        entry = self._entries.get(url)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= self._ttl_seconds:
            return None
        return list(entry.entries)

    def set(self, url: str, entries: Sequence[EntryT]) -> None:
        self._entries[url] = CacheEntry(entries=tuple(entries), fetched_at=self._clock())

    def lock(self, url: str) -> asyncio.Lock:
        lock = self._locks.get(url)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[url] = lock
        return lock

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

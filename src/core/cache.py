"""Caller-owned cache with per-entry expiry.

Callers create one ``ExpiringCache`` and pass it where memoization is wanted.
Nothing here is module-level state.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Hashable

from django.utils import timezone


@dataclass(frozen=True)
class CacheEntry:
    key: Hashable
    value: Any
    fetched_at: datetime


class ExpiringCache:
    """Map of ``key -> CacheEntry`` whose entries go stale after ``ttl``."""

    def __init__(self, ttl: timedelta | int, *, clock: Callable[[], datetime] | None = None) -> None:
        if isinstance(ttl, int):
            ttl = timedelta(seconds=ttl)
        self.ttl = ttl
        self._clock = clock or timezone.now
        self._entries: dict[Hashable, CacheEntry] = {}

    def __contains__(self, key: Hashable) -> bool:
        return self.get_entry(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, key: Hashable) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= self.ttl:
            del self._entries[key]
            return None
        return entry

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self.get_entry(key)
        return entry.value if entry is not None else default

    def set(self, key: Hashable, value: Any) -> CacheEntry:
        now = self._clock()
        self.prune(now)
        entry = CacheEntry(key=key, value=value, fetched_at=now)
        self._entries[key] = entry
        return entry

    def prune(self, now: datetime | None = None) -> int:
        """Drop every stale entry; returns how many were removed."""
        now = now or self._clock()
        stale = [key for key, entry in self._entries.items() if now - entry.fetched_at >= self.ttl]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Any]) -> Any:
        """Return the cached value, calling ``fetch`` when missing or stale."""
        entry = self.get_entry(key)
        if entry is None:
            entry = self.set(key, fetch())
        return entry.value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

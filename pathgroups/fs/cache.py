"""Short-lived directory-listing cache keyed by absolute path.

Entries expire after ``DIRECTORY_CACHE_TTL_SECONDS``; any change under a
watched root clears the whole cache rather than individual entries.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .local import EntryKind

DIRECTORY_CACHE_TTL_SECONDS = 3.0

ListingEntries = tuple[tuple[str, EntryKind], ...]


@dataclass(frozen=True)
class DirectoryCacheEntry:
    path: Path
    entries: ListingEntries
    fetched_at: float


class DirectoryCache:
    """TTL cache around a ``list_directory`` callable.

    Listing errors propagate to the caller and are never cached.
    """

    def __init__(
        self,
        list_directory: Callable[[Path], Iterable[tuple[str, EntryKind]]],
        *,
        ttl_seconds: float = DIRECTORY_CACHE_TTL_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._list_directory = list_directory
        self._ttl_seconds = ttl_seconds
        self._monotonic = monotonic
        self._entries: dict[Path, DirectoryCacheEntry] = {}

    def get(self, path: Path) -> ListingEntries:
        key = Path(path)
        now = self._monotonic()
        cached = self._entries.get(key)
        if cached is not None and (now - cached.fetched_at) < self._ttl_seconds:
            return cached.entries
        entries = tuple(self._list_directory(key))
        self._entries[key] = DirectoryCacheEntry(path=key, entries=entries, fetched_at=now)
        return entries

    def invalidate_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "DIRECTORY_CACHE_TTL_SECONDS",
    "DirectoryCache",
    "DirectoryCacheEntry",
    "ListingEntries",
]

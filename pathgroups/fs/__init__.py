"""Filesystem access for the engine.

This package contains the filesystem collaborator protocol, its real-disk
implementation with watchdog-backed watches, and the directory-listing cache.
"""

from __future__ import annotations

from .cache import DIRECTORY_CACHE_TTL_SECONDS, DirectoryCache, DirectoryCacheEntry
from .local import (
    EntryKind,
    FileStat,
    FileSystem,
    LocalFileSystem,
    NullWatch,
    WatchEvent,
    WatchHandle,
    is_structural_event,
    nearest_existing_directory,
)

__all__ = [
    "DIRECTORY_CACHE_TTL_SECONDS",
    "DirectoryCache",
    "DirectoryCacheEntry",
    "EntryKind",
    "FileStat",
    "FileSystem",
    "LocalFileSystem",
    "NullWatch",
    "WatchEvent",
    "WatchHandle",
    "is_structural_event",
    "nearest_existing_directory",
]

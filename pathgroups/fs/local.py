"""Filesystem collaborator: stat, directory listing, file reads and watches.

The engine only talks to the filesystem through the ``FileSystem`` protocol so
hosts and tests can substitute their own implementation. ``LocalFileSystem``
is the real-disk implementation; its watches are backed by ``watchdog``.
"""

from __future__ import annotations

import logging
import os
import stat as stat_module
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

EntryKind = Literal["file", "directory", "other"]
WatchEventKind = Literal["created", "modified", "deleted", "moved"]

_EVENT_KINDS: dict[str, WatchEventKind] = {
    "created": "created",
    "modified": "modified",
    "deleted": "deleted",
    "moved": "moved",
}


@dataclass(frozen=True)
class FileStat:
    """Subset of stat metadata the engine needs."""

    is_directory: bool


@dataclass(frozen=True)
class WatchEvent:
    """One change observed under a watched root."""

    kind: WatchEventKind
    path: Path
    root: Path


class WatchHandle(Protocol):
    def close(self) -> None: ...


class FileSystem(Protocol):
    def stat(self, path: Path) -> FileStat: ...

    def list_directory(self, path: Path) -> list[tuple[str, EntryKind]]: ...

    def read_file(self, path: Path) -> bytes: ...

    def watch(self, root: Path, callback: Callable[[WatchEvent], None]) -> WatchHandle: ...


class NullWatch:
    """Watch handle for roots that could not be watched."""

    def close(self) -> None:
        return None


def nearest_existing_directory(path: Path) -> Path | None:
    """Return ``path`` or its closest ancestor that is an existing directory."""
    for candidate in (path, *path.parents):
        if candidate.is_dir():
            return candidate
    return None


def is_structural_event(event: WatchEvent) -> bool:
    """Whether ``event`` created, removed or moved the watched root or an ancestor of it."""
    return event.kind != "modified" and event.root.is_relative_to(event.path)


class RootEventHandler(FileSystemEventHandler):
    """Translate watchdog events into ``WatchEvent`` callbacks for one root.

    When ``only_path`` is set (file roots, and roots that do not exist yet,
    watched through an ancestor directory) events for unrelated entries are
    dropped. Creation, removal and moves of an ancestor of ``only_path`` are
    still reported so the owner can re-arm the watch.
    """

    def __init__(
        self,
        root: Path,
        callback: Callable[[WatchEvent], None],
        only_path: Path | None = None,
    ) -> None:
        super().__init__()
        self.root = root
        self.only_path = only_path
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        kind = _EVENT_KINDS.get(event.event_type)
        if kind is None:
            return
        candidates = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            candidates.append(dest_path)
        for raw_path in candidates:
            path = Path(os.fsdecode(raw_path))
            if not self._accepts(kind, path):
                continue
            self._callback(WatchEvent(kind=kind, path=path, root=self.root))
            return

    def _accepts(self, kind: WatchEventKind, path: Path) -> bool:
        if self.only_path is None or path == self.only_path:
            return True
        return kind != "modified" and self.only_path.is_relative_to(path)


class _ObservedWatch:
    def __init__(self, filesystem: LocalFileSystem, watch: object, handler: RootEventHandler) -> None:
        self._filesystem = filesystem
        self._watch = watch
        self._handler = handler
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._filesystem._unschedule(self._watch, self._handler)


class LocalFileSystem:
    """Real-disk ``FileSystem`` with a lazily started shared watchdog observer."""

    def __init__(self) -> None:
        self._observer: Observer | None = None
        self._lock = threading.Lock()
        # Roots in the same directory share one observed watch.
        self._handler_counts: dict[object, int] = {}

    def stat(self, path: Path) -> FileStat:
        st = os.stat(path)
        return FileStat(is_directory=stat_module.S_ISDIR(st.st_mode))

    def list_directory(self, path: Path) -> list[tuple[str, EntryKind]]:
        entries: list[tuple[str, EntryKind]] = []
        with os.scandir(path) as scanned:
            for child in scanned:
                kind: EntryKind
                try:
                    if child.is_dir():
                        kind = "directory"
                    elif child.is_file():
                        kind = "file"
                    else:
                        kind = "other"
                except OSError:
                    kind = "other"
                entries.append((child.name, kind))
        return entries

    def read_file(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def watch(self, root: Path, callback: Callable[[WatchEvent], None]) -> WatchHandle:
        """Watch ``root`` recursively.

        File roots are watched through their parent directory. Roots that do
        not exist yet are watched through their nearest existing ancestor,
        which reports the structural event the caller needs to re-arm.
        """
        root = Path(root)
        if root.is_dir():
            target, recursive, only_path = root, True, None
        else:
            target = nearest_existing_directory(root.parent)
            if target is None:
                logger.debug("cannot watch %s: no existing ancestor", root)
                return NullWatch()
            recursive, only_path = False, root
        handler = RootEventHandler(root, callback, only_path=only_path)
        try:
            observer = self._ensure_observer()
            watch = observer.schedule(handler, str(target), recursive=recursive)
        except OSError as exc:
            logger.debug("cannot watch %s: %s", root, exc)
            return NullWatch()
        with self._lock:
            self._handler_counts[watch] = self._handler_counts.get(watch, 0) + 1
        return _ObservedWatch(self, watch, handler)

    def close(self) -> None:
        """Stop the shared observer thread, if one was started."""
        with self._lock:
            observer = self._observer
            self._observer = None
            self._handler_counts.clear()
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=2.0)

    def _ensure_observer(self) -> Observer:
        with self._lock:
            if self._observer is None:
                observer = Observer()
                observer.daemon = True
                observer.start()
                self._observer = observer
            return self._observer

    def _unschedule(self, watch: object, handler: RootEventHandler) -> None:
        with self._lock:
            observer = self._observer
            remaining = self._handler_counts.get(watch, 1) - 1
            if remaining > 0:
                self._handler_counts[watch] = remaining
            else:
                self._handler_counts.pop(watch, None)
        if observer is None:
            return
        try:
            if remaining > 0:
                observer.remove_handler_for_watch(handler, watch)
            else:
                observer.unschedule(watch)
        except (KeyError, OSError) as exc:
            logger.debug("unschedule failed: %s", exc)


__all__ = [
    "EntryKind",
    "FileStat",
    "FileSystem",
    "LocalFileSystem",
    "NullWatch",
    "RootEventHandler",
    "WatchEvent",
    "WatchEventKind",
    "WatchHandle",
    "is_structural_event",
    "nearest_existing_directory",
]

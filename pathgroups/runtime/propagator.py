"""Filesystem change propagation into cache invalidation and refresh signals.

One watch is kept per declared root. Watch callbacks may arrive on a backend
thread, so they only enqueue events; ``poll`` drains the queue on the engine
thread. Root events clear the directory cache and re-arm a debounced refresh;
group-document events trigger an immediate reload instead.

A watch opened before its root (or the document's directory) existed only
sees the root's ancestors. When such an ancestor or the root itself is
created, removed or moved, the watch is re-opened so it follows the new
shape of the tree.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from queue import Empty, Queue

from ..fs.cache import DirectoryCache
from ..fs.local import FileSystem, WatchEvent, WatchHandle, is_structural_event
from .deferred import DeferredTask

logger = logging.getLogger(__name__)

REFRESH_DEBOUNCE_SECONDS = 0.15


class ChangePropagator:
    def __init__(
        self,
        filesystem: FileSystem,
        cache: DirectoryCache,
        *,
        on_refresh: Callable[[], None],
        on_config_changed: Callable[[], None],
        monotonic: Callable[[], float] = time.monotonic,
        debounce_seconds: float = REFRESH_DEBOUNCE_SECONDS,
    ) -> None:
        self._filesystem = filesystem
        self._cache = cache
        self._on_config_changed = on_config_changed
        self._refresh = DeferredTask(on_refresh, debounce_seconds, monotonic=monotonic)
        self._events: Queue[tuple[bool, WatchEvent]] = Queue()
        self._watches: dict[Path, WatchHandle] = {}
        self._config_path: Path | None = None
        self._config_watch: WatchHandle | None = None

    @property
    def watched_roots(self) -> list[Path]:
        return list(self._watches)

    @property
    def refresh_pending(self) -> bool:
        return self._refresh.pending

    def sync_watches(self, roots: Iterable[Path]) -> None:
        """Keep exactly one watch per root in ``roots``."""
        wanted = list(dict.fromkeys(roots))
        for root in list(self._watches):
            if root not in wanted:
                self._watches.pop(root).close()
        for root in wanted:
            if root not in self._watches:
                self._watches[root] = self._filesystem.watch(root, self._enqueue_root_event)
        logger.debug("watching %d root(s)", len(self._watches))

    def watch_config(self, document_path: Path) -> None:
        if self._config_watch is not None:
            self._config_watch.close()
        self._config_path = document_path
        self._config_watch = self._filesystem.watch(document_path, self._enqueue_config_event)

    def _enqueue_root_event(self, event: WatchEvent) -> None:
        self._events.put((False, event))

    def _enqueue_config_event(self, event: WatchEvent) -> None:
        self._events.put((True, event))

    def handle_root_event(self, event: WatchEvent) -> None:
        logger.debug("%s %s", event.kind, event.path)
        self._cache.invalidate_all()
        if is_structural_event(event):
            self._rewatch_root(event.root)
        self._refresh.schedule()

    def _rewatch_root(self, root: Path) -> None:
        handle = self._watches.get(root)
        if handle is None:
            return
        handle.close()
        logger.debug("re-arming watch for %s", root)
        self._watches[root] = self._filesystem.watch(root, self._enqueue_root_event)

    def schedule_refresh(self) -> None:
        self._refresh.schedule()

    def poll(self) -> bool:
        """Drain queued events and fire a due refresh; returns whether it fired."""
        config_changed = False
        rearm_config = False
        while True:
            try:
                is_config, event = self._events.get_nowait()
            except Empty:
                break
            if is_config:
                config_changed = True
                # The document's own replacement keeps its directory watch valid.
                if is_structural_event(event) and event.path != event.root:
                    rearm_config = True
            else:
                self.handle_root_event(event)
        if rearm_config and self._config_path is not None:
            logger.debug("re-arming group document watch")
            self.watch_config(self._config_path)
        if config_changed:
            logger.debug("group document changed; reloading")
            self._on_config_changed()
        return self._refresh.poll()

    def close(self) -> None:
        for handle in self._watches.values():
            handle.close()
        self._watches.clear()
        if self._config_watch is not None:
            self._config_watch.close()
            self._config_watch = None
        self._refresh.cancel()


__all__ = ["ChangePropagator", "REFRESH_DEBOUNCE_SECONDS"]

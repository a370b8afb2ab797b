"""UI-facing engine: lazy group tree, live sync and active-file reveal.

``Engine`` wires the registry, materializer, directory cache, change
propagator, resolver and reveal walker together. Hosts pull children with
``get_children``, subscribe to ``on_changed`` and call ``poll`` from their
loop so debounced refreshes and queued watch events are processed on the
engine's own thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from ..events import Signal
from ..fs.cache import DirectoryCache
from ..fs.local import FileSystem, LocalFileSystem
from ..groups.registry import GroupRegistry
from ..groups.store import GroupStore
from ..logs import configure_logging
from ..paths import absolute, to_abs
from ..search import SearchScope, search_scope_for_group
from ..tree.materializer import TreeMaterializer
from ..tree.reveal import RevealWalker
from ..tree.types import TreeNode
from .config import ViewSettings, load_view_settings
from .git import BranchCache, BranchReader, GitBranchReader
from .propagator import ChangePropagator
from .resolver import ActiveGroupResolver
from .state import WorkspaceStateStore

logger = logging.getLogger(__name__)


class Engine:
    def __init__(
        self,
        workspace: Path,
        *,
        filesystem: FileSystem | None = None,
        store: GroupStore | None = None,
        state_store: WorkspaceStateStore | None = None,
        settings: ViewSettings | None = None,
        branch_reader: BranchReader | None = None,
        monotonic: Callable[[], float] = time.monotonic,
        watch: bool = True,
    ) -> None:
        self.workspace = absolute(workspace)
        self.filesystem: FileSystem = filesystem if filesystem is not None else LocalFileSystem()
        self.settings = settings if settings is not None else load_view_settings()
        configure_logging(self.settings.debug)
        self.on_changed = Signal()
        self.watching = watch

        self.store = store if store is not None else GroupStore(self.workspace)
        self.registry = GroupRegistry(self.store)
        self.cache = DirectoryCache(self.filesystem.list_directory, monotonic=monotonic)
        self.branch = BranchCache(
            branch_reader if branch_reader is not None else GitBranchReader(self.workspace, self.filesystem),
            monotonic=monotonic,
        )
        self.materializer = TreeMaterializer(self.workspace, self.registry, self.filesystem, self.cache)
        self.resolver = ActiveGroupResolver(
            self.registry,
            state_store if state_store is not None else WorkspaceStateStore(self.workspace),
            notify=self.on_changed.emit,
            monotonic=monotonic,
        )
        self.propagator = ChangePropagator(
            self.filesystem,
            self.cache,
            on_refresh=self.on_changed.emit,
            on_config_changed=self.refresh,
            monotonic=monotonic,
        )
        self.walker = RevealWalker(self.registry, self._children_for_walk, self._group_row)

        self.registry.changed.connect(self._on_registry_changed)
        if self.watching:
            self.propagator.watch_config(self.store.path)
        self.refresh()

    # Lifecycle

    def refresh(self) -> None:
        """Reload groups from the document and signal a full tree change."""
        self.branch.invalidate()
        self.registry.reload()

    def poll(self) -> bool:
        """Process queued watch events and due deferred signals."""
        fired = self.propagator.poll()
        return self.resolver.poll() or fired

    def close(self) -> None:
        self.propagator.close()
        self.resolver.cancel()
        close = getattr(self.filesystem, "close", None)
        if callable(close):
            close()

    def apply_settings(self, settings: ViewSettings) -> None:
        """Swap in a new settings snapshot and schedule a refresh."""
        previous = self.settings
        self.settings = settings
        configure_logging(settings.debug)
        if previous.active_behavior_enabled and not settings.active_behavior_enabled:
            self.resolver.set_active(None, settings)
        self.propagator.schedule_refresh()

    def _on_registry_changed(self) -> None:
        self.cache.invalidate_all()
        if self.watching:
            roots = [to_abs(self.workspace, rel) for _group, rel in self.registry.all_roots()]
            self.propagator.sync_watches(roots)
        self.on_changed.emit()

    # Tree surface

    def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        if node is None:
            return self.materializer.group_nodes(
                self.settings,
                self.resolver.active_group_id,
                self.branch.get(),
            )
        return self.materializer.children(node, self.settings)

    def get_parent(self, node: TreeNode) -> TreeNode | None:
        return self.materializer.parent(node, self.settings, self.resolver.active_group_id)

    def _children_for_walk(self, node: TreeNode) -> list[TreeNode]:
        return self.materializer.children(node, self.settings)

    def _group_row(self, group_id: str) -> TreeNode | None:
        group = self.registry.get(group_id)
        if group is None:
            return None
        return self.materializer.group_node(group, self.settings, self.resolver.active_group_id)

    # Active group

    def get_active_group_id(self) -> str | None:
        return self.resolver.active_group_id

    def set_active_group(self, group_id: str | None) -> bool:
        return self.resolver.set_active(group_id, self.settings)

    def find_owning_group(self, path: Path) -> str | None:
        return self.resolver.find_owning_group(path, self.resolver.active_group_id)

    def reveal(self, path: Path, group_id: str | None = None) -> TreeNode | None:
        """Locate the node for ``path`` under ``group_id`` (default: active group)."""
        if not self.settings.active_behavior_enabled and group_id is None:
            logger.debug("active behavior disabled")
            return None
        gid = group_id if group_id is not None else self.resolver.active_group_id
        if gid is None:
            logger.debug("no active group")
            return None
        if self.registry.get(gid) is None:
            logger.debug("group not found: %s", gid)
            return None
        return self.walker.reveal(path, self.settings.display_mode, gid)

    def sync_to_active_file(self, path: Path) -> TreeNode | None:
        """Follow the host's active file without changing the active group.

        Reveals under the active group first, then under the owning group.
        """
        if not self.settings.active_behavior_enabled:
            return None
        node = self.reveal(path)
        if node is not None:
            return node
        active = self.resolver.active_group_id
        owner = self.resolver.find_owning_group(path, active)
        if owner is None or owner == active:
            return None
        return self.reveal(path, group_id=owner)

    def activate_group(self, group_id: str, current_file: Path | None = None) -> TreeNode | None:
        """Make ``group_id`` active, then reveal ``current_file`` in it."""
        self.set_active_group(group_id)
        if current_file is None:
            return None
        return self.reveal(current_file)

    # Search

    def search_scope(self, group_id: str) -> SearchScope:
        return search_scope_for_group(self.registry.require(group_id), self.workspace, self.filesystem)


__all__ = ["Engine"]

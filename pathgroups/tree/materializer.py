"""Lazy child computation for group trees in both display modes.

``name`` mode lists each declared root directly under its group, in
declaration order. ``fullPath`` mode merges roots sharing path prefixes into
synthetic segment nodes, sorted by label. Below any root (or terminal
segment) that is a directory, children are the real directory listing.

Missing roots are skipped and unreadable directories yield no children.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from ..fs.cache import DirectoryCache
from ..fs.local import FileStat, FileSystem
from ..groups.matching import best_root
from ..groups.registry import GroupRegistry
from ..groups.types import Group
from ..paths import normalize_rel, rel_segments, to_abs, to_rel
from ..runtime.config import ViewSettings
from .types import TreeNode

logger = logging.getLogger(__name__)

DESCRIPTION_SEPARATOR = " • "


@dataclass(frozen=True)
class SegmentInfo:
    """One unique next path segment below a prefix."""

    name: str
    full_rel: str
    is_terminal: bool


def merge_segments(roots: Iterable[str], prefix: str | None) -> list[SegmentInfo]:
    """Return the unique first segments of ``roots`` remaining below ``prefix``.

    Prefix matching is per segment: a root matches when it equals ``prefix``
    or starts with ``prefix + "/"``. A segment is terminal when any root
    equals it exactly. Order is first appearance; callers sort.
    """
    prefix_rel = normalize_rel(prefix) if prefix else ""
    seen: dict[str, SegmentInfo] = {}
    for rel in roots:
        if prefix_rel and not (rel == prefix_rel or rel.startswith(prefix_rel + "/")):
            continue
        rest = rel[len(prefix_rel):].lstrip("/") if prefix_rel else rel
        first = rest.split("/")[0]
        if not first:
            continue
        segment_rel = f"{prefix_rel}/{first}" if prefix_rel else first
        is_terminal = rel == segment_rel
        previous = seen.get(first)
        if previous is None:
            seen[first] = SegmentInfo(name=first, full_rel=segment_rel, is_terminal=is_terminal)
        elif is_terminal and not previous.is_terminal:
            seen[first] = replace(previous, is_terminal=True)
    return list(seen.values())


class TreeMaterializer:
    """Compute tree nodes on demand from registry and filesystem state."""

    def __init__(
        self,
        workspace: Path,
        registry: GroupRegistry,
        filesystem: FileSystem,
        cache: DirectoryCache,
    ) -> None:
        self.workspace = workspace
        self.registry = registry
        self._filesystem = filesystem
        self._cache = cache

    # Group rows

    def group_node(
        self,
        group: Group,
        settings: ViewSettings,
        active_group_id: str | None,
        current_branch: str | None = None,
    ) -> TreeNode:
        """Build the top-level row for ``group`` with active/branch decoration."""
        mismatch = bool(group.bound_ref and current_branch and group.bound_ref != current_branch)
        is_active = settings.active_behavior_enabled and active_group_id == group.id
        if mismatch:
            context = "groupMismatchActive" if is_active else "groupMismatch"
        else:
            context = "groupActive" if is_active else "group"

        if settings.active_behavior_enabled and settings.collapse_others_on_activate and active_group_id:
            collapsible = "expanded" if is_active else "collapsed"
        else:
            collapsible = "expanded"

        description_parts: list[str] = []
        if group.bound_ref:
            description_parts.append(group.bound_ref)
        if is_active:
            description_parts.append("active")

        tooltip = None
        if group.bound_ref:
            tooltip = f"{group.name} - {group.bound_ref}"
            if mismatch:
                tooltip += f" (current: {current_branch or 'unknown'})"

        return TreeNode(
            kind="group",
            label=group.name,
            group_id=group.id,
            has_children=True,
            node_id=f"group:{group.id}",
            collapsible=collapsible,
            context=context,
            description=DESCRIPTION_SEPARATOR.join(description_parts) if description_parts else None,
            tooltip=tooltip,
        )

    def group_nodes(
        self,
        settings: ViewSettings,
        active_group_id: str | None,
        current_branch: str | None,
    ) -> list[TreeNode]:
        return [
            self.group_node(group, settings, active_group_id, current_branch)
            for group in self.registry.list_groups()
        ]

    # Children

    def children(self, node: TreeNode, settings: ViewSettings) -> list[TreeNode]:
        group = self.registry.get(node.group_id)
        if group is None:
            return []

        if node.kind == "group":
            if settings.display_mode == "fullPath":
                return self.segment_children(group, None)
            return self.root_items(group)

        if node.kind == "path_segment":
            if not node.is_terminal:
                return self.segment_children(group, node.root_rel)
            if node.absolute_path is None:
                return []
            stat = self._stat(node.absolute_path)
            if stat is None or not stat.is_directory:
                return []
            return self.listing_children(node)

        if node.kind in ("root_item", "fs_entry"):
            return self.listing_children(node)
        return []

    def root_items(self, group: Group) -> list[TreeNode]:
        """Flat-mode children: existing roots in declaration order."""
        nodes: list[TreeNode] = []
        for rel in group.roots:
            stat = self._stat(to_abs(self.workspace, rel))
            if stat is None:
                continue
            nodes.append(self._root_item_node(group, rel, stat.is_directory))
        return nodes

    def segment_children(self, group: Group, prefix: str | None) -> list[TreeNode]:
        """Full-path-mode children below ``prefix`` (``None`` for the group level)."""
        nodes: list[TreeNode] = []
        for info in merge_segments(group.roots, prefix):
            if info.is_terminal:
                stat = self._stat(to_abs(self.workspace, info.full_rel))
                if stat is None:
                    continue
                is_directory = stat.is_directory
            else:
                # Only exists because a root lies below it.
                is_directory = True
            nodes.append(self._segment_node(group, info.full_rel, info.is_terminal, is_directory))
        nodes.sort(key=lambda item: item.label)
        return nodes

    def listing_children(self, node: TreeNode) -> list[TreeNode]:
        """Real directory entries of ``node``, sorted by name."""
        directory = node.absolute_path
        if directory is None:
            return []
        try:
            entries = self._cache.get(directory)
        except OSError as exc:
            logger.debug("cannot list %s: %s", directory, exc)
            return []
        root_rel = node.root_rel if node.root_rel is not None else self._find_root_rel(node.group_id, directory)
        children = [
            self._fs_node(node.group_id, directory / name, root_rel, kind == "directory")
            for name, kind in entries
        ]
        children.sort(key=lambda item: item.label)
        return children

    # Parents

    def parent(
        self,
        node: TreeNode,
        settings: ViewSettings,
        active_group_id: str | None,
    ) -> TreeNode | None:
        if node.kind == "group":
            return None
        group = self.registry.get(node.group_id)
        if group is None:
            return None
        group_row = self.group_node(group, settings, active_group_id)

        if node.kind == "root_item":
            return group_row

        if node.kind == "path_segment":
            full_rel = node.root_rel or ""
            idx = full_rel.rfind("/")
            if idx <= 0:
                return group_row
            parent_rel = full_rel[:idx]
            return self._segment_node(group, parent_rel, parent_rel in group.roots, True)

        if node.kind == "fs_entry":
            if node.absolute_path is None:
                return None
            parent_path = node.absolute_path.parent
            parent_ws_rel = to_rel(self.workspace, parent_path)
            if parent_ws_rel is not None and parent_ws_rel == (node.root_rel or ""):
                if settings.display_mode == "name":
                    return self._root_item_node(group, parent_ws_rel, True)
                return self._segment_node(group, parent_ws_rel, True, True)
            return self._fs_node(group.id, parent_path, node.root_rel, True)
        return None

    # Node builders

    def _root_item_node(self, group: Group, rel: str, is_directory: bool) -> TreeNode:
        target = to_abs(self.workspace, rel)
        return TreeNode(
            kind="root_item",
            label=target.name or rel,
            group_id=group.id,
            absolute_path=target,
            root_rel=rel,
            is_terminal=True,
            has_children=is_directory,
            node_id=f"item:{group.id}:{rel}",
            collapsible="collapsed" if is_directory else "none",
            context="item",
            tooltip=rel,
        )

    def _segment_node(self, group: Group, rel: str, is_terminal: bool, is_directory: bool) -> TreeNode:
        segments = rel_segments(rel)
        return TreeNode(
            kind="path_segment",
            label=segments[-1] if segments else rel,
            group_id=group.id,
            absolute_path=to_abs(self.workspace, rel),
            root_rel=rel,
            is_terminal=is_terminal,
            has_children=is_directory,
            node_id=f"path:{group.id}:{rel}",
            collapsible="collapsed" if is_directory else "none",
            context="item" if is_terminal else "fs",
            tooltip=rel,
        )

    def _fs_node(self, group_id: str, path: Path, root_rel: str | None, is_directory: bool) -> TreeNode:
        ws_rel = to_rel(self.workspace, path)
        if ws_rel is None:
            ws_rel = path.as_posix()
        return TreeNode(
            kind="fs_entry",
            label=path.name,
            group_id=group_id,
            absolute_path=path,
            root_rel=root_rel,
            has_children=is_directory,
            node_id=f"fs:{group_id}:{ws_rel}",
            collapsible="collapsed" if is_directory else "none",
            context="fs",
            tooltip=ws_rel,
        )

    def _stat(self, path: Path) -> FileStat | None:
        try:
            return self._filesystem.stat(path)
        except OSError as exc:
            logger.debug("skipping %s: %s", path, exc)
            return None

    def _find_root_rel(self, group_id: str, path: Path) -> str | None:
        group = self.registry.get(group_id)
        if group is None:
            return None
        match = best_root(group, self.workspace, path)
        return match.root_rel if match is not None else None


__all__ = ["SegmentInfo", "TreeMaterializer", "merge_segments"]

"""Walk a group tree one segment at a time to find the node for a path.

The walk asks the materializer for children at each level and picks the
next node with an ordered list of matchers (display label first, then the
node's path basename). It is best effort: the first segment without a match
ends the walk, and a final one-level exact-path lookup is tried before
giving up. Nothing here raises for missing paths.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from ..groups.registry import GroupRegistry
from ..paths import absolute, rel_segments
from ..runtime.config import DisplayMode
from .types import TreeNode

logger = logging.getLogger(__name__)

SegmentMatcher = Callable[[TreeNode, str], bool]
ChildrenFn = Callable[[TreeNode], list[TreeNode]]


def match_label(node: TreeNode, segment: str) -> bool:
    return node.label == segment


def match_path_name(node: TreeNode, segment: str) -> bool:
    return node.absolute_path is not None and node.absolute_path.name == segment


DEFAULT_MATCHERS: tuple[SegmentMatcher, ...] = (match_label, match_path_name)


def pick_child(children: Sequence[TreeNode], segment: str, matchers: Sequence[SegmentMatcher]) -> TreeNode | None:
    """Return the first child accepted by the earliest matcher that accepts any."""
    for matcher in matchers:
        for child in children:
            if matcher(child, segment):
                return child
    return None


class RevealWalker:
    def __init__(
        self,
        registry: GroupRegistry,
        children: ChildrenFn,
        group_node: Callable[[str], TreeNode | None],
        matchers: Sequence[SegmentMatcher] = DEFAULT_MATCHERS,
    ) -> None:
        self.registry = registry
        self._children = children
        self._group_node = group_node
        self.matchers = tuple(matchers)

    def reveal(self, path: Path, display_mode: DisplayMode, start_group_id: str) -> TreeNode | None:
        """Return the node for ``path`` under ``start_group_id`` or ``None``."""
        target = absolute(path)
        match = self.registry.find_best_root(start_group_id, target)
        if match is None:
            logger.debug("no root of %s contains %s", start_group_id, target)
            return None
        group_row = self._group_node(start_group_id)
        if group_row is None:
            logger.debug("group node not found: %s", start_group_id)
            return None

        file_segments = list(target.relative_to(match.root_path).parts)

        if display_mode == "name":
            current = self._find_root_item(group_row, match.root_rel)
            if current is None:
                logger.debug("root item not found: %s", match.root_rel)
                return None
            segments = file_segments
        else:
            current = group_row
            segments = [*rel_segments(match.root_rel), *file_segments]

        for segment in segments:
            following = pick_child(self._children(current), segment, self.matchers)
            if following is None:
                logger.debug("segment not found (%s): %s", display_mode, segment)
                break
            current = following

        if current.absolute_path == target:
            return current
        for child in self._children(current):
            if child.absolute_path == target:
                logger.debug("reveal final exact: %s", child.label)
                return child
        logger.debug("final node not matched for %s", target)
        return None

    def _find_root_item(self, group_row: TreeNode, root_rel: str) -> TreeNode | None:
        top = self._children(group_row)
        for node in top:
            if node.root_rel == root_rel:
                return node
        segments = rel_segments(root_rel)
        basename = segments[-1] if segments else root_rel
        for node in top:
            if node.label == basename:
                return node
        return None


__all__ = [
    "DEFAULT_MATCHERS",
    "RevealWalker",
    "SegmentMatcher",
    "match_label",
    "match_path_name",
    "pick_child",
]

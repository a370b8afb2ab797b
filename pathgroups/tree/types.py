"""Tree node datatype produced by the materializer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

NodeKind = Literal["group", "root_item", "path_segment", "fs_entry"]
Collapsible = Literal["none", "collapsed", "expanded"]


@dataclass(frozen=True)
class TreeNode:
    """One row of the group tree.

    Nodes never hold children; asking for a node's children always
    recomputes them from current group and filesystem state.
    ``root_rel`` is the workspace-relative root a node descends from (for
    path segments, the segment's own workspace-relative path).
    """

    kind: NodeKind
    label: str
    group_id: str
    absolute_path: Path | None = None
    root_rel: str | None = None
    is_terminal: bool = False
    has_children: bool = False
    node_id: str = ""
    collapsible: Collapsible = "none"
    context: str = ""
    description: str | None = None
    tooltip: str | None = None

    @property
    def opens_file(self) -> bool:
        return self.kind != "group" and self.absolute_path is not None and not self.has_children


__all__ = ["Collapsible", "NodeKind", "TreeNode"]

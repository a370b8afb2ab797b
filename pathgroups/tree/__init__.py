"""Group tree nodes, lazy materialization and reveal traversal."""

from __future__ import annotations

from .materializer import SegmentInfo, TreeMaterializer, merge_segments
from .reveal import DEFAULT_MATCHERS, RevealWalker, match_label, match_path_name, pick_child
from .types import Collapsible, NodeKind, TreeNode

__all__ = [
    "Collapsible",
    "DEFAULT_MATCHERS",
    "NodeKind",
    "RevealWalker",
    "SegmentInfo",
    "TreeMaterializer",
    "TreeNode",
    "match_label",
    "match_path_name",
    "merge_segments",
    "pick_child",
]

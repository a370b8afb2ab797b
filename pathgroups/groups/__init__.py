"""Group data model, document store, registry and root matching."""

from __future__ import annotations

from .matching import RootMatch, best_root, match_roots
from .registry import GroupRegistry, new_group_id
from .store import CONFIG_DIR, CONFIG_FILENAME, GroupStore, default_document_path
from .types import Group, unique_roots

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILENAME",
    "Group",
    "GroupRegistry",
    "GroupStore",
    "RootMatch",
    "best_root",
    "default_document_path",
    "match_roots",
    "new_group_id",
    "unique_roots",
]

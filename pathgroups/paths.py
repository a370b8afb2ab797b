"""Workspace-relative path helpers.

Group roots are stored as forward-slash, workspace-relative strings with no
trailing slash. These helpers convert between that form and absolute paths.
"""

from __future__ import annotations

import os
from pathlib import Path


def normalize_rel(path: str) -> str:
    """Return ``path`` with forward slashes, no ``./`` prefix and no trailing slash."""
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    while len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def rel_segments(rel: str) -> list[str]:
    """Split a normalized relative path into its non-empty segments."""
    return [segment for segment in rel.split("/") if segment]


def to_abs(workspace: Path, rel: str) -> Path:
    """Join a workspace-relative root onto ``workspace``."""
    return workspace.joinpath(*rel_segments(rel))


def to_rel(workspace: Path, path: Path) -> str | None:
    """Return ``path`` relative to ``workspace`` or ``None`` when outside it."""
    try:
        rel = os.path.relpath(os.path.abspath(path), workspace)
    except ValueError:
        # Different drives on Windows.
        return None
    rel = normalize_rel(rel)
    if rel == ".":
        return ""
    if rel == ".." or rel.startswith("../"):
        return None
    return rel


def is_same_or_descendant(path: Path, root: Path) -> bool:
    """Return whether ``path`` equals ``root`` or lies strictly below it."""
    return path == root or path.is_relative_to(root)


def absolute(path: Path | str) -> Path:
    """Return an absolute, lexically normalized path without resolving symlinks."""
    return Path(os.path.abspath(path))


__all__ = [
    "absolute",
    "is_same_or_descendant",
    "normalize_rel",
    "rel_segments",
    "to_abs",
    "to_rel",
]

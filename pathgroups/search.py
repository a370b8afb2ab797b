"""Glob scope for searching inside a group's roots.

Only the first level of each root is in scope: a file root contributes its
own path, while a directory root contributes its immediate children and
excludes anything deeper.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .fs.local import FileSystem
from .groups.types import Group
from .paths import to_abs


@dataclass(frozen=True)
class SearchScope:
    includes: str | None
    excludes: str | None


def join_globs(patterns: list[str]) -> str | None:
    """Combine patterns as one glob: bare when single, ``{a,b}`` otherwise."""
    unique = list(dict.fromkeys(patterns))
    if not unique:
        return None
    if len(unique) == 1:
        return unique[0]
    return "{" + ",".join(unique) + "}"


def search_scope_for_group(group: Group, workspace: Path, filesystem: FileSystem) -> SearchScope:
    includes: list[str] = []
    excludes: list[str] = []
    for rel in group.roots:
        rel = rel.strip()
        if not rel:
            continue
        try:
            is_directory = filesystem.stat(to_abs(workspace, rel)).is_directory
        except OSError:
            # Unknown kind: scope it like a directory.
            is_directory = True
        if is_directory:
            includes.append(f"{rel}/*")
            excludes.append(f"{rel}/*/**")
        else:
            includes.append(rel)
    return SearchScope(includes=join_globs(includes), excludes=join_globs(excludes))


__all__ = ["SearchScope", "join_globs", "search_scope_for_group"]

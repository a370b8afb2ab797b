"""Root-prefix matching of absolute paths against group roots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..paths import is_same_or_descendant, to_abs
from .types import Group


@dataclass(frozen=True)
class RootMatch:
    """A group root that contains (or equals) a queried path."""

    group_id: str
    root_rel: str
    root_path: Path

    @property
    def specificity(self) -> int:
        return len(str(self.root_path))


def match_roots(groups: Iterable[Group], workspace: Path, target: Path) -> list[RootMatch]:
    """Return every ``(group, root)`` pair whose absolute root contains ``target``."""
    matches: list[RootMatch] = []
    for group in groups:
        for rel in group.roots:
            root_path = to_abs(workspace, rel)
            if is_same_or_descendant(target, root_path):
                matches.append(RootMatch(group_id=group.id, root_rel=rel, root_path=root_path))
    return matches


def best_root(group: Group, workspace: Path, target: Path) -> RootMatch | None:
    """Return the longest root of ``group`` containing ``target``."""
    best: RootMatch | None = None
    for match in match_roots([group], workspace, target):
        if best is None or match.specificity > best.specificity:
            best = match
    return best


__all__ = ["RootMatch", "best_root", "match_roots"]

"""Ordered group registry with flush-then-commit mutations.

Every mutation builds a new group list, writes it through the store, and only
then replaces the in-memory list. A failed write raises ``PersistenceError``
and leaves the registry exactly as it was.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from pathlib import Path

from ..errors import PersistenceError, UnknownGroupError
from ..events import Signal
from ..paths import normalize_rel
from .matching import RootMatch, best_root
from .store import GroupStore
from .types import Group, unique_roots

logger = logging.getLogger(__name__)


def new_group_id() -> str:
    return str(uuid.uuid4())


class GroupRegistry:
    """In-memory view of the group document.

    ``changed`` fires after every committed mutation and after ``reload``.
    """

    def __init__(self, store: GroupStore, *, new_id: Callable[[], str] = new_group_id) -> None:
        self.store = store
        self.changed = Signal()
        self._new_id = new_id
        self._groups: tuple[Group, ...] = ()

    @property
    def workspace(self) -> Path:
        return self.store.workspace

    def reload(self) -> list[Group]:
        self._groups = tuple(self.store.load())
        self.changed.emit()
        return list(self._groups)

    def list_groups(self) -> list[Group]:
        return list(self._groups)

    def get(self, group_id: str) -> Group | None:
        # Later duplicates win, matching a map keyed by id.
        for group in reversed(self._groups):
            if group.id == group_id:
                return group
        return None

    def require(self, group_id: str) -> Group:
        group = self.get(group_id)
        if group is None:
            raise UnknownGroupError(group_id)
        return group

    def all_roots(self) -> list[tuple[Group, str]]:
        return [(group, rel) for group in self._groups for rel in group.roots]

    def find_best_root(self, group_id: str, target: Path) -> RootMatch | None:
        group = self.get(group_id)
        if group is None:
            return None
        return best_root(group, self.workspace, target)

    def add_group(self, name: str) -> Group:
        group = Group(id=self._new_id(), name=name)
        self._commit([*self._groups, group])
        return group

    def rename_group(self, group_id: str, name: str) -> Group:
        return self._update(group_id, lambda group: replace(group, name=name))

    def delete_group(self, group_id: str) -> None:
        self.require(group_id)
        self._commit([group for group in self._groups if group.id != group_id])

    def copy_group(self, group_id: str, new_name: str) -> Group:
        source = self.require(group_id)
        copy = Group(id=self._new_id(), name=new_name, roots=tuple(source.roots))
        self._commit([*self._groups, copy])
        return copy

    def reorder(self, group_id: str, direction: int) -> bool:
        """Swap a group with its neighbour; returns ``False`` at list boundaries."""
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1, got {direction!r}")
        idx = self._index(group_id)
        swap_with = idx + direction
        if swap_with < 0 or swap_with >= len(self._groups):
            return False
        groups = list(self._groups)
        groups[idx], groups[swap_with] = groups[swap_with], groups[idx]
        self._commit(groups)
        return True

    def move_groups(self, group_ids: Sequence[str], before_id: str | None = None) -> bool:
        """Move ``group_ids`` (keeping their order) in front of ``before_id``.

        Groups land at the end of the list when ``before_id`` is ``None`` or
        itself one of the moved groups. Returns ``False`` when nothing matched.
        """
        moving = set(group_ids)
        dragged = [group for group in self._groups if group.id in moving]
        if not dragged:
            return False
        remaining = [group for group in self._groups if group.id not in moving]
        insert_idx = len(remaining)
        if before_id is not None:
            for idx, group in enumerate(remaining):
                if group.id == before_id:
                    insert_idx = idx
                    break
        remaining[insert_idx:insert_idx] = dragged
        self._commit(remaining)
        return True

    def add_roots(self, group_id: str, paths: Iterable[str]) -> int:
        """Append new roots in order, skipping ones already present; returns count added."""
        group = self.require(group_id)
        existing = set(group.roots)
        added = [rel for rel in unique_roots(paths) if rel not in existing]
        if not added:
            return 0
        self._replace(group, group.with_roots([*group.roots, *added]))
        return len(added)

    def remove_root(self, group_id: str, path: str) -> bool:
        group = self.require(group_id)
        rel = normalize_rel(path)
        if rel not in group.roots:
            return False
        self._replace(group, replace(group, roots=tuple(root for root in group.roots if root != rel)))
        return True

    def set_bound_ref(self, group_id: str, ref: str | None) -> Group:
        cleaned = ref.strip() if ref is not None else None
        return self._update(group_id, lambda group: replace(group, bound_ref=cleaned or None))

    def _index(self, group_id: str) -> int:
        for idx in range(len(self._groups) - 1, -1, -1):
            if self._groups[idx].id == group_id:
                return idx
        raise UnknownGroupError(group_id)

    def _update(self, group_id: str, change: Callable[[Group], Group]) -> Group:
        group = self.require(group_id)
        updated = change(group)
        self._replace(group, updated)
        return updated

    def _replace(self, old: Group, new: Group) -> None:
        idx = self._index(old.id)
        groups = list(self._groups)
        groups[idx] = new
        self._commit(groups)

    def _commit(self, groups: list[Group]) -> None:
        try:
            self.store.save(groups)
        except (OSError, TypeError, ValueError) as exc:
            logger.debug("group document write failed: %s", exc)
            raise PersistenceError(f"could not save groups to {self.store.path}: {exc}") from exc
        self._groups = tuple(groups)
        self.changed.emit()


__all__ = ["GroupRegistry", "new_group_id"]

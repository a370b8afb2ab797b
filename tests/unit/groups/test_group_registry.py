"""Registry mutations, ordering and flush-then-commit semantics."""

from __future__ import annotations

import itertools
import tempfile
import unittest
from pathlib import Path

from pathgroups.errors import PersistenceError, UnknownGroupError
from pathgroups.groups.registry import GroupRegistry
from pathgroups.groups.store import GroupStore
from pathgroups.groups.types import Group


class FlakyStore(GroupStore):
    def __init__(self, workspace: Path) -> None:
        super().__init__(workspace)
        self.fail = False
        self.saves = 0

    def save(self, groups) -> None:
        if self.fail:
            raise OSError("disk full")
        self.saves += 1
        super().save(groups)


class GroupRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.workspace = Path(self._tmp.name).resolve()
        self.store = FlakyStore(self.workspace)
        counter = itertools.count(1)
        self.registry = GroupRegistry(self.store, new_id=lambda: f"id{next(counter)}")
        self.changes = 0
        self.registry.changed.connect(self._count_change)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _count_change(self) -> None:
        self.changes += 1

    def test_add_rename_delete_persist_and_notify(self) -> None:
        group = self.registry.add_group("Docs")
        self.registry.rename_group(group.id, "Documentation")

        self.assertEqual([g.name for g in self.store.load()], ["Documentation"])
        self.registry.delete_group(group.id)

        self.assertEqual(self.registry.list_groups(), [])
        self.assertEqual(self.store.load(), [])
        self.assertEqual(self.changes, 3)

    def test_copy_duplicates_roots_with_fresh_id(self) -> None:
        source = self.registry.add_group("Src")
        self.registry.add_roots(source.id, ["src/a", "src/b"])

        copy = self.registry.copy_group(source.id, "Copy of Src")

        self.assertNotEqual(copy.id, source.id)
        self.assertEqual(copy.roots, ("src/a", "src/b"))
        self.assertEqual([g.id for g in self.registry.list_groups()], [source.id, copy.id])

    def test_reorder_swaps_neighbours_and_is_noop_at_boundaries(self) -> None:
        a = self.registry.add_group("A")
        b = self.registry.add_group("B")
        c = self.registry.add_group("C")
        saves_before = self.store.saves

        self.assertFalse(self.registry.reorder(a.id, -1))
        self.assertFalse(self.registry.reorder(c.id, 1))
        self.assertEqual(self.store.saves, saves_before)

        self.assertTrue(self.registry.reorder(c.id, -1))
        self.assertEqual([g.name for g in self.registry.list_groups()], ["A", "C", "B"])
        with self.assertRaises(ValueError):
            self.registry.reorder(b.id, 2)

    def test_move_groups_inserts_before_target_or_at_end(self) -> None:
        a = self.registry.add_group("A")
        b = self.registry.add_group("B")
        c = self.registry.add_group("C")
        d = self.registry.add_group("D")

        self.registry.move_groups([d.id, c.id], before_id=b.id)
        self.assertEqual([g.name for g in self.registry.list_groups()], ["A", "C", "D", "B"])

        self.registry.move_groups([a.id])
        self.assertEqual([g.name for g in self.registry.list_groups()], ["C", "D", "B", "A"])
        self.assertFalse(self.registry.move_groups(["nope"]))

    def test_add_roots_dedupes_and_remove_root_round_trips(self) -> None:
        group = self.registry.add_group("G")
        self.registry.add_roots(group.id, ["src/x", "lib"])
        before = self.registry.require(group.id).roots

        added = self.registry.add_roots(group.id, ["docs\\guide", "lib", "docs/guide/"])
        self.assertEqual(added, 1)
        self.assertEqual(self.registry.require(group.id).roots, ("src/x", "lib", "docs/guide"))

        self.assertTrue(self.registry.remove_root(group.id, "docs/guide"))
        self.assertEqual(self.registry.require(group.id).roots, before)
        self.assertFalse(self.registry.remove_root(group.id, "docs/guide"))

    def test_set_bound_ref_and_clear(self) -> None:
        group = self.registry.add_group("G")
        self.registry.set_bound_ref(group.id, " feature/x ")
        self.assertEqual(self.registry.require(group.id).bound_ref, "feature/x")
        self.registry.set_bound_ref(group.id, None)
        self.assertIsNone(self.registry.require(group.id).bound_ref)

    def test_flush_failure_leaves_state_unchanged(self) -> None:
        group = self.registry.add_group("Keep")
        self.registry.add_roots(group.id, ["src"])
        snapshot = self.registry.list_groups()
        changes_before = self.changes
        self.store.fail = True

        with self.assertRaises(PersistenceError):
            self.registry.add_roots(group.id, ["lib"])
        with self.assertRaises(PersistenceError):
            self.registry.add_group("Other")
        with self.assertRaises(PersistenceError):
            self.registry.delete_group(group.id)

        self.assertEqual(self.registry.list_groups(), snapshot)
        self.assertEqual(self.changes, changes_before)

    def test_unknown_group_raises(self) -> None:
        with self.assertRaises(UnknownGroupError):
            self.registry.rename_group("missing", "x")
        with self.assertRaises(KeyError):
            self.registry.add_roots("missing", ["a"])

    def test_duplicate_ids_resolve_to_last_entry(self) -> None:
        self.store.save([Group(id="dup", name="first"), Group(id="dup", name="second")])
        self.registry.reload()

        self.assertEqual(self.registry.require("dup").name, "second")


if __name__ == "__main__":
    unittest.main()

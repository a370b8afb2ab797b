"""Engine live sync against real watchdog watches on a temporary workspace."""

from __future__ import annotations

import tempfile
import time
import unittest
from collections.abc import Callable
from pathlib import Path

from pathgroups.groups.store import GroupStore
from pathgroups.groups.types import Group
from pathgroups.runtime.config import ViewSettings
from pathgroups.runtime.engine import Engine
from pathgroups.runtime.state import WorkspaceStateStore

WAIT_SECONDS = 2.5


class StubBranchReader:
    def current_branch_name(self) -> str | None:
        return None


class LiveWatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name).resolve()
        self.workspace = base / "ws"
        (self.workspace / "lib").mkdir(parents=True)
        for name in ("a.ts", "b.ts"):
            (self.workspace / "lib" / name).write_text("x", encoding="utf-8")
        self.changes = 0
        self.engine = Engine(
            self.workspace,
            settings=ViewSettings(),
            state_store=WorkspaceStateStore(self.workspace, path=base / "state.json"),
            branch_reader=StubBranchReader(),
        )
        self.engine.on_changed.connect(self._count)

    def tearDown(self) -> None:
        self.engine.close()
        self._tmp.cleanup()

    def _count(self) -> None:
        self.changes += 1

    def pump_until(self, condition: Callable[[], bool]) -> bool:
        deadline = time.monotonic() + WAIT_SECONDS
        while time.monotonic() < deadline:
            self.engine.poll()
            if condition():
                return True
            time.sleep(0.02)
        return False

    def settle(self, seconds: float = 0.4) -> None:
        deadline = time.monotonic() + seconds
        while time.monotonic() < deadline:
            self.engine.poll()
            time.sleep(0.02)

    def labels_below_first_root(self) -> list[str] | None:
        group_row = self.engine.get_children()[0]
        roots = self.engine.get_children(group_row)
        if not roots:
            return None
        return [node.label for node in self.engine.get_children(roots[0])]

    def test_document_written_after_start_is_loaded(self) -> None:
        self.assertFalse((self.workspace / ".vscode").exists())

        GroupStore(self.workspace).save([Group(id="ext", name="External", roots=("lib",))])

        self.assertTrue(
            self.pump_until(lambda: [g.id for g in self.engine.registry.list_groups()] == ["ext"])
        )

    def test_root_created_after_it_was_added_is_followed(self) -> None:
        group = self.engine.registry.add_group("Later")
        self.engine.registry.add_roots(group.id, ["later"])
        self.settle()
        self.assertIsNone(self.labels_below_first_root())

        baseline = self.changes
        (self.workspace / "later").mkdir()
        self.assertTrue(self.pump_until(lambda: self.changes > baseline))
        self.assertEqual(self.labels_below_first_root(), [])

        (self.workspace / "later" / "x.txt").write_text("x", encoding="utf-8")

        self.assertTrue(self.pump_until(lambda: self.labels_below_first_root() == ["x.txt"]))

    def test_removing_one_file_root_keeps_its_sibling_watched(self) -> None:
        group = self.engine.registry.add_group("Files")
        self.engine.registry.add_roots(group.id, ["lib/a.ts", "lib/b.ts"])
        self.engine.registry.remove_root(group.id, "lib/b.ts")
        self.settle()

        baseline = self.changes
        (self.workspace / "lib" / "a.ts").write_text("changed", encoding="utf-8")

        self.assertTrue(self.pump_until(lambda: self.changes > baseline))


if __name__ == "__main__":
    unittest.main()

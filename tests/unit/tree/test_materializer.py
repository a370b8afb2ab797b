"""Flat and full-path tree materialization against real directories."""

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from pathgroups.fs.cache import DirectoryCache
from pathgroups.fs.local import LocalFileSystem
from pathgroups.groups.registry import GroupRegistry
from pathgroups.groups.store import GroupStore
from pathgroups.groups.types import Group
from pathgroups.runtime.config import ViewSettings
from pathgroups.tree.materializer import TreeMaterializer, merge_segments
from pathgroups.tree.types import TreeNode

NAME_MODE = ViewSettings(display_mode="name")
FULL_PATH_MODE = ViewSettings(display_mode="fullPath")


class CountingFileSystem(LocalFileSystem):
    def __init__(self) -> None:
        super().__init__()
        self.stat_calls: list[Path] = []

    def stat(self, path: Path):
        self.stat_calls.append(path)
        return super().stat(path)


class MergeSegmentsTests(unittest.TestCase):
    def test_unique_first_segments_below_prefix(self) -> None:
        segments = merge_segments(["a/b", "a/c/d", "ab/x", "z"], "a")

        self.assertEqual([(s.name, s.full_rel, s.is_terminal) for s in segments], [("b", "a/b", True), ("c", "a/c", False)])

    def test_terminal_flag_is_or_merged(self) -> None:
        segments = merge_segments(["a/b", "a"], None)

        self.assertEqual([(s.name, s.is_terminal) for s in segments], [("a", True)])


class MaterializerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.workspace = Path(self._tmp.name).resolve()
        self.fs = CountingFileSystem()
        self.registry = GroupRegistry(GroupStore(self.workspace))
        self.cache = DirectoryCache(self.fs.list_directory)
        self.materializer = TreeMaterializer(self.workspace, self.registry, self.fs, self.cache)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def make(self, *rels: str) -> None:
        for rel in rels:
            target = self.workspace / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(rel, encoding="utf-8")

    def group_with(self, *roots: str) -> TreeNode:
        group = self.registry.add_group("G")
        self.registry.add_roots(group.id, roots)
        return self.materializer.group_node(self.registry.require(group.id), NAME_MODE, None)

    def labels(self, nodes: list[TreeNode]) -> list[str]:
        return [node.label for node in nodes]


class FlatModeTests(MaterializerTestCase):
    def test_group_children_follow_declaration_order_and_skip_missing(self) -> None:
        self.make("zeta/", "alpha/b.txt")
        group_row = self.group_with("zeta", "missing/thing", "alpha/b.txt")

        children = self.materializer.children(group_row, NAME_MODE)

        self.assertEqual(self.labels(children), ["zeta", "b.txt"])
        self.assertEqual([c.kind for c in children], ["root_item", "root_item"])
        self.assertTrue(children[0].has_children)
        self.assertFalse(children[1].has_children)
        self.assertTrue(children[1].opens_file)
        self.assertEqual(children[0].node_id, f"item:{group_row.group_id}:zeta")

    def test_root_item_children_are_listing_sorted_case_sensitively(self) -> None:
        self.make("pkg/b.txt", "pkg/B.txt", "pkg/a/", "pkg/_x.txt")
        group_row = self.group_with("pkg")
        root_item = self.materializer.children(group_row, NAME_MODE)[0]

        children = self.materializer.children(root_item, NAME_MODE)

        self.assertEqual(self.labels(children), ["B.txt", "_x.txt", "a", "b.txt"])
        self.assertTrue(all(child.kind == "fs_entry" for child in children))
        self.assertTrue(all(child.root_rel == "pkg" for child in children))
        dir_child = children[2]
        self.assertTrue(dir_child.has_children)
        self.assertEqual(dir_child.node_id, f"fs:{group_row.group_id}:pkg/a")

    def test_unreadable_directory_yields_no_children(self) -> None:
        self.make("pkg/file.txt")
        group_row = self.group_with("pkg")
        root_item = self.materializer.children(group_row, NAME_MODE)[0]
        shutil.rmtree(self.workspace / "pkg")

        self.assertEqual(self.materializer.children(root_item, NAME_MODE), [])

    def test_children_are_recomputed_from_current_state(self) -> None:
        self.make("pkg/one.txt")
        group_row = self.group_with("pkg")
        root_item = self.materializer.children(group_row, NAME_MODE)[0]
        self.assertEqual(self.labels(self.materializer.children(root_item, NAME_MODE)), ["one.txt"])

        self.make("pkg/two.txt")
        self.cache.invalidate_all()

        self.assertEqual(self.labels(self.materializer.children(root_item, NAME_MODE)), ["one.txt", "two.txt"])


class FullPathModeTests(MaterializerTestCase):
    def test_feature_and_util_scenario(self) -> None:
        self.make("src/feature/a.py", "lib/util.ts")
        group_row = self.group_with("src/feature", "lib/util.ts")

        top = self.materializer.children(group_row, FULL_PATH_MODE)
        self.assertEqual(self.labels(top), ["lib", "src"])
        self.assertEqual([(n.is_terminal, n.has_children) for n in top], [(False, True), (False, True)])

        lib, src = top
        feature = self.materializer.children(src, FULL_PATH_MODE)
        self.assertEqual(self.labels(feature), ["feature"])
        self.assertTrue(feature[0].is_terminal)
        self.assertTrue(feature[0].has_children)

        util = self.materializer.children(lib, FULL_PATH_MODE)
        self.assertEqual(self.labels(util), ["util.ts"])
        self.assertTrue(util[0].is_terminal)
        self.assertFalse(util[0].has_children)

        files = self.materializer.children(feature[0], FULL_PATH_MODE)
        self.assertEqual(self.labels(files), ["a.py"])
        self.assertEqual(files[0].kind, "fs_entry")
        self.assertEqual(files[0].absolute_path, self.workspace / "src" / "feature" / "a.py")

    def test_shared_prefix_yields_single_non_terminal_segment(self) -> None:
        self.make("a/b/", "a/c.txt")
        group_row = self.group_with("a/c.txt", "a/b")

        top = self.materializer.children(group_row, FULL_PATH_MODE)
        self.assertEqual(self.labels(top), ["a"])
        self.assertFalse(top[0].is_terminal)
        self.assertEqual(self.labels(self.materializer.children(top[0], FULL_PATH_MODE)), ["b", "c.txt"])

    def test_root_and_nested_root_mark_segment_terminal(self) -> None:
        self.make("a/b/x.txt", "a/other.txt")
        group_row = self.group_with("a/b", "a")

        top = self.materializer.children(group_row, FULL_PATH_MODE)

        self.assertEqual(self.labels(top), ["a"])
        self.assertTrue(top[0].is_terminal)
        self.assertEqual(self.labels(self.materializer.children(top[0], FULL_PATH_MODE)), ["b", "other.txt"])

    def test_non_terminal_segments_are_not_statted(self) -> None:
        self.make("deep/nested/file.txt")
        group_row = self.group_with("deep/nested/file.txt")
        self.fs.stat_calls.clear()

        deep = self.materializer.children(group_row, FULL_PATH_MODE)
        nested = self.materializer.children(deep[0], FULL_PATH_MODE)
        self.assertEqual(self.fs.stat_calls, [])

        leaf = self.materializer.children(nested[0], FULL_PATH_MODE)
        self.assertEqual(self.labels(leaf), ["file.txt"])
        self.assertEqual(self.fs.stat_calls, [self.workspace / "deep" / "nested" / "file.txt"])

    def test_missing_terminal_segment_is_skipped(self) -> None:
        self.make("x/kept.txt")
        group_row = self.group_with("x/kept.txt", "x/gone.txt")

        top = self.materializer.children(group_row, FULL_PATH_MODE)

        self.assertEqual(self.labels(self.materializer.children(top[0], FULL_PATH_MODE)), ["kept.txt"])

    def test_siblings_sorted_case_sensitively(self) -> None:
        self.make("b/", "B/", "a/")
        group_row = self.group_with("b", "a", "B")

        self.assertEqual(self.labels(self.materializer.children(group_row, FULL_PATH_MODE)), ["B", "a", "b"])


class ParentAndGroupRowTests(MaterializerTestCase):
    def test_parent_chain_in_name_mode(self) -> None:
        self.make("pkg/sub/leaf.txt")
        group_row = self.group_with("pkg")
        root_item = self.materializer.children(group_row, NAME_MODE)[0]
        sub = self.materializer.children(root_item, NAME_MODE)[0]
        leaf = self.materializer.children(sub, NAME_MODE)[0]

        parent_of_leaf = self.materializer.parent(leaf, NAME_MODE, None)
        self.assertEqual(parent_of_leaf, sub)
        parent_of_sub = self.materializer.parent(sub, NAME_MODE, None)
        self.assertEqual(parent_of_sub, root_item)
        self.assertEqual(self.materializer.parent(root_item, NAME_MODE, None), group_row)
        self.assertIsNone(self.materializer.parent(group_row, NAME_MODE, None))

    def test_parent_chain_in_full_path_mode(self) -> None:
        self.make("src/feature/a.py")
        group_row = self.group_with("src/feature")
        src = self.materializer.children(group_row, FULL_PATH_MODE)[0]
        feature = self.materializer.children(src, FULL_PATH_MODE)[0]
        a_py = self.materializer.children(feature, FULL_PATH_MODE)[0]

        self.assertEqual(self.materializer.parent(a_py, FULL_PATH_MODE, None), feature)
        self.assertEqual(self.materializer.parent(feature, FULL_PATH_MODE, None), src)
        self.assertEqual(self.materializer.parent(src, FULL_PATH_MODE, None), group_row)

    def test_group_row_decoration(self) -> None:
        group = Group(id="g1", name="Feature", roots=(), bound_ref="main")

        plain = self.materializer.group_node(group, NAME_MODE, None, current_branch="main")
        self.assertEqual(plain.context, "group")
        self.assertEqual(plain.description, "main")
        self.assertEqual(plain.collapsible, "expanded")

        active_mismatch = self.materializer.group_node(group, NAME_MODE, "g1", current_branch="dev")
        self.assertEqual(active_mismatch.context, "groupMismatchActive")
        self.assertEqual(active_mismatch.description, "main • active")
        self.assertEqual(active_mismatch.tooltip, "Feature - main (current: dev)")

        collapse = ViewSettings(collapse_others_on_activate=True)
        self.assertEqual(self.materializer.group_node(group, collapse, "other").collapsible, "collapsed")
        self.assertEqual(self.materializer.group_node(group, collapse, "g1").collapsible, "expanded")

        disabled = ViewSettings(active_behavior_enabled=False)
        self.assertEqual(self.materializer.group_node(group, disabled, "g1").context, "group")

    def test_children_of_deleted_group_are_empty(self) -> None:
        self.make("pkg/")
        group_row = self.group_with("pkg")
        self.registry.delete_group(group_row.group_id)

        self.assertEqual(self.materializer.children(group_row, NAME_MODE), [])


if __name__ == "__main__":
    unittest.main()

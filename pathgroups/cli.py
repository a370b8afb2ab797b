"""Command-line front door for pathgroups.

Parses CLI options, opens the engine on a workspace directory, and runs one
group command: list/print trees, mutate groups, resolve owners, reveal
paths, or watch for changes.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .errors import PathGroupsError
from .groups.types import Group
from .paths import to_rel
from .runtime.config import DISPLAY_MODES, load_view_settings
from .runtime.engine import Engine
from .tree.types import TreeNode


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pathgroups",
        description="Manage named groups of workspace paths and browse them as trees.",
    )
    parser.add_argument("--workspace", "-w", default=None, help="Workspace directory. Defaults to current directory.")
    parser.add_argument("--mode", choices=DISPLAY_MODES, default=None, help="Display mode override.")
    parser.add_argument("--debug", action="store_true", help="Print diagnostic logging to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List groups and their roots.")
    tree = sub.add_parser("tree", help="Print group trees.")
    tree.add_argument("group", nargs="?", help="Group id or name (default: all groups).")
    tree.add_argument("--depth", type=_positive_int, default=3, help="Levels to expand below each group.")

    add_group = sub.add_parser("add-group", help="Create an empty group.")
    add_group.add_argument("name")
    rename = sub.add_parser("rename", help="Rename a group.")
    rename.add_argument("group")
    rename.add_argument("name")
    delete = sub.add_parser("delete", help="Delete a group.")
    delete.add_argument("group")
    copy = sub.add_parser("copy", help="Duplicate a group under a new name.")
    copy.add_argument("group")
    copy.add_argument("name")
    move = sub.add_parser("move", help="Move a group up or down.")
    move.add_argument("group")
    move.add_argument("direction", choices=("up", "down"))

    add = sub.add_parser("add", help="Add paths to a group.")
    add.add_argument("group")
    add.add_argument("paths", nargs="+")
    remove = sub.add_parser("remove", help="Remove a root from a group.")
    remove.add_argument("group")
    remove.add_argument("path")
    bind = sub.add_parser("bind", help="Bind a group to a branch (omit REF to clear).")
    bind.add_argument("group")
    bind.add_argument("ref", nargs="?")

    owner = sub.add_parser("owner", help="Print the group owning a path.")
    owner.add_argument("path")
    reveal = sub.add_parser("reveal", help="Print the tree path leading to a file.")
    reveal.add_argument("path")
    reveal.add_argument("--group", default=None, help="Group id or name (default: owning group).")
    activate = sub.add_parser("activate", help="Set (or clear with no GROUP) the active group.")
    activate.add_argument("group", nargs="?")

    search = sub.add_parser("search-globs", help="Print include/exclude globs for a group.")
    search.add_argument("group")
    watch = sub.add_parser("watch", help="Report tree changes until interrupted.")
    watch.add_argument("--seconds", type=_positive_float, default=None, help="Stop after this many seconds.")
    return parser


def resolve_group(engine: Engine, ref: str) -> Group:
    """Find a group by id, then by exact name."""
    group = engine.registry.get(ref)
    if group is not None:
        return group
    for candidate in engine.registry.list_groups():
        if candidate.name == ref:
            return candidate
    raise SystemExit(f"Group not found: {ref}")


def _workspace_rel(engine: Engine, raw: str) -> str:
    path = Path(raw)
    if not path.is_absolute():
        path = Path.cwd() / path
    rel = to_rel(engine.workspace, path)
    if rel is None or not rel:
        raise SystemExit(f"Path is not inside the workspace: {raw}")
    return rel


def format_node(node: TreeNode) -> str:
    label = node.label + ("/" if node.has_children and node.kind != "group" else "")
    if node.description:
        label += f"  ({node.description})"
    return label


def print_tree(engine: Engine, node: TreeNode, depth: int, out: TextIO, indent: int = 0) -> None:
    out.write("  " * indent + format_node(node) + "\n")
    if depth <= 0 or not node.has_children:
        return
    for child in engine.get_children(node):
        print_tree(engine, child, depth - 1, out, indent + 1)


def _ancestry(engine: Engine, node: TreeNode) -> list[TreeNode]:
    chain = [node]
    parent = engine.get_parent(node)
    while parent is not None:
        chain.append(parent)
        parent = engine.get_parent(parent)
    chain.reverse()
    return chain


def watch_loop(
    engine: Engine,
    out: TextIO,
    seconds: float | None,
    *,
    monotonic: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    poll_interval: float = 0.05,
) -> None:
    def report() -> None:
        out.write("tree changed\n")
        out.flush()

    disconnect = engine.on_changed.connect(report)
    deadline = None if seconds is None else monotonic() + seconds
    try:
        while deadline is None or monotonic() < deadline:
            engine.poll()
            sleep(poll_interval)
    except KeyboardInterrupt:
        pass
    finally:
        disconnect()


def run_command(engine: Engine, args: argparse.Namespace, out: TextIO) -> None:
    registry = engine.registry
    command = args.command

    if command == "list":
        active = engine.get_active_group_id()
        for group in registry.list_groups():
            marker = " *" if group.id == active else ""
            ref = f" [{group.bound_ref}]" if group.bound_ref else ""
            out.write(f"{group.name}{ref}{marker}  {group.id}\n")
            for rel in group.roots:
                out.write(f"  {rel}\n")
    elif command == "tree":
        rows = engine.get_children()
        if args.group is not None:
            group = resolve_group(engine, args.group)
            rows = [row for row in rows if row.group_id == group.id]
        for row in rows:
            print_tree(engine, row, args.depth, out)
    elif command == "add-group":
        group = registry.add_group(args.name)
        out.write(f"{group.id}\n")
    elif command == "rename":
        registry.rename_group(resolve_group(engine, args.group).id, args.name)
    elif command == "delete":
        registry.delete_group(resolve_group(engine, args.group).id)
    elif command == "copy":
        group = registry.copy_group(resolve_group(engine, args.group).id, args.name)
        out.write(f"{group.id}\n")
    elif command == "move":
        registry.reorder(resolve_group(engine, args.group).id, -1 if args.direction == "up" else 1)
    elif command == "add":
        group = resolve_group(engine, args.group)
        added = registry.add_roots(group.id, [_workspace_rel(engine, raw) for raw in args.paths])
        out.write(f"Added {added} item(s) to group {group.name}.\n")
    elif command == "remove":
        group = resolve_group(engine, args.group)
        if not registry.remove_root(group.id, _workspace_rel(engine, args.path)):
            raise SystemExit(f"Not a root of {group.name}: {args.path}")
    elif command == "bind":
        registry.set_bound_ref(resolve_group(engine, args.group).id, args.ref)
    elif command == "owner":
        group_id = engine.find_owning_group(Path(args.path))
        if group_id is None:
            raise SystemExit(f"No group contains: {args.path}")
        out.write(f"{registry.require(group_id).name}  {group_id}\n")
    elif command == "reveal":
        target = Path(args.path)
        if args.group is not None:
            group_id: str | None = resolve_group(engine, args.group).id
        else:
            group_id = engine.find_owning_group(target)
        if group_id is None:
            raise SystemExit(f"No group contains: {args.path}")
        node = engine.reveal(target, group_id=group_id)
        if node is None:
            raise SystemExit(f"Not found in tree: {args.path}")
        out.write(" > ".join(item.label for item in _ancestry(engine, node)) + "\n")
    elif command == "activate":
        group_id = resolve_group(engine, args.group).id if args.group is not None else None
        engine.set_active_group(group_id)
    elif command == "search-globs":
        scope = engine.search_scope(resolve_group(engine, args.group).id)
        if scope.includes is None:
            raise SystemExit("No valid paths found for this group.")
        out.write(f"include: {scope.includes}\n")
        if scope.excludes is not None:
            out.write(f"exclude: {scope.excludes}\n")
    elif command == "watch":
        watch_loop(engine, out, args.seconds)


def main(argv: list[str] | None = None, default_workspace: Path | None = None) -> None:
    """Parse CLI arguments and run one command against a workspace.

    ``default_workspace`` is primarily for tests; when omitted the current
    working directory is used.
    """
    args = build_parser().parse_args(argv)
    workspace = Path(args.workspace) if args.workspace else (default_workspace or Path.cwd())
    if not workspace.is_dir():
        raise SystemExit(f"Workspace not found: {workspace}")

    settings = load_view_settings()
    if args.mode is not None:
        settings = settings.with_changes(display_mode=args.mode)
    if args.debug:
        settings = settings.with_changes(debug=True)

    engine = Engine(workspace, settings=settings, watch=args.command == "watch")
    try:
        run_command(engine, args, sys.stdout)
    except PathGroupsError as exc:
        raise SystemExit(str(exc)) from exc
    finally:
        engine.close()


if __name__ == "__main__":
    main()

"""Group document persistence.

One JSON document per workspace holds the ordered group list. Loading is
lenient (missing or malformed documents read as no groups); saving is
strict so callers can refuse to commit a mutation that was not written.

Entries that are not valid groups are skipped on load but kept aside and
written back after the groups on the next save, so editing groups never
erases hand-written content from the document.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from .types import Group

logger = logging.getLogger(__name__)

CONFIG_DIR = ".vscode"
CONFIG_FILENAME = "sub-explorer.json"


def default_document_path(workspace: Path) -> Path:
    return workspace / CONFIG_DIR / CONFIG_FILENAME


class GroupStore:
    """Read/write the group document for one workspace."""

    def __init__(self, workspace: Path, path: Path | None = None) -> None:
        self.workspace = workspace
        self.path = path if path is not None else default_document_path(workspace)
        self.unparsed_entries: list[object] = []

    def load(self) -> list[Group]:
        """Return groups from the document, or ``[]`` when missing/unreadable."""
        self.unparsed_entries = []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return []
        if not isinstance(data, dict):
            return []
        raw_groups = data.get("groups")
        if not isinstance(raw_groups, list):
            return []
        groups: list[Group] = []
        for raw in raw_groups:
            group = Group.from_document(raw)
            if group is None:
                logger.debug("keeping unparsed group entry: %r", raw)
                self.unparsed_entries.append(raw)
                continue
            groups.append(group)
        return groups

    def save(self, groups: Sequence[Group]) -> None:
        """Write the document atomically; errors propagate to the caller."""
        entries: list[object] = [group.to_document() for group in groups]
        entries.extend(self.unparsed_entries)
        payload = json.dumps({"groups": entries}, indent=2) + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise


__all__ = ["CONFIG_DIR", "CONFIG_FILENAME", "GroupStore", "default_document_path"]

"""Current-branch lookup for comparing against a group's bound ref.

``GitBranchReader`` asks ``git`` first and falls back to parsing ``.git/HEAD``
through the filesystem collaborator. ``BranchCache`` keeps the answer for a
couple of seconds so group rows can be decorated on every refresh.
"""

from __future__ import annotations

import logging
import re
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..fs.local import FileSystem

logger = logging.getLogger(__name__)

BRANCH_CACHE_TTL_SECONDS = 2.0
_HEAD_REF_RE = re.compile(r"^ref: refs/heads/(.+)$")


class BranchReader(Protocol):
    def current_branch_name(self) -> str | None: ...


def branch_from_head_text(text: str) -> str | None:
    """Extract the branch from ``.git/HEAD`` contents; detached heads yield ``None``."""
    match = _HEAD_REF_RE.match(text.strip())
    return match.group(1) if match else None


class GitBranchReader:
    def __init__(self, workspace: Path, filesystem: FileSystem, timeout_seconds: float = 0.5) -> None:
        self.workspace = workspace
        self._filesystem = filesystem
        self._timeout_seconds = timeout_seconds

    def _branch_from_git(self) -> str | None:
        try:
            proc = subprocess.run(
                ["git", "-C", str(self.workspace), "rev-parse", "--abbrev-ref", "HEAD"],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self._timeout_seconds,
            )
        except Exception:
            return None
        if proc.returncode != 0:
            return None
        name = proc.stdout.strip()
        # ``HEAD`` means detached.
        if not name or name == "HEAD":
            return None
        return name

    def _branch_from_head_file(self) -> str | None:
        try:
            data = self._filesystem.read_file(self.workspace / ".git" / "HEAD")
        except OSError:
            return None
        return branch_from_head_text(data.decode("utf-8", errors="replace"))

    def current_branch_name(self) -> str | None:
        value = self._branch_from_git()
        if value is None:
            value = self._branch_from_head_file()
        logger.debug("current branch: %s", value)
        return value


@dataclass
class BranchCache:
    """TTL wrapper around a ``BranchReader``."""

    reader: BranchReader
    ttl_seconds: float = BRANCH_CACHE_TTL_SECONDS
    monotonic: Callable[[], float] = time.monotonic
    value: str | None = None
    fetched_at: float | None = None

    def get(self) -> str | None:
        now = self.monotonic()
        if self.fetched_at is not None and (now - self.fetched_at) < self.ttl_seconds:
            return self.value
        self.value = self.reader.current_branch_name()
        self.fetched_at = now
        return self.value

    def invalidate(self) -> None:
        self.value = None
        self.fetched_at = None


__all__ = [
    "BRANCH_CACHE_TTL_SECONDS",
    "BranchCache",
    "BranchReader",
    "GitBranchReader",
    "branch_from_head_text",
]

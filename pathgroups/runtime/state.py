"""Per-workspace persisted state (currently the active group id).

State lives outside the workspace, under the user state directory, in one
JSON file per workspace named by a digest of the workspace path.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from platformdirs import user_state_dir

APP_NAME = "pathgroups"
ACTIVE_GROUP_KEY = "active_group_id"
STATE_ROOT = Path(user_state_dir(APP_NAME, appauthor=False)) / "workspaces"


def workspace_state_path(workspace: Path) -> Path:
    digest = hashlib.blake2b(str(workspace).encode("utf-8", errors="surrogateescape"), digest_size=12)
    return STATE_ROOT / f"{digest.hexdigest()}.json"


class WorkspaceStateStore:
    """Small key/value store persisted as JSON.

    Reads fall back to an empty mapping and writes are best effort; losing
    this state only means the active group is forgotten on restart.
    """

    def __init__(self, workspace: Path, path: Path | None = None) -> None:
        self.path = path if path is not None else workspace_state_path(workspace)

    def _load(self) -> dict[str, object]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception:
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> object | None:
        return self._load().get(key)

    def update(self, key: str, value: object | None) -> None:
        data = self._load()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except Exception:
            pass

    def load_active_group_id(self) -> str | None:
        value = self.get(ACTIVE_GROUP_KEY)
        return value if isinstance(value, str) and value else None

    def save_active_group_id(self, group_id: str | None) -> None:
        self.update(ACTIVE_GROUP_KEY, group_id)


__all__ = ["ACTIVE_GROUP_KEY", "WorkspaceStateStore", "workspace_state_path"]

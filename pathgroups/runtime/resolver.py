"""Active-group tracking and owning-group resolution.

A path belongs to every group with a root containing it. When several groups
qualify, the currently active one is kept so the selection does not flap
between groups; otherwise the most specific (longest) root wins.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from ..groups.matching import match_roots
from ..groups.registry import GroupRegistry
from ..paths import absolute
from .config import ViewSettings
from .deferred import DeferredTask
from .state import WorkspaceStateStore

logger = logging.getLogger(__name__)

ACTIVE_SWITCH_REFRESH_SECONDS = 0.25


class ActiveGroupResolver:
    def __init__(
        self,
        registry: GroupRegistry,
        state_store: WorkspaceStateStore,
        *,
        notify: Callable[[], None],
        monotonic: Callable[[], float] = time.monotonic,
        switch_delay_seconds: float = ACTIVE_SWITCH_REFRESH_SECONDS,
    ) -> None:
        self.registry = registry
        self._state_store = state_store
        self._notify = notify
        self._deferred_notify = DeferredTask(notify, switch_delay_seconds, monotonic=monotonic)
        self.active_group_id: str | None = state_store.load_active_group_id()

    def find_owning_group(self, path: Path, prefer_group_id: str | None = None) -> str | None:
        target = absolute(path)
        candidates = match_roots(self.registry.list_groups(), self.registry.workspace, target)
        if not candidates:
            logger.debug("no matching group for %s", target)
            return None
        if prefer_group_id is not None and any(c.group_id == prefer_group_id for c in candidates):
            logger.debug("keeping active group %s for %s", prefer_group_id, target)
            return prefer_group_id
        chosen = max(candidates, key=lambda candidate: candidate.specificity)
        logger.debug(
            "candidates: %s",
            ", ".join(f"{c.group_id}:{c.root_rel}:{c.specificity}" for c in candidates),
        )
        logger.debug("chosen group for %s: %s", target, chosen.group_id)
        return chosen.group_id

    def set_active(self, group_id: str | None, settings: ViewSettings) -> bool:
        """Switch the active group; returns whether anything changed.

        Disabled behavior ignores requests for a concrete group but still
        allows clearing.
        """
        if not settings.active_behavior_enabled and group_id is not None:
            return False
        if self.active_group_id == group_id:
            return False
        self.active_group_id = group_id
        self._state_store.save_active_group_id(group_id)
        if settings.collapse_others_on_activate:
            self._deferred_notify.cancel()
            self._notify()
        else:
            # Delay so an in-progress selection is not cleared immediately.
            self._deferred_notify.schedule()
        return True

    def poll(self) -> bool:
        return self._deferred_notify.poll()

    def cancel(self) -> None:
        self._deferred_notify.cancel()


__all__ = ["ACTIVE_SWITCH_REFRESH_SECONDS", "ActiveGroupResolver"]

"""Single-slot deferred callbacks driven by an explicit clock.

Scheduling replaces any pending deadline, so a burst of triggers collapses to
one call made once the last trigger's delay has elapsed. The owner calls
``poll`` from its loop; nothing runs on another thread.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class DeferredTask:
    def __init__(
        self,
        callback: Callable[[], None],
        delay_seconds: float,
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._callback = callback
        self.delay_seconds = delay_seconds
        self._monotonic = monotonic
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def schedule(self) -> None:
        """Arm (or re-arm) the task ``delay_seconds`` from now."""
        self._deadline = self._monotonic() + self.delay_seconds

    def cancel(self) -> None:
        self._deadline = None

    def seconds_until_due(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._monotonic())

    def poll(self) -> bool:
        """Run the callback if its deadline has passed; returns whether it ran."""
        if self._deadline is None or self._monotonic() < self._deadline:
            return False
        self._deadline = None
        self._callback()
        return True

    def flush(self) -> bool:
        """Run a pending callback immediately."""
        if self._deadline is None:
            return False
        self._deadline = None
        self._callback()
        return True


__all__ = ["DeferredTask"]

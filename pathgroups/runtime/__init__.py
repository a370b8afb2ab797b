"""Runtime orchestration: settings, state, change propagation and the engine.

``Engine`` is imported lazily to keep ``pathgroups.runtime.config`` importable
from the tree package without package-import cycles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import Engine


def __getattr__(name: str):
    if name == "Engine":
        from .engine import Engine as _Engine

        return _Engine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Engine"]

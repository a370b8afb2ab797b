"""Public package surface for pathgroups.

Exports ``main`` for programmatic CLI invocation.
Hosts embedding the engine import ``pathgroups.runtime.Engine``.
"""

from __future__ import annotations

__version__ = "0.3.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main", "__version__"]

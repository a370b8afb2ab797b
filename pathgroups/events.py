"""Minimal synchronous change signal shared by registry and engine."""

from __future__ import annotations

from collections.abc import Callable


class Signal:
    """Ordered list of zero-argument listeners fired synchronously."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []

    def connect(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register ``listener`` and return a callable that disconnects it."""
        self._listeners.append(listener)

        def disconnect() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return disconnect

    def emit(self) -> None:
        for listener in list(self._listeners):
            listener()

    def __len__(self) -> int:
        return len(self._listeners)


__all__ = ["Signal"]

"""Exception types raised by the grouping engine."""

from __future__ import annotations


class PathGroupsError(Exception):
    """Base class for engine errors surfaced to callers."""


class PersistenceError(PathGroupsError):
    """The group document could not be written; the mutation was not applied."""


class UnknownGroupError(PathGroupsError, KeyError):
    """No group with the requested id exists."""

    def __init__(self, group_id: str) -> None:
        super().__init__(group_id)
        self.group_id = group_id

    def __str__(self) -> str:
        return f"unknown group: {self.group_id}"


__all__ = ["PathGroupsError", "PersistenceError", "UnknownGroupError"]

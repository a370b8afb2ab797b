"""Group datatype and its document (de)serialization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from ..paths import normalize_rel

DOCUMENT_KEYS = ("id", "name", "items", "gitRef")


def unique_roots(roots: Iterable[str]) -> tuple[str, ...]:
    """Normalize roots and drop empty entries and duplicates, keeping first order."""
    seen: set[str] = set()
    out: list[str] = []
    for raw in roots:
        rel = normalize_rel(raw)
        if not rel or rel in seen:
            continue
        seen.add(rel)
        out.append(rel)
    return tuple(out)


@dataclass(frozen=True)
class Group:
    """Named, ordered set of workspace-relative roots.

    ``bound_ref`` optionally names the branch this group belongs to; it is
    serialized as ``gitRef`` in the group document. ``extra`` carries keys of
    the document entry this model does not interpret, so saving writes them
    back unchanged.
    """

    id: str
    name: str
    roots: tuple[str, ...] = ()
    bound_ref: str | None = None
    extra: Mapping[str, object] = field(default_factory=dict, compare=False, repr=False)

    def with_roots(self, roots: Iterable[str]) -> Group:
        return replace(self, roots=unique_roots(roots))

    def to_document(self) -> dict[str, object]:
        data: dict[str, object] = {"id": self.id, "name": self.name, "items": list(self.roots)}
        if self.bound_ref:
            data["gitRef"] = self.bound_ref
        for key, value in self.extra.items():
            if key not in DOCUMENT_KEYS:
                data[key] = value
        return data

    @classmethod
    def from_document(cls, raw: object) -> Group | None:
        """Parse one group entry, returning ``None`` for malformed entries.

        Non-string items are dropped; items are normalized to forward slashes.
        """
        if not isinstance(raw, dict):
            return None
        group_id = raw.get("id")
        name = raw.get("name")
        if not isinstance(group_id, str) or not group_id:
            return None
        if not isinstance(name, str):
            name = group_id
        raw_items = raw.get("items")
        items = raw_items if isinstance(raw_items, list) else []
        ref = raw.get("gitRef")
        return cls(
            id=group_id,
            name=name,
            roots=unique_roots(item for item in items if isinstance(item, str)),
            bound_ref=ref if isinstance(ref, str) and ref.strip() else None,
            extra={key: value for key, value in raw.items() if key not in DOCUMENT_KEYS},
        )


__all__ = ["DOCUMENT_KEYS", "Group", "unique_roots"]

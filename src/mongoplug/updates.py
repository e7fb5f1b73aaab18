"""Partial updates: reconcile a candidate object with a touched-key set."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class UpdateDescriptor:
    """``$set`` / ``$unset`` instructions for one partial update."""

    set: dict[str, Any] = field(default_factory=dict)
    unset: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.set and not self.unset

    def to_update_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.set:
            doc["$set"] = dict(self.set)
        if self.unset:
            doc["$unset"] = {key: "" for key in self.unset}
        return doc


def top_level_keys(touched: Iterable[str]) -> list[str]:
    """Collapse dotted paths to their first segment, keeping first-seen order."""
    seen: dict[str, None] = {}
    for key in touched:
        seen.setdefault(key.split(".")[0], None)
    return list(seen)


def build_update_descriptor(
    candidate: Mapping[str, Any], touched: Iterable[str]
) -> UpdateDescriptor:
    """Build the descriptor for ``candidate`` restricted to ``touched`` keys.

    A touched key present with a non-None value is set; one that is absent or
    None is unset. Keys outside ``touched`` and the identifier field are never
    modified.
    """
    descriptor = UpdateDescriptor()
    for key in top_level_keys(touched):
        if key == "_id":
            continue
        value = candidate.get(key)
        if value is not None:
            descriptor.set[key] = value
        else:
            descriptor.unset[key] = ""
    return descriptor

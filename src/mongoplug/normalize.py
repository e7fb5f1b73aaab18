"""Result normalization: raw stored documents -> Record."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mongoplug.errors import MalformedDocumentError
from mongoplug.ids import id_to_str

ID_FIELD = "_id"


@dataclass(frozen=True)
class Record:
    """A stored document split into its identifier and payload."""

    id: str
    object: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "object": self.object}


def normalize(raw: Any) -> Record:
    """Map a raw document to a Record. The raw document is left untouched."""
    if not isinstance(raw, Mapping) or ID_FIELD not in raw:
        raise MalformedDocumentError(raw)
    payload = {k: v for k, v in raw.items() if k != ID_FIELD}
    return Record(id=id_to_str(raw[ID_FIELD]), object=payload)


def normalize_many(raws: Iterable[Any]) -> list[Record]:
    return [normalize(raw) for raw in raws]

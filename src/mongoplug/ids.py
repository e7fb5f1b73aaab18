"""Record identifier encoding: native ObjectId <-> canonical string."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from mongoplug.errors import InvalidIdentifierError


def to_object_id(value: Any) -> ObjectId:
    """Convert a canonical id string to an ObjectId.

    ObjectId values pass through. Invalid input raises InvalidIdentifierError
    rather than minting a fresh identifier.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(value)
    try:
        return ObjectId(value)
    except InvalidId as e:
        raise InvalidIdentifierError(value) from e


def id_to_str(value: Any) -> str:
    """Render a stored identifier in its canonical string form."""
    return str(value)

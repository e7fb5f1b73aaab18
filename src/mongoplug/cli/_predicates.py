"""CLI predicate parser: Extended JSON text -> predicate sequence."""

from __future__ import annotations

from typing import Any

from bson import json_util

from mongoplug.errors import MalformedPredicateError
from mongoplug.predicates import Predicate, parse_predicates


def parse_cli_predicates(text: str | None) -> list[Predicate]:
    """Parse a JSON array of wire predicates.

    MongoDB Extended JSON is accepted, so ``{"$regex": ..., "$options": ...}``
    yields a regex marker and ``{"$oid": ...}`` an ObjectId.
    """
    if not text:
        return []
    try:
        data: Any = json_util.loads(text)
    except ValueError as e:
        raise MalformedPredicateError(None, f"Invalid JSON: {e}") from e
    if isinstance(data, dict):
        data = [data]
    return parse_predicates(data)

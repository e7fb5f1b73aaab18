"""Predicate types consumed by the query compiler.

A predicate sequence is the wire format produced by the external query
builder: an ordered list of mappings tagged by ``type``. Each tag maps to one
frozen dataclass below, so the set of kinds is closed and every compilation
rule can dispatch on the class.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from bson.regex import Regex

from mongoplug.errors import MalformedPredicateError

RegexMarker = (re.Pattern, Regex)


def is_regex(value: Any) -> bool:
    """Return True if value is a regex marker (compiled pattern or BSON regex)."""
    return isinstance(value, RegexMarker)


@dataclass(frozen=True)
class FilterPredicate:
    """Equality per field; regex-valued fields become pattern constraints."""

    filter: Mapping[str, Any]
    kind = "filter"


@dataclass(frozen=True)
class ElemPredicate:
    """Array field must contain an element equal to or matching ``match``."""

    arr_key: str
    match: Any
    kind = "elem"


@dataclass(frozen=True)
class NePredicate:
    key: str
    value: Any
    kind = "ne"


@dataclass(frozen=True)
class NinPredicate:
    key: str
    values: tuple[Any, ...]
    kind = "nin"


@dataclass(frozen=True)
class InPredicate:
    key: str
    values: tuple[Any, ...]
    kind = "in"


@dataclass(frozen=True)
class WhereOrPredicate:
    matches: tuple[Mapping[str, Any], ...]
    kind = "whereOr"


@dataclass(frozen=True)
class WhereAndPredicate:
    matches: tuple[Mapping[str, Any], ...]
    kind = "whereAnd"


@dataclass(frozen=True)
class LimitPredicate:
    amount: int
    kind = "limit"


@dataclass(frozen=True)
class SkipPredicate:
    amount: int
    kind = "skip"


@dataclass(frozen=True)
class SortPredicate:
    key: str
    desc: bool = False
    kind = "sort"


@dataclass(frozen=True)
class GtPredicate:
    key: str
    bound: Any
    kind = "gt"


@dataclass(frozen=True)
class GtePredicate:
    key: str
    bound: Any
    kind = "gte"


@dataclass(frozen=True)
class LtPredicate:
    key: str
    bound: Any
    kind = "lt"


@dataclass(frozen=True)
class LtePredicate:
    key: str
    bound: Any
    kind = "lte"


Predicate = Union[
    FilterPredicate,
    ElemPredicate,
    NePredicate,
    NinPredicate,
    InPredicate,
    WhereOrPredicate,
    WhereAndPredicate,
    LimitPredicate,
    SkipPredicate,
    SortPredicate,
    GtPredicate,
    GtePredicate,
    LtPredicate,
    LtePredicate,
]

PREDICATE_TYPES: tuple[type, ...] = Predicate.__args__  # type: ignore[attr-defined]

RANGE_OPERATORS: dict[type, str] = {
    GtPredicate: "$gt",
    GtePredicate: "$gte",
    LtPredicate: "$lt",
    LtePredicate: "$lte",
}


# --- Wire-format parsing ---


def _require(raw: Mapping[str, Any], name: str, index: int | None) -> Any:
    if name not in raw:
        raise MalformedPredicateError(index, f"'{raw.get('type')}' predicate requires '{name}'")
    return raw[name]


def _require_key(raw: Mapping[str, Any], name: str, index: int | None) -> str:
    value = _require(raw, name, index)
    if not isinstance(value, str) or not value:
        raise MalformedPredicateError(index, f"'{name}' must be a non-empty string, got {value!r}")
    return value


def _require_amount(raw: Mapping[str, Any], name: str, index: int | None) -> int:
    value = _require(raw, name, index)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedPredicateError(
            index, f"'{name}' must be a non-negative integer, got {value!r}"
        )
    return value


def _require_values(raw: Mapping[str, Any], name: str, index: int | None) -> tuple[Any, ...]:
    value = _require(raw, name, index)
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Sequence):
        raise MalformedPredicateError(index, f"'{name}' must be a list, got {value!r}")
    return tuple(value)


def _require_matches(
    raw: Mapping[str, Any], name: str, index: int | None
) -> tuple[Mapping[str, Any], ...]:
    values = _require_values(raw, name, index)
    for match in values:
        if not isinstance(match, Mapping):
            raise MalformedPredicateError(index, f"'{name}' entries must be mappings, got {match!r}")
    return values


def _require_mapping(raw: Mapping[str, Any], name: str, index: int | None) -> Mapping[str, Any]:
    value = _require(raw, name, index)
    if not isinstance(value, Mapping):
        raise MalformedPredicateError(index, f"'{name}' must be a mapping, got {value!r}")
    return value


def _parse_wire(raw: Mapping[str, Any], index: int | None) -> Predicate:
    kind = raw.get("type")
    if kind == "filter":
        return FilterPredicate(dict(_require_mapping(raw, "filter", index)))
    if kind == "elem":
        return ElemPredicate(_require_key(raw, "arrKey", index), _require(raw, "filter", index))
    if kind == "ne":
        return NePredicate(_require_key(raw, "key", index), _require(raw, "val", index))
    if kind == "nin":
        return NinPredicate(_require_key(raw, "key", index), _require_values(raw, "vals", index))
    if kind == "in":
        return InPredicate(_require_key(raw, "key", index), _require_values(raw, "vals", index))
    if kind == "whereOr":
        return WhereOrPredicate(_require_matches(raw, "matches", index))
    if kind == "whereAnd":
        return WhereAndPredicate(_require_matches(raw, "matches", index))
    if kind == "limit":
        return LimitPredicate(_require_amount(raw, "limitAmount", index))
    if kind == "skip":
        return SkipPredicate(_require_amount(raw, "skipAmount", index))
    if kind == "sort":
        return SortPredicate(_require_key(raw, "sortKey", index), bool(raw.get("desc", False)))
    if kind == "gt":
        return GtPredicate(_require_key(raw, "key", index), _require(raw, "min", index))
    if kind == "gte":
        return GtePredicate(_require_key(raw, "key", index), _require(raw, "min", index))
    if kind == "lt":
        return LtPredicate(_require_key(raw, "key", index), _require(raw, "max", index))
    if kind == "lte":
        return LtePredicate(_require_key(raw, "key", index), _require(raw, "max", index))
    raise MalformedPredicateError(index, f"Unknown predicate type {kind!r}")


def parse_predicate(obj: Any, index: int | None = None) -> Predicate:
    """Parse one predicate from its wire mapping, or pass a predicate dataclass through."""
    if isinstance(obj, PREDICATE_TYPES):
        return obj
    if isinstance(obj, Mapping):
        return _parse_wire(obj, index)
    raise MalformedPredicateError(index, f"Expected a mapping or predicate, got {type(obj).__name__}")


def parse_predicates(predicates: Any) -> list[Predicate]:
    """Parse a whole predicate sequence.

    Accepts a plain sequence or a query object exposing its sequence as ``pts``.
    """
    if predicates is None:
        return []
    pts = getattr(predicates, "pts", predicates)
    if isinstance(pts, (str, bytes, Mapping)) or not isinstance(pts, Sequence):
        raise MalformedPredicateError(
            None, f"Expected a predicate sequence, got {type(pts).__name__}"
        )
    return [parse_predicate(pt, i) for i, pt in enumerate(pts)]

"""Predicate compiler: folds a predicate sequence into one MongoDB query."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from mongoplug.errors import MalformedPredicateError
from mongoplug.predicates import (
    RANGE_OPERATORS,
    ElemPredicate,
    FilterPredicate,
    InPredicate,
    LimitPredicate,
    NePredicate,
    NinPredicate,
    Predicate,
    SkipPredicate,
    SortPredicate,
    WhereAndPredicate,
    WhereOrPredicate,
    is_regex,
    parse_predicates,
)

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

# Pending same-key negations: (key, values in encounter order)
NeBuffer = Optional[tuple[str, tuple[Any, ...]]]


def _is_operator_doc(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and len(value) > 0
        and all(isinstance(k, str) and k.startswith("$") for k in value)
    )


@dataclass
class QuerySpec:
    """A compiled query: filter document plus cursor options."""

    filter: dict[str, Any] = field(default_factory=dict)
    sort: dict[str, int] | None = None
    skip: int | None = None
    limit: int | None = None

    # --- constraint merging ---

    def _push_and(self, *clauses: dict[str, Any]) -> None:
        # $and may still be a caller-owned list; never append in place
        self.filter["$and"] = [*self.filter.get("$and", ()), *clauses]

    def where_equals(self, fields: Mapping[str, Any]) -> None:
        """Merge plain equality constraints."""
        for key, value in fields.items():
            if key in self.filter:
                self._push_and({key: value})
            else:
                self.filter[key] = value

    def where_op(self, key: str, op: str, value: Any) -> None:
        """Merge a single-operator constraint on one field."""
        current = self.filter.get(key)
        if key not in self.filter:
            self.filter[key] = {op: value}
        elif _is_operator_doc(current) and op not in current:
            self.filter[key] = {**current, op: value}
        else:
            self._push_and({key: {op: value}})

    def where_logical(self, op: str, matches: list[dict[str, Any]]) -> None:
        """Merge an ``$or`` / ``$and`` combinator."""
        if op == "$and":
            self._push_and(*matches)
        elif "$or" in self.filter:
            self._push_and({"$or": matches})
        else:
            self.filter["$or"] = matches

    # --- rendering ---

    def sort_pairs(self) -> list[tuple[str, int]] | None:
        return list(self.sort.items()) if self.sort else None

    def find_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.sort:
            kwargs["sort"] = self.sort_pairs()
        if self.skip:
            kwargs["skip"] = self.skip
        if self.limit:
            kwargs["limit"] = self.limit
        return kwargs

    def to_pipeline(self) -> list[dict[str, Any]]:
        """Render as an aggregation pipeline prefix."""
        pipeline: list[dict[str, Any]] = [{"$match": self.filter}]
        if self.sort:
            pipeline.append({"$sort": dict(self.sort)})
        if self.skip:
            pipeline.append({"$skip": self.skip})
        if self.limit:
            pipeline.append({"$limit": self.limit})
        return pipeline

    def to_dict(self) -> dict[str, Any]:
        return {"filter": self.filter, "sort": self.sort, "skip": self.skip, "limit": self.limit}


# --- compilation rules ---


def _compile_filter(pt: FilterPredicate, spec: QuerySpec) -> None:
    plain: dict[str, Any] = {}
    for key, value in pt.filter.items():
        if is_regex(value):
            spec.where_op(key, "$regex", value)
        else:
            plain[key] = value
    spec.where_equals(plain)


def _compile_elem(pt: ElemPredicate, spec: QuerySpec) -> None:
    if isinstance(pt.match, Mapping):
        spec.where_op(pt.arr_key, "$elemMatch", dict(pt.match))
    else:
        spec.where_op(pt.arr_key, "$elemMatch", {"$eq": pt.match})


def _step(
    pending: NeBuffer,
    pt: Predicate,
    lookahead: Predicate | None,
    spec: QuerySpec,
) -> NeBuffer:
    """Apply one predicate to spec and return the new pending-negation buffer."""
    if isinstance(pt, NePredicate):
        if isinstance(lookahead, NePredicate) and lookahead.key == pt.key:
            values = pending[1] if pending is not None else ()
            return (pt.key, values + (pt.value,))
        if pending is not None:
            spec.where_op(pt.key, "$nin", [*pending[1], pt.value])
        else:
            spec.where_op(pt.key, "$ne", pt.value)
        return None

    if isinstance(pt, FilterPredicate):
        _compile_filter(pt, spec)
    elif isinstance(pt, ElemPredicate):
        _compile_elem(pt, spec)
    elif isinstance(pt, NinPredicate):
        spec.where_op(pt.key, "$nin", list(pt.values))
    elif isinstance(pt, InPredicate):
        spec.where_op(pt.key, "$in", list(pt.values))
    elif isinstance(pt, WhereOrPredicate):
        spec.where_logical("$or", [dict(m) for m in pt.matches])
    elif isinstance(pt, WhereAndPredicate):
        spec.where_logical("$and", [dict(m) for m in pt.matches])
    elif isinstance(pt, LimitPredicate):
        spec.limit = pt.amount
    elif isinstance(pt, SkipPredicate):
        spec.skip = pt.amount
    elif isinstance(pt, SortPredicate):
        spec.sort = {pt.key: -1 if pt.desc else 1}
    elif type(pt) in RANGE_OPERATORS:
        spec.where_op(pt.key, RANGE_OPERATORS[type(pt)], pt.bound)  # type: ignore[union-attr]
    else:
        raise MalformedPredicateError(None, f"No compilation rule for {type(pt).__name__}")
    return pending


def compile_predicates(predicates: Any) -> QuerySpec:
    """Compile an ordered predicate sequence into a QuerySpec.

    Pure: the input is never mutated and equal inputs give equal specs.
    """
    pts = parse_predicates(predicates)
    spec = QuerySpec()
    pending: NeBuffer = None
    for i, pt in enumerate(pts):
        lookahead = pts[i + 1] if i + 1 < len(pts) else None
        pending = _step(pending, pt, lookahead, spec)
    return spec


class Cursor:
    """Lazy handle over a compiled query; no I/O until a terminal call."""

    def __init__(self, collection: AsyncIOMotorCollection, spec: QuerySpec) -> None:
        self.collection = collection
        self.spec = spec

    async def to_list(self) -> list[dict[str, Any]]:
        return await self.collection.find(self.spec.filter, **self.spec.find_kwargs()).to_list(None)

    async def first(self) -> dict[str, Any] | None:
        kwargs = self.spec.find_kwargs()
        kwargs.pop("limit", None)
        return await self.collection.find_one(self.spec.filter, **kwargs)

    async def count(self) -> int:
        kwargs: dict[str, Any] = {}
        if self.spec.skip:
            kwargs["skip"] = self.spec.skip
        if self.spec.limit:
            kwargs["limit"] = self.spec.limit
        return await self.collection.count_documents(self.spec.filter, **kwargs)

    async def sum(self, key: str) -> Any:
        pipeline = self.spec.to_pipeline()
        pipeline.append({"$group": {"_id": None, "sum": {"$sum": f"${key}"}}})
        rows = await self.collection.aggregate(pipeline).to_list(None)
        return rows[0]["sum"] if rows else 0

    async def delete_many(self) -> int:
        result = await self.collection.delete_many(self.spec.filter)
        return result.deleted_count

    def pipeline(self) -> list[dict[str, Any]]:
        return self.spec.to_pipeline()


def compile(collection: AsyncIOMotorCollection, predicates: Any) -> Cursor:
    """Compile predicates against a collection handle into a lazy Cursor."""
    return Cursor(collection, compile_predicates(predicates))

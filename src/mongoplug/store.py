"""MongoStore: CRUD operations over compiled predicate sequences."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from mongoplug.accessor import CollectionAccessor, IndexSpec
from mongoplug.compiler import Cursor, compile_predicates
from mongoplug.config import MongoPlugConfig
from mongoplug.connection import ClientFactory, ConnectionGuard
from mongoplug.ids import id_to_str, to_object_id
from mongoplug.normalize import ID_FIELD, Record, normalize, normalize_many
from mongoplug.updates import build_update_descriptor


class MongoStore:
    """Document store adapter.

    Every operation validates its input (identifiers, predicates), then awaits
    the shared connection guard, resolves the collection, executes and
    normalizes. Driver errors propagate unchanged and nothing is retried.

    Usage:
        async with MongoStore(MongoPlugConfig(url=..., db="app")) as store:
            uid = await store.insert("users", {"email": "a@x.com"})
            await store.find("users", [{"type": "filter", "filter": {"email": "a@x.com"}}])
    """

    def __init__(
        self,
        config: MongoPlugConfig | None = None,
        *,
        guard: ConnectionGuard | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.guard = guard or ConnectionGuard(config, client_factory=client_factory)
        self.config = self.guard.config
        self.accessor = CollectionAccessor(self.guard)

    async def __aenter__(self) -> MongoStore:
        await self.build()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()

    async def build(self) -> None:
        """Wait for the one-time connection bring-up."""
        await self.guard.ready()

    def close(self) -> None:
        self.guard.close()

    async def _collection(self, collection_id: str) -> AsyncIOMotorCollection:
        await self.guard.ready()
        return self.accessor.collection(collection_id)

    async def _cursor(self, collection_id: str, predicates: Any) -> Cursor:
        # compile first: malformed predicates are reported whatever the connection state
        spec = compile_predicates(predicates)
        return Cursor(await self._collection(collection_id), spec)

    # --- collection management ---

    def init_collection(self, collection_id: str) -> None:
        self.accessor.init_collection(collection_id)

    async def create_index(self, collection_id: str, name: str, spec: IndexSpec) -> None:
        """Best-effort index creation; failures are discarded."""
        await self.accessor.ensure_index(collection_id, name, spec)

    # --- raw escape hatches (no normalization) ---

    async def get_raw_db(self) -> AsyncIOMotorDatabase:
        return await self.guard.ready()

    async def get_raw_table(self, collection_id: str) -> AsyncIOMotorCollection:
        return await self._collection(collection_id)

    async def get_raw_cursor(self, collection_id: str, predicates: Any = ()) -> Cursor:
        return await self._cursor(collection_id, predicates)

    def raw(self, collection_id: str, predicates: Any) -> list[dict[str, Any]]:
        """Return the compiled aggregation pipeline for predicates. No I/O."""
        return compile_predicates(predicates).to_pipeline()

    async def exec(self, collection_id: str, action: str, *args: Any, **kwargs: Any) -> list[Any]:
        """Call a cursor-returning collection method by name and list its documents."""
        collection = await self._collection(collection_id)
        return await getattr(collection, action)(*args, **kwargs).to_list(None)

    # --- reads ---

    async def find_by_id(self, collection_id: str, record_id: Any) -> Record | None:
        oid = to_object_id(record_id)
        collection = await self._collection(collection_id)
        raw = await collection.find_one({ID_FIELD: oid})
        return normalize(raw) if raw is not None else None

    async def find_by_ids(self, collection_id: str, record_ids: Iterable[Any]) -> list[Record]:
        """Fetch several records in one query. Result order is not guaranteed."""
        oids = [to_object_id(rid) for rid in record_ids]
        collection = await self._collection(collection_id)
        raws = await collection.find({ID_FIELD: {"$in": oids}}).to_list(None)
        return normalize_many(raws)

    async def find(self, collection_id: str, predicates: Any) -> list[Record]:
        cursor = await self._cursor(collection_id, predicates)
        return normalize_many(await cursor.to_list())

    async def find_one(self, collection_id: str, predicates: Any) -> Record | None:
        cursor = await self._cursor(collection_id, predicates)
        raw = await cursor.first()
        return normalize(raw) if raw is not None else None

    async def count(self, collection_id: str, predicates: Any) -> int:
        cursor = await self._cursor(collection_id, predicates)
        return await cursor.count()

    async def sum(self, collection_id: str, predicates: Any, key: str) -> Any:
        """Sum ``key`` across matching documents; 0 when nothing matches."""
        cursor = await self._cursor(collection_id, predicates)
        return await cursor.sum(key)

    # --- writes ---

    async def insert(self, collection_id: str, document: Mapping[str, Any]) -> str:
        """Insert a document and return its identifier.

        A supplied ``_id`` is reused (converted to ObjectId); otherwise the
        driver generates one. The caller's mapping is not modified.
        """
        body = dict(document)
        if body.get(ID_FIELD) is not None:
            body[ID_FIELD] = to_object_id(body[ID_FIELD])
        else:
            body.pop(ID_FIELD, None)
        collection = await self._collection(collection_id)
        result = await collection.insert_one(body)
        return id_to_str(result.inserted_id)

    async def remove_by_id(self, collection_id: str, record_id: Any) -> None:
        oid = to_object_id(record_id)
        collection = await self._collection(collection_id)
        await collection.find_one_and_delete({ID_FIELD: oid})

    async def remove(self, collection_id: str, predicates: Any) -> None:
        """Delete every document matching predicates. Not atomic across matches."""
        cursor = await self._cursor(collection_id, predicates)
        await cursor.delete_many()

    async def replace_by_id(
        self, collection_id: str, record_id: Any, new_object: Mapping[str, Any]
    ) -> None:
        """Overwrite the document body; the identifier is preserved."""
        oid = to_object_id(record_id)
        body = {k: v for k, v in new_object.items() if k != ID_FIELD}
        collection = await self._collection(collection_id)
        await collection.replace_one({ID_FIELD: oid}, body)

    async def update_by_id(
        self,
        collection_id: str,
        record_id: Any,
        new_object: Mapping[str, Any],
        touched: Iterable[str],
    ) -> None:
        """Apply the touched top-level keys of ``new_object``.

        Touched keys holding a non-None value are set, the rest are unset.
        Nothing is written when no key is touched.
        """
        oid = to_object_id(record_id)
        descriptor = build_update_descriptor(new_object, touched)
        collection = await self._collection(collection_id)
        if descriptor.is_empty:
            return
        await collection.update_one({ID_FIELD: oid}, descriptor.to_update_document())

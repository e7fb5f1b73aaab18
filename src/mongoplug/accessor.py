"""Collection resolution and best-effort index creation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Union

from motor.motor_asyncio import AsyncIOMotorCollection

from mongoplug.connection import ConnectionGuard

logger = logging.getLogger(__name__)

IndexSpec = Union[Mapping[str, Any], Sequence[tuple[str, Any]]]


class CollectionAccessor:
    """Resolves collection ids to live handles once the guard has completed."""

    def __init__(self, guard: ConnectionGuard) -> None:
        self._guard = guard

    def collection(self, collection_id: str) -> AsyncIOMotorCollection:
        """Return the handle for ``collection_id``.

        Synchronous; requires a completed guard. No caching beyond the driver's.
        """
        return self._guard.database[collection_id]

    def init_collection(self, collection_id: str) -> None:
        """Prepare storage for a new collection. MongoDB creates collections lazily."""

    async def ensure_index(self, collection_id: str, name: str, spec: IndexSpec) -> None:
        """Create an index, discarding any index-creation failure.

        Includes "already exists with different options". A failed connection
        bring-up still raises ConnectionFailureError.
        """
        await self._guard.ready()
        try:
            keys = list(spec.items()) if isinstance(spec, Mapping) else list(spec)
            await self.collection(collection_id).create_index(keys, name=name)
        except Exception as e:
            logger.debug("Discarded index creation failure for %s.%s: %s", collection_id, name, e)

"""One-time connection bring-up shared by every storage operation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from mongoplug.config import MongoPlugConfig
from mongoplug.errors import ConnectionFailureError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[MongoPlugConfig], Any]


def default_client_factory(config: MongoPlugConfig) -> AsyncIOMotorClient:
    kwargs: dict[str, Any] = {"serverSelectionTimeoutMS": config.server_selection_timeout_ms}
    if config.app_name:
        kwargs["appname"] = config.app_name
    return AsyncIOMotorClient(config.url, **kwargs)


class ConnectionGuard:
    """Memoized, single-flight connection bring-up.

    The first call to ``start()`` or ``ready()`` schedules exactly one
    connection attempt. Every waiter, current or future, awaits that same
    attempt and sees the same client or the same ConnectionFailureError.
    There is no retry.
    """

    def __init__(
        self,
        config: MongoPlugConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = config or MongoPlugConfig()
        self._client_factory = client_factory or default_client_factory
        self._future: asyncio.Future[AsyncIOMotorDatabase] | None = None
        self._client: Any = None
        self._db: AsyncIOMotorDatabase | None = None
        self.attempts = 0

    @property
    def started(self) -> bool:
        return self._future is not None

    @property
    def client(self) -> Any:
        if self._client is None or self._db is None:
            raise ConnectionFailureError(self.config.url, "connection is not established")
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise ConnectionFailureError(self.config.url, "connection is not established")
        return self._db

    def start(self) -> asyncio.Future[AsyncIOMotorDatabase]:
        """Schedule the bring-up on the running loop if not already scheduled."""
        if self._future is None:
            self._future = asyncio.ensure_future(self._build())
        return self._future

    async def ready(self) -> AsyncIOMotorDatabase:
        """Wait for the shared bring-up and return the database handle."""
        # shield: a cancelled waiter must not cancel the attempt for everyone else
        return await asyncio.shield(self.start())

    async def _build(self) -> AsyncIOMotorDatabase:
        self.attempts += 1
        logger.debug("Connecting to %s (db=%s)", self.config.url, self.config.db)
        client = None
        try:
            client = self._client_factory(self.config)
            db = client[self.config.db]
            if self.config.verify_connection:
                await db.command("ping")
        except Exception as e:
            if client is not None:
                client.close()
            logger.warning("Connection to %s failed: %s", self.config.url, e)
            raise ConnectionFailureError(self.config.url, str(e)) from e
        self._client = client
        self._db = db
        logger.debug("Connected to %s", self.config.url)
        return db

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.debug("Closed connection to %s", self.config.url)

"""Shared test fixtures for mongoplug tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from mongoplug import MongoPlugConfig, MongoStore


@pytest.fixture
def config():
    """Config for the in-memory database; mongomock has no ping round-trip."""
    return MongoPlugConfig(url="mongodb://mock", db="mongoplug_test", verify_connection=False)


@pytest_asyncio.fixture
async def mongo_client():
    """In-memory Motor-compatible client."""
    return AsyncMongoMockClient()


@pytest_asyncio.fixture
async def store(config, mongo_client):
    """A connected MongoStore backed by the in-memory client."""
    s = MongoStore(config, client_factory=lambda _config: mongo_client)
    await s.build()
    yield s
    s.close()


@pytest_asyncio.fixture
async def raw_db(store):
    """Raw database handle for seeding and inspecting stored documents."""
    return await store.get_raw_db()


class FakeClient:
    """Stand-in driver client recording how it was used."""

    def __init__(self, ping: Any = None) -> None:
        self.db = MagicMock(name="database")
        self.db.command = AsyncMock(side_effect=ping, return_value={"ok": 1.0})
        self.closed = False
        self.requested: list[str] = []

    def __getitem__(self, name: str) -> MagicMock:
        self.requested.append(name)
        return self.db

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeClient()

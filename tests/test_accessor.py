"""Tests for collection resolution and best-effort index creation."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from mongoplug import MongoPlugConfig
from mongoplug.accessor import CollectionAccessor
from mongoplug.connection import ConnectionGuard
from mongoplug.errors import ConnectionFailureError
from tests.conftest import FakeClient


@pytest.fixture
def accessor(fake_client):
    guard = ConnectionGuard(MongoPlugConfig(db="app"), client_factory=lambda config: fake_client)
    return CollectionAccessor(guard)


class TestEnsureIndex:
    @pytest.mark.asyncio
    async def test_creates_named_index(self, accessor, fake_client):
        collection = fake_client.db.__getitem__.return_value
        collection.create_index = AsyncMock()
        await accessor.ensure_index("users", "email_idx", {"email": 1, "age": -1})
        collection.create_index.assert_awaited_once_with(
            [("email", 1), ("age", -1)], name="email_idx"
        )
        fake_client.db.__getitem__.assert_called_with("users")

    @pytest.mark.asyncio
    async def test_accepts_key_pairs(self, accessor, fake_client):
        collection = fake_client.db.__getitem__.return_value
        collection.create_index = AsyncMock()
        await accessor.ensure_index("users", "tags_idx", [("tags", 1)])
        collection.create_index.assert_awaited_once_with([("tags", 1)], name="tags_idx")

    @pytest.mark.asyncio
    async def test_conflicting_index_failure_is_discarded(self, accessor, fake_client):
        collection = fake_client.db.__getitem__.return_value
        collection.create_index = AsyncMock(
            side_effect=OperationFailure("Index already exists with different options")
        )
        assert await accessor.ensure_index("users", "email_idx", {"email": 1}) is None

    @pytest.mark.asyncio
    async def test_connection_failure_propagates(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("down"))
        guard = ConnectionGuard(MongoPlugConfig(), client_factory=lambda config: client)
        accessor = CollectionAccessor(guard)
        with pytest.raises(ConnectionFailureError, match="down"):
            await accessor.ensure_index("users", "email_idx", {"email": 1})

    @pytest.mark.asyncio
    async def test_bad_spec_is_discarded(self, accessor):
        await accessor.ensure_index("users", "bad", 42)


class TestCollection:
    @pytest.mark.asyncio
    async def test_resolves_after_ready(self, accessor, fake_client):
        await accessor._guard.ready()
        assert accessor.collection("users") is fake_client.db.__getitem__.return_value

    def test_init_collection_is_noop(self, accessor):
        assert accessor.init_collection("users") is None

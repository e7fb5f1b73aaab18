"""Tests for the one-time connection guard."""

from __future__ import annotations

import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from mongoplug import MongoPlugConfig, MongoStore
from mongoplug.connection import ConnectionGuard
from mongoplug.errors import ConnectionFailureError, MalformedPredicateError
from tests.conftest import FakeClient


def _guard(client, **config_kwargs):
    calls = []

    def factory(config):
        calls.append(config)
        return client

    guard = ConnectionGuard(MongoPlugConfig(db="app", **config_kwargs), client_factory=factory)
    return guard, calls


class TestBringUp:
    @pytest.mark.asyncio
    async def test_ready_returns_database(self, fake_client):
        guard, calls = _guard(fake_client)
        db = await guard.ready()
        assert db is fake_client.db
        assert guard.database is fake_client.db
        assert guard.client is fake_client
        assert fake_client.requested == ["app"]
        fake_client.db.command.assert_awaited_once_with("ping")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_ping_skipped_when_not_verifying(self, fake_client):
        guard, _ = _guard(fake_client, verify_connection=False)
        await guard.ready()
        fake_client.db.command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ready_is_memoized(self, fake_client):
        guard, calls = _guard(fake_client)
        first = await guard.ready()
        second = await guard.ready()
        assert first is second
        assert len(calls) == 1
        assert guard.attempts == 1

    @pytest.mark.asyncio
    async def test_concurrent_waiters_share_one_attempt(self):
        async def slow_ping(*args):
            await asyncio.sleep(0.01)
            return {"ok": 1.0}

        client = FakeClient(ping=slow_ping)
        guard, calls = _guard(client)
        results = await asyncio.gather(*(guard.ready() for _ in range(5)))
        assert all(db is client.db for db in results)
        assert len(calls) == 1
        assert client.db.command.await_count == 1

    @pytest.mark.asyncio
    async def test_start_returns_shared_future(self, fake_client):
        guard, _ = _guard(fake_client)
        assert not guard.started
        future = guard.start()
        assert guard.start() is future
        assert guard.started
        await future

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_attempt(self):
        async def slow_ping(*args):
            await asyncio.sleep(0.02)
            return {"ok": 1.0}

        client = FakeClient(ping=slow_ping)
        guard, _ = _guard(client)
        waiter = asyncio.ensure_future(guard.ready())
        await asyncio.sleep(0)
        waiter.cancel()
        assert await guard.ready() is client.db


class TestFailure:
    @pytest.mark.asyncio
    async def test_ping_failure(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("no servers"))
        guard, _ = _guard(client)
        with pytest.raises(ConnectionFailureError, match="no servers") as exc_info:
            await guard.ready()
        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)
        assert exc_info.value.url == guard.config.url

    @pytest.mark.asyncio
    async def test_failed_ping_closes_client(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("no servers"))
        guard, _ = _guard(client)
        with pytest.raises(ConnectionFailureError):
            await guard.ready()
        assert client.closed
        guard.close()

    @pytest.mark.asyncio
    async def test_factory_failure(self):
        def factory(config):
            raise ValueError("bad url")

        guard = ConnectionGuard(MongoPlugConfig(), client_factory=factory)
        with pytest.raises(ConnectionFailureError, match="bad url"):
            await guard.ready()

    @pytest.mark.asyncio
    async def test_every_waiter_sees_same_failure_without_retry(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("down"))
        guard, calls = _guard(client)
        results = await asyncio.gather(guard.ready(), guard.ready(), return_exceptions=True)
        with pytest.raises(ConnectionFailureError) as later:
            await guard.ready()
        assert results[0] is results[1] is later.value
        assert len(calls) == 1
        assert guard.attempts == 1

    @pytest.mark.asyncio
    async def test_operations_fail_after_failed_bring_up(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("down"))
        store = MongoStore(MongoPlugConfig(), client_factory=lambda config: client)
        with pytest.raises(ConnectionFailureError):
            await store.find("users", [])
        with pytest.raises(ConnectionFailureError):
            await store.insert("users", {"a": 1})
        assert store.guard.attempts == 1

    @pytest.mark.asyncio
    async def test_malformed_predicates_reported_before_connecting(self):
        client = FakeClient(ping=ServerSelectionTimeoutError("down"))
        store = MongoStore(MongoPlugConfig(), client_factory=lambda config: client)
        bad = [{"type": "limit", "limitAmount": -1}]
        for op in (store.find, store.find_one, store.count, store.remove):
            with pytest.raises(MalformedPredicateError):
                await op("users", bad)
        with pytest.raises(MalformedPredicateError):
            await store.sum("users", bad, "age")
        assert not store.guard.started

    def test_handles_unavailable_before_ready(self):
        guard = ConnectionGuard(MongoPlugConfig())
        with pytest.raises(ConnectionFailureError, match="not established"):
            guard.database
        with pytest.raises(ConnectionFailureError):
            guard.client


class TestClose:
    @pytest.mark.asyncio
    async def test_close_closes_client(self, fake_client):
        guard, _ = _guard(fake_client)
        await guard.ready()
        guard.close()
        assert fake_client.closed

    def test_close_before_connect_is_noop(self):
        ConnectionGuard(MongoPlugConfig()).close()

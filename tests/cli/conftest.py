"""Shared fixtures for CLI tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from mongomock_motor import AsyncMongoMockClient
from typer.testing import CliRunner

from mongoplug import MongoPlugConfig, MongoStore
from mongoplug.cli import _storage, app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_client(monkeypatch):
    """Route CLI connections to one shared in-memory client."""
    client = AsyncMongoMockClient()
    monkeypatch.setattr(_storage, "client_factory", lambda config: client)
    monkeypatch.setenv("MONGOPLUG_VERIFY_CONNECTION", "0")
    return client


@pytest.fixture
def seeded_ids(cli_client):
    """Seed a users collection and return name -> id."""

    async def seed() -> dict[str, str]:
        store = MongoStore(
            MongoPlugConfig(db="cli_test", verify_connection=False),
            client_factory=lambda config: cli_client,
        )
        ids = {}
        for name, age in [("Alice", 30), ("Bob", 25), ("Carol", 41)]:
            ids[name] = await store.insert("users", {"name": name, "age": age})
        return ids

    return asyncio.run(seed())


def invoke(runner: CliRunner, args: list[str], db: str | None = "cli_test") -> "Result":
    """Invoke CLI with the test database selected."""
    if db:
        args = ["--db", db] + args
    return runner.invoke(app, args, catch_exceptions=False)

"""CLI helpers for building a store from global CLI state."""

from __future__ import annotations

from mongoplug.config import MongoPlugConfig
from mongoplug.connection import ClientFactory
from mongoplug.store import MongoStore

# Overridable for embedding the CLI against another driver client
client_factory: ClientFactory | None = None


def config_from_state() -> MongoPlugConfig:
    """Build a config from environment defaults overridden by CLI options."""
    from mongoplug.cli import state

    config = MongoPlugConfig.from_env()
    if state.url:
        config.url = state.url
    if state.db:
        config.db = state.db
    return config


def open_store() -> MongoStore:
    """Create a store using the global CLI connection settings."""
    return MongoStore(config_from_state(), client_factory=client_factory)

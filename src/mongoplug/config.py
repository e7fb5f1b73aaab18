"""Configuration for the mongoplug store."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass
class MongoPlugConfig:
    """Connection settings for a MongoStore."""

    url: str = "mongodb://localhost:27017"
    db: str = "mongoplug"
    app_name: str | None = None
    server_selection_timeout_ms: int = 5000
    verify_connection: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MongoPlugConfig:
        """Build a config from MONGOPLUG_* environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        timeout = env.get("MONGOPLUG_SERVER_SELECTION_TIMEOUT_MS")
        verify = env.get("MONGOPLUG_VERIFY_CONNECTION")
        return cls(
            url=env.get("MONGOPLUG_URL") or defaults.url,
            db=env.get("MONGOPLUG_DB") or defaults.db,
            app_name=env.get("MONGOPLUG_APP_NAME") or defaults.app_name,
            server_selection_timeout_ms=(
                int(timeout) if timeout else defaults.server_selection_timeout_ms
            ),
            verify_connection=(
                verify.strip().lower() in _TRUE_VALUES
                if verify is not None
                else defaults.verify_connection
            ),
        )

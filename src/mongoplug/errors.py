"""Structured error types for mongoplug."""

from __future__ import annotations

from typing import Any


class MongoPlugError(Exception):
    """Base error for all mongoplug errors."""


class ConnectionFailureError(MongoPlugError):
    """Raised when the one-time connection bring-up fails.

    Every operation awaiting the connection guard observes the same instance.
    """

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Could not connect to '{url}': {detail}")


class MalformedPredicateError(MongoPlugError, ValueError):
    """Raised when a predicate in the sequence is structurally invalid."""

    def __init__(self, index: int | None, detail: str) -> None:
        self.index = index
        self.detail = detail
        if index is None:
            super().__init__(f"Malformed predicate: {detail}")
        else:
            super().__init__(f"Malformed predicate at position {index}: {detail}")


class MalformedDocumentError(MongoPlugError):
    """Raised when a raw document has no identifier field."""

    def __init__(self, document: Any) -> None:
        self.document = document
        super().__init__(f"Document has no '_id' field: {document!r}")


class InvalidIdentifierError(MongoPlugError, ValueError):
    """Raised when a value cannot be converted to a native ObjectId."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid record identifier: {value!r}")

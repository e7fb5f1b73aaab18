"""mongoplug: predicate compiler and CRUD layer for MongoDB."""

__version__ = "0.1.0"

from mongoplug.accessor import CollectionAccessor
from mongoplug.compiler import Cursor, QuerySpec, compile, compile_predicates
from mongoplug.config import MongoPlugConfig
from mongoplug.connection import ConnectionGuard
from mongoplug.errors import (
    ConnectionFailureError,
    InvalidIdentifierError,
    MalformedDocumentError,
    MalformedPredicateError,
    MongoPlugError,
)
from mongoplug.ids import id_to_str, to_object_id
from mongoplug.normalize import Record, normalize
from mongoplug.predicates import parse_predicate, parse_predicates
from mongoplug.store import MongoStore
from mongoplug.updates import UpdateDescriptor, build_update_descriptor

__all__ = [
    "__version__",
    "MongoStore",
    "MongoPlugConfig",
    "ConnectionGuard",
    "CollectionAccessor",
    "Cursor",
    "QuerySpec",
    "compile",
    "compile_predicates",
    "parse_predicate",
    "parse_predicates",
    "Record",
    "normalize",
    "to_object_id",
    "id_to_str",
    "UpdateDescriptor",
    "build_update_descriptor",
    "MongoPlugError",
    "ConnectionFailureError",
    "MalformedPredicateError",
    "MalformedDocumentError",
    "InvalidIdentifierError",
]

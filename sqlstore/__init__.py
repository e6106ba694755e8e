"""Backend-agnostic CRUD and query facade over sqlite3 and mysql."""

from sqlstore.core.config import SQLConfig, get_sql_config, new_sql_config
from sqlstore.core.context import Cancelled, Context, DeadlineExceeded
from sqlstore.core.errors import (
    EmptyFilter,
    InvalidColumn,
    InvalidConfig,
    InvalidIdentifier,
    InvalidInput,
    RecordNotFound,
    StorageError,
    UnknownRelation,
)
from sqlstore.db.session import Base, Database
from sqlstore.repositories import ListResult, Query, Request, SQLStorage, Storage, new_sql_storage

__all__ = [
    "Base",
    "Cancelled",
    "Context",
    "Database",
    "DeadlineExceeded",
    "EmptyFilter",
    "InvalidColumn",
    "InvalidConfig",
    "InvalidIdentifier",
    "InvalidInput",
    "ListResult",
    "Query",
    "RecordNotFound",
    "Request",
    "SQLConfig",
    "SQLStorage",
    "Storage",
    "StorageError",
    "UnknownRelation",
    "get_sql_config",
    "new_sql_config",
    "new_sql_storage",
]

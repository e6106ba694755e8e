"""
Persistence adapters.

``SQLStorage`` implements the ``Storage`` interface on top of SQLAlchemy;
services should depend on the interface and hand it ``Query`` objects
rather than building statements themselves.
"""

from .interface import ListResult, Query, Storage
from .request import Request
from .sql_repository import SQLStorage, new_sql_storage

__all__ = ["ListResult", "Query", "Request", "SQLStorage", "Storage", "new_sql_storage"]

"""Error taxonomy for the storage facade.

Callers can tell "bad input" (``InvalidInput`` and subclasses) apart from
"no match" (``NoResultFound``, which ``RecordNotFound`` extends) and from
backend failures (any other ``sqlalchemy.exc.SQLAlchemyError``).
"""
from __future__ import annotations

from sqlalchemy.exc import NoResultFound


class StorageError(Exception):
    """Base class for errors raised by sqlstore itself."""


class InvalidConfig(StorageError):
    """Rejected database configuration (e.g. unsupported engine type)."""


class InvalidInput(StorageError, ValueError):
    """The caller passed something the facade refuses to send to the backend."""


class InvalidColumn(InvalidInput):
    def __init__(self, column: str) -> None:
        super().__init__(f"invalid column name: {column}")
        self.column = column


class EmptyFilter(InvalidInput):
    def __init__(self) -> None:
        super().__init__("filter cannot be empty")


class InvalidIdentifier(InvalidInput):
    def __init__(self, ident) -> None:
        super().__init__(f"identifier must be a positive integer, got {ident!r}")
        self.ident = ident


class UnknownRelation(InvalidInput):
    def __init__(self, model: type, name: str) -> None:
        super().__init__(f"{model.__name__}: unsupported relations: {name}")
        self.model = model
        self.name = name


class RecordNotFound(StorageError, NoResultFound):
    """No row matched a bulk operation that requires at least one match."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)

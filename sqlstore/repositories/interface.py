"""
Storage interface shared by every backend.

Services should depend on ``Storage`` rather than on SQLAlchemy sessions so
that the engine in use (sqlite3 or mysql) stays a deployment detail.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, TypeVar

from sqlstore.core.context import Context

T = TypeVar("T")


@dataclass
class Query:
    """Common list parameters."""

    # equality conditions, e.g. {"name": "test"}
    filter: dict[str, Any] = field(default_factory=dict)
    # 1-based; both page and size must be positive to paginate
    page: int = 0
    size: int = 0
    # e.g. {"created_at": "desc"}
    sort: dict[str, str] = field(default_factory=dict)
    # name of one relationship to load eagerly
    preload: str = ""
    # load every relationship eagerly
    all_preload: bool = False
    # list rows of this relationship instead of the main model
    association_key: str = ""

    @property
    def paginated(self) -> bool:
        return self.page > 0 and self.size > 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size if self.paginated else 0


@dataclass
class ListResult(Generic[T]):
    # rows matching the filter, before pagination
    total: int
    items: list[T] = field(default_factory=list)


class Storage(ABC):
    """Basic database operations."""

    @abstractmethod
    def client(self) -> Any:
        """Return the underlying database client."""

    @abstractmethod
    def create(self, ctx: Context, model: T) -> T:
        """Insert ``model`` and return it with generated fields populated."""

    @abstractmethod
    def get(self, ctx: Context, model: type[T], ident: int) -> T:
        """Load one record by primary key."""

    @abstractmethod
    def get_by(self, ctx: Context, model: type[T], filter: Mapping[str, Any]) -> T:
        """Load the first record matching ``filter``."""

    @abstractmethod
    def update(self, ctx: Context, model: type, ident: int, data: Any) -> None:
        """Update the record with primary key ``ident``; matching nothing is not an error."""

    @abstractmethod
    def update_by(self, ctx: Context, model: type, filter: Mapping[str, Any], data: Any) -> int:
        """Update every record matching ``filter``; matching nothing raises ``RecordNotFound``."""

    @abstractmethod
    def delete(self, ctx: Context, model: type, ident: int) -> None:
        """Permanently delete the record with primary key ``ident``."""

    @abstractmethod
    def delete_by(self, ctx: Context, model: type, filter: Mapping[str, Any]) -> int:
        """Permanently delete every record matching a non-empty ``filter``."""

    @abstractmethod
    def list(self, ctx: Context, query: Query, model: type[T]) -> ListResult:
        """List records with pagination, sorting, preloading or an association query."""

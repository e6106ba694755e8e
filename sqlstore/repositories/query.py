"""Translate a ``Query`` into SQLAlchemy statements.

The compiler only builds statements; executing them is up to the caller.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import Select, column, func, inspect, select, text
from sqlalchemy.sql.expression import ColumnElement, TextClause

from sqlstore.core.errors import InvalidColumn
from .filters import is_valid_column_name, validate_filter
from .interface import Query


class QueryCompiler:
    """Filter, count, sort and pagination rules for one mapped model."""

    def __init__(self, model: type) -> None:
        self.model = model
        self.table = inspect(model).local_table

    def column(self, key: str, table=None) -> ColumnElement:
        table = self.table if table is None else table
        col = table.c.get(key)
        return col if col is not None else column(key)

    def conditions(self, filter: Optional[Mapping[str, Any]]) -> list[ColumnElement]:
        """Equality conditions AND-ed by the caller; keys are validated first."""
        if not filter:
            return []
        validate_filter(filter)
        return [self.column(key) == value for key, value in filter.items()]

    def count(self, query: Query) -> Select:
        return select(func.count()).select_from(self.model).where(*self.conditions(query.filter))

    def order_by(self, sort: Optional[Mapping[str, str]], table=None) -> list[TextClause]:
        """One ``<column> <direction>`` term per entry, direction used as given."""
        table = self.table if table is None else table
        terms = []
        for field, direction in (sort or {}).items():
            for token in (field, direction):
                if not is_valid_column_name(token):
                    raise InvalidColumn(token)
            # qualify known columns so joined association queries stay unambiguous
            name = f"{table.name}.{field}" if field in table.c else field
            terms.append(text(f"{name} {direction}".rstrip()))
        return terms

    def paginate(self, stmt: Select, query: Query) -> Select:
        if query.paginated:
            stmt = stmt.offset(query.offset).limit(query.size)
        return stmt

    def compile(self, query: Query) -> Select:
        """Filtered, sorted and paginated select of the main model."""
        stmt = select(self.model).where(*self.conditions(query.filter))
        stmt = stmt.order_by(*self.order_by(query.sort))
        return self.paginate(stmt, query)

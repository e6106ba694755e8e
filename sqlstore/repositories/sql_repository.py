"""CRUD and list operations backed by SQLAlchemy, for any mapped model."""
from __future__ import annotations

from typing import Any, Mapping, TypeVar

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.engine import Engine

from sqlstore.core.config import SQLConfig
from sqlstore.core.context import Context
from sqlstore.core.errors import EmptyFilter, InvalidIdentifier, InvalidInput, RecordNotFound
from sqlstore.db.session import Database
from .associations import AssociationResolver
from .filters import validate_filter
from .interface import ListResult, Query, Storage
from .query import QueryCompiler

T = TypeVar("T")


def _primary_key(model: type):
    return inspect(model).primary_key[0]


def _check_ident(ident: Any) -> None:
    if isinstance(ident, bool) or not isinstance(ident, int) or ident <= 0:
        raise InvalidIdentifier(ident)


def _values(model: type, data: Any) -> dict[str, Any]:
    """Column values to write, from a mapping or from the attributes set on an instance."""
    if isinstance(data, Mapping):
        values = dict(data)
        validate_filter(values)
    elif isinstance(data, model):
        mapper = inspect(model)
        state = inspect(data)
        pk_keys = {mapper.get_property_by_column(col).key for col in mapper.primary_key}
        values = {
            attr.key: state.dict[attr.key]
            for attr in mapper.column_attrs
            if attr.key in state.dict and attr.key not in pk_keys
        }
    else:
        raise InvalidInput(f"update data must be a mapping or a {model.__name__} instance")
    if not values:
        raise InvalidInput("update data cannot be empty")
    return values


class SQLStorage(Storage):
    """Storage implementation over one shared ``Database``."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def client(self) -> Engine:
        return self.database.engine()

    def create(self, ctx: Context, model: T) -> T:
        with self.database.session(ctx) as session:
            session.add(model)
            session.commit()
            session.refresh(model)
            return model

    def get(self, ctx: Context, model: type[T], ident: int) -> T:
        _check_ident(ident)
        pk = _primary_key(model)
        stmt = select(model).where(pk == ident).order_by(pk).limit(1)
        with self.database.session(ctx) as session:
            return session.execute(stmt).scalar_one()

    def get_by(self, ctx: Context, model: type[T], filter: Mapping[str, Any]) -> T:
        conditions = QueryCompiler(model).conditions(filter)
        stmt = select(model).where(*conditions).order_by(_primary_key(model)).limit(1)
        with self.database.session(ctx) as session:
            return session.execute(stmt).scalar_one()

    def update(self, ctx: Context, model: type, ident: int, data: Any) -> None:
        _check_ident(ident)
        stmt = (
            update(model)
            .where(_primary_key(model) == ident)
            .values(_values(model, data))
            .execution_options(synchronize_session=False)
        )
        with self.database.session(ctx) as session:
            session.execute(stmt)
            session.commit()

    def update_by(self, ctx: Context, model: type, filter: Mapping[str, Any], data: Any) -> int:
        conditions = QueryCompiler(model).conditions(filter)
        stmt = (
            update(model)
            .where(*conditions)
            .values(_values(model, data))
            .execution_options(synchronize_session=False)
        )
        with self.database.session(ctx) as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFound()
            session.commit()
            return result.rowcount

    def delete(self, ctx: Context, model: type, ident: int) -> None:
        _check_ident(ident)
        stmt = delete(model).where(_primary_key(model) == ident).execution_options(synchronize_session=False)
        with self.database.session(ctx) as session:
            session.execute(stmt)
            session.commit()

    def delete_by(self, ctx: Context, model: type, filter: Mapping[str, Any]) -> int:
        if not filter:
            raise EmptyFilter()
        conditions = QueryCompiler(model).conditions(filter)
        stmt = delete(model).where(*conditions).execution_options(synchronize_session=False)
        with self.database.session(ctx) as session:
            result = session.execute(stmt)
            session.commit()
            return result.rowcount

    def list(self, ctx: Context, query: Query | None, model: type[T]) -> ListResult:
        """Count the filtered rows, then fetch one page.

        With ``association_key`` the items are rows of that relationship
        (the main model is not fetched); otherwise they are ``model`` rows,
        with ``preload`` or ``all_preload`` relationships loaded eagerly.
        """
        query = query or Query()
        compiler = QueryCompiler(model)
        count_stmt = compiler.count(query)
        fetch_stmt = AssociationResolver(compiler).statement(query)
        with self.database.session(ctx) as session:
            total = session.execute(count_stmt).scalar_one()
            items = session.execute(fetch_stmt).scalars().all()
        return ListResult(total=total, items=list(items))


def new_sql_storage(cfg: SQLConfig) -> SQLStorage:
    """Open the database described by ``cfg`` and wrap it; exits the process if it cannot connect."""
    database = Database(cfg)
    database.engine()
    return SQLStorage(database)

"""Pick how ``list`` fetches rows: association query, preload, preload all, or flat."""
from __future__ import annotations

from sqlalchemy import Select, inspect, select
from sqlalchemy.orm import RelationshipProperty, selectinload

from sqlstore.core.errors import UnknownRelation
from .interface import Query
from .query import QueryCompiler

ASSOCIATION = "association"
PRELOAD = "preload"
ALL_PRELOAD = "all_preload"
FLAT = "flat"


def relationship_of(model: type, name: str) -> RelationshipProperty:
    relationships = inspect(model).relationships
    if name not in relationships:
        raise UnknownRelation(model, name)
    return relationships[name]


def strategy_for(query: Query) -> str:
    """Association key wins over preload, preload over preload-all."""
    if query.association_key:
        return ASSOCIATION
    if query.preload:
        return PRELOAD
    if query.all_preload:
        return ALL_PRELOAD
    return FLAT


class AssociationResolver:
    def __init__(self, compiler: QueryCompiler) -> None:
        self.compiler = compiler
        self.model = compiler.model

    def statement(self, query: Query) -> Select:
        strategy = strategy_for(query)
        if strategy == ASSOCIATION:
            return self._association(query)

        stmt = self.compiler.compile(query)
        if strategy == PRELOAD:
            relationship_of(self.model, query.preload)
            stmt = stmt.options(selectinload(getattr(self.model, query.preload)))
        elif strategy == ALL_PRELOAD:
            stmt = stmt.options(
                *(selectinload(getattr(self.model, rel.key)) for rel in inspect(self.model).relationships)
            )
        return stmt

    def _association(self, query: Query) -> Select:
        """Rows of the related model reachable from main rows matching the filter."""
        rel = relationship_of(self.model, query.association_key)
        target = rel.mapper.class_
        stmt = (
            select(target)
            .join_from(self.model, target, getattr(self.model, query.association_key))
            .where(*self.compiler.conditions(query.filter))
            .order_by(*self.compiler.order_by(query.sort, table=rel.mapper.local_table))
        )
        return self.compiler.paginate(stmt, query)

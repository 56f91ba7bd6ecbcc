from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import and_, asc, desc, false, or_, true
from sqlalchemy.orm import Query, Session

from app.schemas.filtering import FilterOperator
from app.services.filter_compiler import And, CompiledFilter, Compare, Const, FilterNode, Or
from app.services.filter_errors import SchemaError
from app.services.record_schema import FieldSpec, RecordSchema
from app.services.sorting import Ordering

T = TypeVar("T")


def _column(spec: FieldSpec):
    if spec.column is None:
        raise SchemaError(f'Property "{spec.name}" is not mapped to a column')
    return spec.column


def _render_compare(node: Compare):
    col = _column(node.field)
    value = node.value
    op = node.operator
    if op is FilterOperator.IS_NULL:
        return col.is_(None)
    if op is FilterOperator.IS_NOT_NULL:
        return col.is_not(None)
    if op is FilterOperator.CONTAINS:
        return col.contains(value, autoescape=True)
    if op is FilterOperator.STARTS_WITH:
        return col.startswith(value, autoescape=True)
    if op is FilterOperator.ENDS_WITH:
        return col.endswith(value, autoescape=True)
    if op is FilterOperator.EQUALS:
        return col == value
    if op is FilterOperator.NOT_EQUALS:
        if node.field.nullable:
            # NULL <> x is unknown in SQL; a missing value still differs from x.
            return or_(col != value, col.is_(None))
        return col != value
    if op is FilterOperator.GREATER_THAN:
        return col > value
    if op is FilterOperator.GREATER_THAN_OR_EQUAL:
        return col >= value
    if op is FilterOperator.LESS_THAN:
        return col < value
    if op is FilterOperator.LESS_THAN_OR_EQUAL:
        return col <= value
    raise SchemaError(f"Operator {op.value} has no SQL form")


def render_clause(node: FilterNode):
    """Render a filter tree as a SQL expression with the same grouping."""
    if isinstance(node, Const):
        return true() if node.value else false()
    if isinstance(node, And):
        return and_(render_clause(node.left), render_clause(node.right))
    if isinstance(node, Or):
        return or_(render_clause(node.left), render_clause(node.right))
    return _render_compare(node)


class SqlAlchemyDataSource(Generic[T]):
    def __init__(self, query: Query, schema: RecordSchema):
        self.query = query
        self.schema = schema

    @classmethod
    def for_model(cls, db: Session, model, schema: RecordSchema | None = None) -> "SqlAlchemyDataSource":
        """Wrap ``db.query(model)``, e.g. ``for_model(SessionLocal(), Document)``."""
        return cls(db.query(model), schema or RecordSchema.from_model(model))

    def where(self, compiled: CompiledFilter) -> "SqlAlchemyDataSource[T]":
        return SqlAlchemyDataSource(self.query.filter(render_clause(compiled.node)), self.schema)

    def order_by(self, ordering: Ordering) -> "SqlAlchemyDataSource[T]":
        col = _column(ordering.field)
        return SqlAlchemyDataSource(self.query.order_by(desc(col) if ordering.descending else asc(col)), self.schema)

    def count(self) -> int:
        return self.query.order_by(None).count()

    def fetch(self, offset: int, limit: int) -> list[T]:
        return self.query.offset(offset).limit(limit).all()

    def all(self) -> list[T]:
        return self.query.all()

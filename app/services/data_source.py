from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Protocol, TypeVar

from app.schemas.pagination import PageResult, SortSpec
from app.services.filter_compiler import CompiledFilter, compile_filter
from app.services.filter_parser import parse_filter
from app.services.pagination import to_page
from app.services.record_schema import RecordSchema
from app.services.sorting import Ordering, build_ordering

T = TypeVar("T")


class DataSource(Protocol[T]):
    """Deferred, schema-aware record source.

    ``where`` and ``order_by`` return a new source and run nothing; work happens
    in ``count``, ``fetch`` and ``all``.
    """

    schema: RecordSchema

    def where(self, compiled: CompiledFilter) -> "DataSource[T]":
        ...

    def order_by(self, ordering: Ordering) -> "DataSource[T]":
        ...

    def count(self) -> int:
        ...

    def fetch(self, offset: int, limit: int) -> list[T]:
        ...

    def all(self) -> list[T]:
        ...


class InMemoryDataSource(Generic[T]):
    def __init__(
        self,
        records: Iterable[T],
        schema: RecordSchema,
        *,
        predicates: tuple[Callable[[T], bool], ...] = (),
        ordering: Ordering | None = None,
    ):
        self._records = records if isinstance(records, (list, tuple)) else list(records)
        self.schema = schema
        self._predicates = predicates
        self._ordering = ordering

    def where(self, compiled: CompiledFilter) -> "InMemoryDataSource[T]":
        return InMemoryDataSource(
            self._records,
            self.schema,
            predicates=self._predicates + (compiled,),
            ordering=self._ordering,
        )

    def order_by(self, ordering: Ordering) -> "InMemoryDataSource[T]":
        return InMemoryDataSource(self._records, self.schema, predicates=self._predicates, ordering=ordering)

    def _materialize(self) -> list[T]:
        rows = [row for row in self._records if all(predicate(row) for predicate in self._predicates)]
        if self._ordering is not None:
            rows = self._ordering.apply(rows)
        return rows

    def count(self) -> int:
        return sum(1 for row in self._records if all(predicate(row) for predicate in self._predicates))

    def fetch(self, offset: int, limit: int) -> list[T]:
        start = max(offset, 0)
        return self._materialize()[start : start + max(limit, 0)]

    def all(self) -> list[T]:
        return self._materialize()


def apply_filters(source: DataSource[T], filter_string: str | None) -> DataSource[T]:
    if filter_string is None or not str(filter_string).strip():
        return source
    criteria = parse_filter(filter_string)
    if not criteria:
        return source
    return source.where(compile_filter(criteria, source.schema))


def apply_sorting(source: DataSource[T], sort: SortSpec | None) -> DataSource[T]:
    ordering = build_ordering(sort, source.schema)
    if ordering is None:
        return source
    return source.order_by(ordering)


def search(source: DataSource[T], filter_string: str | None, sort: SortSpec | None) -> list[T]:
    """Unpaged search: filter, sort, materialize."""
    return apply_sorting(apply_filters(source, filter_string), sort).all()


def search_paged(
    source: DataSource[T],
    filter_string: str | None,
    sort: SortSpec | None,
    page: int,
    page_size: int,
) -> PageResult[Any]:
    return to_page(apply_sorting(apply_filters(source, filter_string), sort), page, page_size)

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from app.schemas.pagination import SortSpec
from app.services.filter_coercion import normalize_field_value
from app.services.record_schema import FieldSpec, RecordSchema

_LOG = logging.getLogger("app.filtering")


@dataclass(frozen=True)
class Ordering:
    """A single resolved sort key.

    Only one key is applied. Records with equal keys keep the order the data
    source produced them in; there is no secondary tie-break.
    """

    field: FieldSpec
    descending: bool = False

    def sort_key(self, record: Any) -> tuple:
        value = normalize_field_value(self.field, self.field.read(record))
        # Nulls sort before any value when ascending.
        return (0,) if value is None else (1, value)

    def apply(self, records: Iterable[Any]) -> list[Any]:
        # sorted() is stable in both directions, so ties keep input order.
        return sorted(records, key=self.sort_key, reverse=self.descending)


def build_ordering(sort: SortSpec | None, schema: RecordSchema) -> Ordering | None:
    """Resolve ``sort`` against ``schema``; ``None`` means keep the source order."""
    if sort is None or not str(sort.field or "").strip():
        return None
    spec = schema.resolve(sort.field)
    if spec is None:
        _LOG.debug("ignoring sort on unknown field %r for %s", sort.field, schema.name)
        return None
    return Ordering(field=spec, descending=sort.descending)

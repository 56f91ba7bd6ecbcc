from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Iterable, Mapping

from app.services.filter_errors import SchemaError


class FieldKind(str, Enum):
    STRING = "String"
    ENUM = "Enum"
    GUID = "Guid"
    DATETIME = "DateTime"
    BOOL = "Bool"
    NUMERIC = "Numeric"


def normalize_field_name(name: str) -> str:
    """Case- and underscore-insensitive key, so ``uploadDate`` and ``upload_date`` meet."""
    return str(name or "").replace("_", "").strip().lower()


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    accessor: Callable[[Any], Any]
    nullable: bool = False
    python_type: type | None = None
    column: Any = field(default=None, compare=False)

    def read(self, record: Any) -> Any:
        return self.accessor(record)


def kind_for_python_type(python_type: type | None) -> FieldKind:
    if python_type is None:
        return FieldKind.STRING
    if isinstance(python_type, type) and issubclass(python_type, Enum):
        return FieldKind.ENUM
    if python_type is uuid.UUID:
        return FieldKind.GUID
    if python_type in {datetime, date}:
        return FieldKind.DATETIME
    if python_type is bool:
        return FieldKind.BOOL
    if python_type in {int, float, Decimal}:
        return FieldKind.NUMERIC
    return FieldKind.STRING


def _column_python_type(column) -> type | None:
    try:
        return column.property.columns[0].type.python_type
    except (AttributeError, IndexError, NotImplementedError):
        return None


def _column_nullable(column) -> bool:
    try:
        return bool(column.property.columns[0].nullable)
    except (AttributeError, IndexError):
        return True


class RecordSchema:
    """Precomputed field table for one record type.

    The owner of a record type builds this once and hands it to the filter
    compiler and sort applier, which resolve property names only through it.
    """

    def __init__(self, name: str, fields: Iterable[FieldSpec]):
        self.name = name
        self._fields: dict[str, FieldSpec] = {}
        for spec in fields:
            key = normalize_field_name(spec.name)
            if key in self._fields:
                raise ValueError(f"{name}: duplicate field {spec.name!r}")
            self._fields[key] = spec

    def __repr__(self) -> str:
        return f"RecordSchema({self.name!r}, fields={list(self.field_names)!r})"

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self._fields.values())

    def resolve(self, name: str) -> FieldSpec | None:
        return self._fields.get(normalize_field_name(name))

    def require(self, name: str, criterion=None) -> FieldSpec:
        spec = self.resolve(name)
        if spec is None:
            raise SchemaError(f'Property "{name}" not found on {self.name}', criterion)
        return spec

    @classmethod
    def from_mapping(
        cls,
        name: str,
        kinds: Mapping[str, FieldKind | tuple[FieldKind, type]],
        *,
        nullable: Iterable[str] = (),
        accessor_factory: Callable[[str], Callable[[Any], Any]] = attrgetter,
    ) -> "RecordSchema":
        nullable_keys = {normalize_field_name(item) for item in nullable}
        specs = []
        for field_name, declared in kinds.items():
            kind, python_type = declared if isinstance(declared, tuple) else (declared, None)
            specs.append(
                FieldSpec(
                    name=field_name,
                    kind=kind,
                    accessor=accessor_factory(field_name),
                    nullable=normalize_field_name(field_name) in nullable_keys,
                    python_type=python_type,
                )
            )
        return cls(name, specs)

    @classmethod
    def from_model(cls, model, *, exclude: Iterable[str] = ()) -> "RecordSchema":
        """Build the descriptor for a SQLAlchemy mapped class from its column types."""
        skipped = {normalize_field_name(item) for item in exclude}
        specs = []
        for attr in model.__mapper__.column_attrs:
            if normalize_field_name(attr.key) in skipped:
                continue
            column = getattr(model, attr.key)
            python_type = _column_python_type(column)
            specs.append(
                FieldSpec(
                    name=attr.key,
                    kind=kind_for_python_type(python_type),
                    accessor=attrgetter(attr.key),
                    nullable=_column_nullable(column),
                    python_type=python_type,
                    column=column,
                )
            )
        return cls(model.__name__, specs)

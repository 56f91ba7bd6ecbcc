import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from app.schemas.filtering import FilterCriterion
from app.services.filter_errors import FormatError
from app.services.record_schema import FieldKind, FieldSpec


def _bad_filter_value(spec: FieldSpec, criterion: FilterCriterion | None, text: str, kind: str) -> FormatError:
    return FormatError(f'Invalid {kind} value {text!r} for property "{spec.name}"', criterion)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _coerce_enum(spec: FieldSpec, criterion, text: str):
    enum_type = spec.python_type
    if enum_type is None:
        return text
    wanted = text.strip().lower()
    for member in enum_type:
        if member.name.lower() == wanted:
            return member
    raise _bad_filter_value(spec, criterion, text, enum_type.__name__)


def _coerce_guid(spec: FieldSpec, criterion, text: str) -> uuid.UUID:
    try:
        return uuid.UUID(text.strip())
    except ValueError:
        raise _bad_filter_value(spec, criterion, text, "GUID")


def _parse_datetime_text(text: str) -> datetime:
    if "T" not in text and " " not in text and len(text) == 10:
        # Date-only literal -> start of that day.
        return datetime.combine(date.fromisoformat(text), datetime.min.time())
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _coerce_datetime(spec: FieldSpec, criterion, text: str):
    raw = text.strip()
    if not raw:
        raise _bad_filter_value(spec, criterion, text, "datetime")
    try:
        parsed = _parse_datetime_text(raw)
    except ValueError:
        raise _bad_filter_value(spec, criterion, text, "datetime")
    if spec.python_type is date:
        return parsed.date()
    return as_utc(parsed)


def _coerce_bool(spec: FieldSpec, criterion, text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise _bad_filter_value(spec, criterion, text, "boolean")


def _coerce_number(spec: FieldSpec, criterion, text: str):
    raw = text.strip()
    if not raw:
        raise _bad_filter_value(spec, criterion, text, "number")
    normalized = raw.replace(",", ".")
    python_type = spec.python_type
    try:
        if python_type is int:
            return int(normalized)
        if python_type is float:
            return float(normalized)
        if python_type is Decimal:
            return Decimal(normalized)
        if python_type is not None:
            return python_type(normalized)
        try:
            return int(normalized)
        except ValueError:
            return Decimal(normalized)
    except (ValueError, TypeError, InvalidOperation):
        raise _bad_filter_value(spec, criterion, text, "number")


_COERCERS = {
    FieldKind.ENUM: _coerce_enum,
    FieldKind.GUID: _coerce_guid,
    FieldKind.DATETIME: _coerce_datetime,
    FieldKind.BOOL: _coerce_bool,
    FieldKind.NUMERIC: _coerce_number,
}


def coerce_literal(spec: FieldSpec, text: str, criterion: FilterCriterion | None = None) -> Any:
    """Convert one filter literal to the Python value of the field's kind.

    Raises ``FormatError`` naming the property when the text does not parse.
    """
    coercer = _COERCERS.get(spec.kind)
    if coercer is None:
        return text
    return coercer(spec, criterion, text)


def normalize_field_value(spec: FieldSpec, value: Any) -> Any:
    """Bring a record value into the same shape ``coerce_literal`` produces, for comparison."""
    if spec.kind is FieldKind.DATETIME and isinstance(value, datetime) and spec.python_type is not date:
        return as_utc(value)
    if spec.kind is FieldKind.NUMERIC and spec.python_type is None and isinstance(value, float):
        # Untyped literals with a fraction coerce to Decimal; compare floats by their shortest repr.
        return Decimal(repr(value))
    return value

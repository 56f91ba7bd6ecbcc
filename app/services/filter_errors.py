from __future__ import annotations

from app.schemas.filtering import FilterCriterion


class FilterError(ValueError):
    """Base class for filters that parse but cannot be compiled against a record schema."""

    def __init__(self, message: str, criterion: FilterCriterion | None = None):
        super().__init__(message)
        self.message = message
        self.criterion = criterion


class SchemaError(FilterError):
    """The filter or sort names a property the record schema does not have."""


class TypeMismatchError(FilterError):
    """The operator cannot be applied to the resolved field kind."""


class FormatError(FilterError):
    """A literal cannot be converted to the resolved field kind."""

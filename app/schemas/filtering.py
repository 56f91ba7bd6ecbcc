from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class FilterOperator(str, Enum):
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    CONTAINS = "Contains"
    STARTS_WITH = "StartsWith"
    ENDS_WITH = "EndsWith"
    IN = "In"
    IS_NULL = "IsNull"
    IS_NOT_NULL = "IsNotNull"


class LogicalOperator(str, Enum):
    NONE = "None"
    AND = "And"
    OR = "Or"


@dataclass(frozen=True)
class TextValue:
    text: str


@dataclass(frozen=True)
class ListValue:
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class AbsentValue:
    pass


ABSENT = AbsentValue()

FilterValue = Union[TextValue, ListValue, AbsentValue]


@dataclass(frozen=True)
class FilterCriterion:
    property: str
    operator: FilterOperator
    value: FilterValue = field(default=ABSENT)
    logical_operator: LogicalOperator = LogicalOperator.NONE

    def describe(self) -> str:
        if isinstance(self.value, TextValue):
            shown = repr(self.value.text)
        elif isinstance(self.value, ListValue):
            shown = "(" + ", ".join(repr(item) for item in self.value.items) + ")"
        else:
            shown = "<absent>"
        return f"{self.property} {self.operator.value} {shown}"

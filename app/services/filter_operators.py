from types import MappingProxyType
from typing import Mapping

from app.schemas.filtering import FilterOperator

OPERATOR_TOKENS: Mapping[str, FilterOperator] = MappingProxyType(
    {
        "eq": FilterOperator.EQUALS,
        "ne": FilterOperator.NOT_EQUALS,
        "neq": FilterOperator.NOT_EQUALS,
        "gt": FilterOperator.GREATER_THAN,
        "ge": FilterOperator.GREATER_THAN_OR_EQUAL,
        "gte": FilterOperator.GREATER_THAN_OR_EQUAL,
        "lt": FilterOperator.LESS_THAN,
        "le": FilterOperator.LESS_THAN_OR_EQUAL,
        "lte": FilterOperator.LESS_THAN_OR_EQUAL,
        "contains": FilterOperator.CONTAINS,
        "startswith": FilterOperator.STARTS_WITH,
        "endswith": FilterOperator.ENDS_WITH,
        "in": FilterOperator.IN,
        "isnull": FilterOperator.IS_NULL,
        "isnotnull": FilterOperator.IS_NOT_NULL,
    }
)

NULL_CHECK_OPERATORS = frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})
TEXT_MATCH_OPERATORS = frozenset({FilterOperator.CONTAINS, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH})
COMPARISON_OPERATORS = frozenset(
    {
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.GREATER_THAN,
        FilterOperator.GREATER_THAN_OR_EQUAL,
        FilterOperator.LESS_THAN,
        FilterOperator.LESS_THAN_OR_EQUAL,
    }
)

VALUE_OPERATOR_TOKENS = tuple(
    sorted((token for token, op in OPERATOR_TOKENS.items() if op not in NULL_CHECK_OPERATORS), key=len, reverse=True)
)
NULL_CHECK_TOKENS = tuple(
    sorted((token for token, op in OPERATOR_TOKENS.items() if op in NULL_CHECK_OPERATORS), key=len, reverse=True)
)


def lookup_operator(token: str) -> FilterOperator | None:
    return OPERATOR_TOKENS.get(str(token or "").strip().lower())

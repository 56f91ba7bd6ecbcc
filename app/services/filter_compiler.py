"""Compile parsed filter criteria into a reusable predicate.

Criteria are folded strictly left to right into a small tree of ``Compare``,
``And`` and ``Or`` nodes: ``a or b and c`` becomes ``And(Or(a, b), c)``. There
is no operator precedence and no grouping. The tree is what data sources
consume; ``CompiledFilter`` also carries a closure that evaluates it against a
single in-memory record.
"""

from __future__ import annotations

import logging
import operator as _op
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Union

from app.schemas.filtering import (
    AbsentValue,
    FilterCriterion,
    FilterOperator,
    ListValue,
    LogicalOperator,
    TextValue,
)
from app.services.filter_coercion import coerce_literal, normalize_field_value
from app.services.filter_errors import FormatError, TypeMismatchError
from app.services.filter_operators import COMPARISON_OPERATORS, TEXT_MATCH_OPERATORS
from app.services.filter_parser import parse_filter
from app.services.record_schema import FieldKind, FieldSpec, RecordSchema

_LOG = logging.getLogger("app.filtering")


@dataclass(frozen=True)
class Compare:
    field: FieldSpec
    operator: FilterOperator
    value: Any = None


@dataclass(frozen=True)
class Const:
    value: bool


@dataclass(frozen=True)
class And:
    left: "FilterNode"
    right: "FilterNode"


@dataclass(frozen=True)
class Or:
    left: "FilterNode"
    right: "FilterNode"


FilterNode = Union[Compare, Const, And, Or]

_OPERATOR_SYMBOLS = {
    FilterOperator.EQUALS: "eq",
    FilterOperator.NOT_EQUALS: "ne",
    FilterOperator.GREATER_THAN: "gt",
    FilterOperator.GREATER_THAN_OR_EQUAL: "ge",
    FilterOperator.LESS_THAN: "lt",
    FilterOperator.LESS_THAN_OR_EQUAL: "le",
    FilterOperator.CONTAINS: "contains",
    FilterOperator.STARTS_WITH: "startswith",
    FilterOperator.ENDS_WITH: "endswith",
    FilterOperator.IS_NULL: "isnull",
    FilterOperator.IS_NOT_NULL: "isnotnull",
}


def describe_node(node: FilterNode) -> str:
    if isinstance(node, Const):
        return "true" if node.value else "false"
    if isinstance(node, And):
        return f"({describe_node(node.left)} and {describe_node(node.right)})"
    if isinstance(node, Or):
        return f"({describe_node(node.left)} or {describe_node(node.right)})"
    symbol = _OPERATOR_SYMBOLS[node.operator]
    if node.operator in (FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL):
        return f"{node.field.name} {symbol}"
    return f"{node.field.name} {symbol} {node.value!r}"


def _null_check(spec: FieldSpec, want_null: bool) -> FilterNode:
    if not spec.nullable:
        # A field that cannot hold null is never null.
        return Const(not want_null)
    return Compare(spec, FilterOperator.IS_NULL if want_null else FilterOperator.IS_NOT_NULL)


def _text_literal(spec: FieldSpec, criterion: FilterCriterion) -> str:
    if not isinstance(criterion.value, TextValue):
        raise FormatError(f'Operator {criterion.operator.value} on "{spec.name}" requires a single value', criterion)
    return criterion.value.text


def _build_in(spec: FieldSpec, criterion: FilterCriterion) -> FilterNode:
    if not isinstance(criterion.value, ListValue) or not criterion.value.items:
        raise FormatError(f'Operator In on "{spec.name}" requires a non-empty list of values', criterion)
    node: FilterNode | None = None
    for item in criterion.value.items:
        check = Compare(spec, FilterOperator.EQUALS, coerce_literal(spec, item, criterion))
        node = check if node is None else Or(node, check)
    return node


def build_criterion_node(criterion: FilterCriterion, schema: RecordSchema) -> FilterNode:
    spec = schema.require(criterion.property, criterion)
    op = criterion.operator

    if op is FilterOperator.IS_NULL:
        return _null_check(spec, want_null=True)
    if op is FilterOperator.IS_NOT_NULL:
        return _null_check(spec, want_null=False)

    if op in TEXT_MATCH_OPERATORS:
        if spec.kind is not FieldKind.STRING:
            raise TypeMismatchError(
                f'Operator {op.value} can only be used with string properties, "{spec.name}" is {spec.kind.value}',
                criterion,
            )
        return Compare(spec, op, _text_literal(spec, criterion))

    if op is FilterOperator.IN:
        return _build_in(spec, criterion)

    if op in COMPARISON_OPERATORS:
        if isinstance(criterion.value, AbsentValue):
            if op is FilterOperator.EQUALS:
                return _null_check(spec, want_null=True)
            if op is FilterOperator.NOT_EQUALS:
                return _null_check(spec, want_null=False)
            raise FormatError(f'Operator {op.value} on "{spec.name}" requires a value', criterion)
        return Compare(spec, op, coerce_literal(spec, _text_literal(spec, criterion), criterion))

    raise TypeMismatchError(f"Unsupported operator: {op.value}", criterion)


def build_filter_tree(criteria: Iterable[FilterCriterion], schema: RecordSchema) -> FilterNode:
    """Fold criteria left to right; each later criterion joins the accumulator by its own connective."""
    tree: FilterNode | None = None
    for criterion in criteria:
        node = build_criterion_node(criterion, schema)
        if tree is None:
            tree = node
        elif criterion.logical_operator is LogicalOperator.OR:
            tree = Or(tree, node)
        else:
            tree = And(tree, node)
    return tree if tree is not None else Const(True)


_ORDERING = {
    FilterOperator.GREATER_THAN: _op.gt,
    FilterOperator.GREATER_THAN_OR_EQUAL: _op.ge,
    FilterOperator.LESS_THAN: _op.lt,
    FilterOperator.LESS_THAN_OR_EQUAL: _op.le,
}

_TEXT_MATCH = {
    FilterOperator.CONTAINS: lambda value, literal: literal in value,
    FilterOperator.STARTS_WITH: lambda value, literal: value.startswith(literal),
    FilterOperator.ENDS_WITH: lambda value, literal: value.endswith(literal),
}

Predicate = Callable[[Any], bool]


def _compile_compare(node: Compare) -> Predicate:
    spec = node.field
    literal = node.value
    op = node.operator

    if op is FilterOperator.IS_NULL:
        return lambda record: spec.read(record) is None
    if op is FilterOperator.IS_NOT_NULL:
        return lambda record: spec.read(record) is not None

    if op in _TEXT_MATCH:
        match = _TEXT_MATCH[op]

        def _text(record) -> bool:
            value = spec.read(record)
            return value is not None and match(str(value), literal)

        return _text

    if op is FilterOperator.EQUALS:
        return lambda record: normalize_field_value(spec, spec.read(record)) == literal
    if op is FilterOperator.NOT_EQUALS:
        return lambda record: normalize_field_value(spec, spec.read(record)) != literal

    compare = _ORDERING[op]

    def _ordered(record) -> bool:
        value = normalize_field_value(spec, spec.read(record))
        # Ordering against a missing value is false, like SQL.
        return value is not None and compare(value, literal)

    return _ordered


def compile_node(node: FilterNode) -> Predicate:
    if isinstance(node, Const):
        constant = node.value
        return lambda record: constant
    if isinstance(node, And):
        left, right = compile_node(node.left), compile_node(node.right)
        return lambda record: left(record) and right(record)
    if isinstance(node, Or):
        left, right = compile_node(node.left), compile_node(node.right)
        return lambda record: left(record) or right(record)
    return _compile_compare(node)


class CompiledFilter:
    """A compiled filter tree plus its in-memory predicate. Pure and reusable."""

    __slots__ = ("node", "schema", "_predicate")

    def __init__(self, node: FilterNode, schema: RecordSchema):
        self.node = node
        self.schema = schema
        self._predicate = compile_node(node)

    def __call__(self, record: Any) -> bool:
        return bool(self._predicate(record))

    def __repr__(self) -> str:
        return f"CompiledFilter({self.schema.name}: {describe_node(self.node)})"

    @property
    def is_trivial(self) -> bool:
        return isinstance(self.node, Const) and self.node.value is True


def compile_filter(criteria: Iterable[FilterCriterion], schema: RecordSchema) -> CompiledFilter:
    """Build the predicate for ``criteria`` against ``schema``.

    Unknown properties raise ``SchemaError``; an operator that does not fit the
    field kind raises ``TypeMismatchError``; a literal that does not convert
    raises ``FormatError``. Nothing is cached between calls.
    """
    compiled = CompiledFilter(build_filter_tree(criteria, schema), schema)
    _LOG.debug("compiled filter %r", compiled)
    return compiled


def compile_filter_string(filter_string: str | None, schema: RecordSchema) -> CompiledFilter:
    return compile_filter(parse_filter(filter_string), schema)

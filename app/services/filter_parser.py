from __future__ import annotations

import logging
import re
from urllib.parse import unquote_plus

from app.schemas.filtering import (
    ABSENT,
    FilterCriterion,
    FilterValue,
    ListValue,
    LogicalOperator,
    TextValue,
)
from app.services.filter_operators import NULL_CHECK_TOKENS, VALUE_OPERATOR_TOKENS, lookup_operator

_LOG = logging.getLogger("app.filtering")

_CONNECTIVES = {"and": LogicalOperator.AND, "or": LogicalOperator.OR}
_QUOTES = "'\""

_NULL_CHECK_RE = re.compile(r"(\w+)\s+(" + "|".join(NULL_CHECK_TOKENS) + r")", re.IGNORECASE)
_VALUE_TERM_RE = re.compile(
    r"(\w+)\s+(" + "|".join(VALUE_OPERATOR_TOKENS) + r")\s+(.+)",
    re.IGNORECASE | re.DOTALL,
)


def normalize_filter_string(raw: str) -> str:
    # "+" is a space; an escaped "%2B" survives as a literal plus.
    return unquote_plus(raw)


def _connective_at(text: str, index: int) -> str | None:
    for word in _CONNECTIVES:
        end = index + len(word)
        if text[index:end].lower() != word:
            continue
        if index > 0 and not text[index - 1].isspace():
            continue
        if end < len(text) and not text[end].isspace():
            continue
        return word
    return None


def _opens_quote(text: str, index: int) -> bool:
    return index == 0 or text[index - 1].isspace() or text[index - 1] in "(,"


def _closes_quote(text: str, index: int) -> bool:
    nxt = index + 1
    return nxt >= len(text) or text[nxt].isspace() or text[nxt] in "),"


def _flush(parts: list[str], current: list[str]) -> None:
    chunk = "".join(current).strip()
    if chunk:
        parts.append(chunk)
    current.clear()


def split_terms(text: str, *, quote_aware: bool = True) -> list[str]:
    """Split a normalized filter into terms and the ``and``/``or`` connectives between them.

    Connectives are whole words bounded by whitespace or the string edges. Quoted
    literals are skipped over, so ``name eq 'salt and pepper'`` stays one term.
    An unterminated quote falls back to a plain split of the whole string.
    """
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    index = 0
    while index < len(text):
        ch = text[index]
        if quote is not None:
            current.append(ch)
            if ch == quote and _closes_quote(text, index):
                quote = None
            index += 1
            continue
        if quote_aware and ch in _QUOTES and _opens_quote(text, index):
            quote = ch
            current.append(ch)
            index += 1
            continue
        word = _connective_at(text, index)
        if word is not None:
            _flush(parts, current)
            parts.append(word)
            index += len(word)
            continue
        current.append(ch)
        index += 1

    if quote is not None:
        return split_terms(text, quote_aware=False)
    _flush(parts, current)
    return parts


def decode_value(raw: str) -> FilterValue:
    text = raw.strip()
    if text.startswith("(") and text.endswith(")"):
        inner = text.strip("()")
        if not inner.strip():
            return ListValue(())
        return ListValue(tuple(item.strip("'\" ") for item in inner.split(",")))
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return TextValue(text[1:-1])
    return TextValue(text)


def parse_term(term: str) -> FilterCriterion | None:
    text = term.strip()

    match = _NULL_CHECK_RE.fullmatch(text)
    if match:
        operator = lookup_operator(match.group(2))
        if operator is not None:
            return FilterCriterion(property=match.group(1), operator=operator, value=ABSENT)

    match = _VALUE_TERM_RE.fullmatch(text)
    if not match:
        return None
    operator = lookup_operator(match.group(2))
    if operator is None:
        return None
    return FilterCriterion(property=match.group(1), operator=operator, value=decode_value(match.group(3)))


def parse_filter(filter_string: str | None) -> list[FilterCriterion]:
    """Parse a query-string filter into criteria, in order.

    Parsing is best-effort: a segment that matches no known term shape is dropped
    and never raised. Blank input yields an empty list.
    """
    if filter_string is None or not str(filter_string).strip():
        return []

    parts = split_terms(normalize_filter_string(str(filter_string)))
    criteria: list[FilterCriterion] = []
    for index, part in enumerate(parts):
        if part in _CONNECTIVES:
            continue
        criterion = parse_term(part)
        if criterion is None:
            _LOG.debug("dropping unparseable filter segment: %r", part)
            continue

        if not criteria:
            logical = LogicalOperator.NONE
        elif index > 0 and parts[index - 1] in _CONNECTIVES:
            logical = _CONNECTIVES[parts[index - 1]]
        else:
            logical = LogicalOperator.AND
        criteria.append(
            FilterCriterion(
                property=criterion.property,
                operator=criterion.operator,
                value=criterion.value,
                logical_operator=logical,
            )
        )
    return criteria

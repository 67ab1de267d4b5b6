from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from .errors import ConfigurationError
from .query import FILTER_OPERATORS, Conditions

NAME_PREFIX = "#_a"
VALUE_PREFIX = ":_a"

MaxInValues = 100

_COMPARISONS: Mapping[str, str] = {
    "eq": "=",
    "ne": "<>",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
}


class PlaceholderSequence:
    """Monotonic token source: ``#_a0``, ``#_a1``, ... for one request."""

    def __init__(self, prefix: str) -> None:
        if not prefix:
            raise ValueError("prefix is required")
        self._prefix = prefix
        self._next = 0

    def __call__(self) -> str:
        token = f"{self._prefix}{self._next}"
        self._next += 1
        return token


class NamePlaceholders(Mapping[str, str]):
    """Token -> attribute name table; each distinct name is minted once."""

    def __init__(self, sequence: PlaceholderSequence | None = None) -> None:
        self._sequence = sequence or PlaceholderSequence(NAME_PREFIX)
        self._by_token: dict[str, str] = {}
        self._by_name: dict[str, str] = {}

    def token_for(self, name: str) -> str:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"attribute name must be a non-empty string: {name!r}")
        existing = self._by_name.get(name)
        if existing is not None:
            return existing
        token = self._sequence()
        self._by_token[token] = name
        self._by_name[name] = token
        return token

    def __getitem__(self, token: str) -> str:
        return self._by_token[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_token)

    def __len__(self) -> int:
        return len(self._by_token)


class ValuePlaceholders(Mapping[str, Any]):
    """Token -> literal table; every occurrence gets its own token."""

    def __init__(self, sequence: PlaceholderSequence | None = None) -> None:
        self._sequence = sequence or PlaceholderSequence(VALUE_PREFIX)
        self._by_token: dict[str, Any] = {}

    def token_for(self, value: Any) -> str:
        token = self._sequence()
        self._by_token[token] = value
        return token

    def __getitem__(self, token: str) -> Any:
        return self._by_token[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_token)

    def __len__(self) -> int:
        return len(self._by_token)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _clause(
    name: str,
    op: str,
    operand: Any,
    names: NamePlaceholders,
    values: ValuePlaceholders,
) -> str:
    ref = names.token_for(name)

    comparison = _COMPARISONS.get(op)
    if comparison is not None:
        return f"{ref} {comparison} {values.token_for(operand)}"

    if op == "begins_with":
        return f"begins_with({ref}, {values.token_for(operand)})"

    if op == "between":
        if not _is_sequence(operand) or len(operand) != 2:
            raise ConfigurationError(f"between on {name!r} requires exactly two operands")
        low = values.token_for(operand[0])
        high = values.token_for(operand[1])
        return f"{ref} BETWEEN {low} AND {high}"

    if op == "in":
        if not _is_sequence(operand) and not isinstance(operand, (set, frozenset)):
            raise ConfigurationError(f"in on {name!r} requires a sequence of values")
        if not operand:
            raise ConfigurationError(f"in on {name!r} requires at least one value")
        if len(operand) > MaxInValues:
            raise ConfigurationError(f"in supports maximum {MaxInValues} values")
        refs = [values.token_for(v) for v in operand]
        return f"{ref} IN (" + ", ".join(refs) + ")"

    if op == "contains":
        return f"contains({ref}, {values.token_for(operand)})"

    if op == "not_contains":
        return f"NOT contains({ref}, {values.token_for(operand)})"

    if op == "null":
        return f"attribute_not_exists({ref})"

    if op == "not_null":
        return f"attribute_exists({ref})"

    raise ConfigurationError(f"unsupported operator: {op}")


def compile_conditions(
    conditions: Conditions | None,
    names: NamePlaceholders,
    values: ValuePlaceholders,
    *,
    operators: frozenset[str] = FILTER_OPERATORS,
) -> str:
    """Compile ``{attribute: {operator: operand}}`` into an AND-joined expression.

    Attribute names and literals only ever appear in the output as tokens
    registered in ``names`` / ``values``. An empty mapping compiles to ``""``
    and leaves both tables untouched.
    """
    if not conditions:
        return ""

    # reject unknown operators before any token is minted
    for name, ops in conditions.items():
        if not isinstance(ops, Mapping) or not ops:
            raise ConfigurationError(f"condition for {name!r} must be a non-empty operator mapping")
        for op in ops:
            if op not in operators:
                raise ConfigurationError(f"unsupported operator for {name!r}: {op}")

    clauses: list[str] = []
    for name, ops in conditions.items():
        for op, operand in ops.items():
            clauses.append(_clause(str(name), str(op), operand, names, values))

    return " AND ".join(clauses)


def compile_projection(attributes: Sequence[str] | str | None, names: NamePlaceholders) -> str:
    if not attributes:
        return ""
    if isinstance(attributes, str):
        attributes = [attributes]

    return ", ".join(names.token_for(str(attr)) for attr in attributes)

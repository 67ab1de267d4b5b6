from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeSerializer

from .errors import ConfigurationError
from .expressions import NamePlaceholders, ValuePlaceholders, compile_conditions, compile_projection
from .query import (
    KEY_CONDITION_OPERATORS,
    PASSTHROUGH_OPTIONS,
    QUERY_OPTIONS_KEYS,
    RANGE_OPERATORS,
    SCAN_OPTIONS_KEYS,
    decode_cursor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSchema:
    name: str
    hash_key: str
    range_key: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("table name is required")
        if not self.hash_key:
            raise ConfigurationError("hash_key is required")


def split_options(
    opts: Mapping[str, Any] | None,
    allowed: frozenset[str] = QUERY_OPTIONS_KEYS,
) -> tuple[dict[str, Any], dict[str, Any]]:
    options: dict[str, Any] = {}
    conditions: dict[str, Any] = {}
    for key, value in (opts or {}).items():
        key = str(key)
        if key in allowed:
            options[key] = value
        else:
            conditions[key] = value
    return options, conditions


def _positive_int(options: Mapping[str, Any], name: str) -> int | None:
    value = options.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer")
    return value


def record_limit_of(options: Mapping[str, Any]) -> int | None:
    record_limit = _positive_int(options, "record_limit")
    if record_limit is None:
        return _positive_int(options, "limit")
    return record_limit


def scan_limit_of(options: Mapping[str, Any]) -> int | None:
    return _positive_int(options, "scan_limit")


def batch_size_of(options: Mapping[str, Any]) -> int | None:
    return _positive_int(options, "batch_size")


def effective_page_size(
    record_limit: int | None,
    scan_limit: int | None,
    batch_size: int | None,
) -> int | None:
    present = [v for v in (record_limit, scan_limit, batch_size) if v is not None]
    return min(present) if present else None


def _serialize(serializer: TypeSerializer, value: Any) -> Any:
    if isinstance(value, float):
        value = Decimal(str(value))
    elif isinstance(value, (list, tuple)):
        return {"L": [_serialize(serializer, v) for v in value]}
    elif isinstance(value, Mapping):
        return {"M": {str(k): _serialize(serializer, v) for k, v in value.items()}}

    try:
        return serializer.serialize(value)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"unsupported literal value: {value!r}") from err


def _exclusive_start_key(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return decode_cursor(value).last_key
        except ValueError as err:
            raise ConfigurationError("invalid exclusive_start_key cursor") from err
    if isinstance(value, Mapping):
        return dict(value) or None
    raise ConfigurationError("exclusive_start_key must be a cursor string or a key map")


def _assemble(
    table: TableSchema,
    options: Mapping[str, Any],
    names: NamePlaceholders,
    values: ValuePlaceholders,
    expressions: Mapping[str, str],
) -> dict[str, Any]:
    req: dict[str, Any] = {"TableName": table.name}

    limit = effective_page_size(record_limit_of(options), scan_limit_of(options), batch_size_of(options))
    if limit is not None:
        req["Limit"] = limit

    for option, wire_name in PASSTHROUGH_OPTIONS.items():
        if options.get(option) is not None:
            req[wire_name] = options[option]

    start_key = _exclusive_start_key(options.get("exclusive_start_key"))
    if start_key is not None:
        req["ExclusiveStartKey"] = start_key

    for wire_name, expression in expressions.items():
        if expression:
            req[wire_name] = expression

    if values:
        serializer = TypeSerializer()
        req["ExpressionAttributeValues"] = {k: _serialize(serializer, v) for k, v in values.items()}
    if names:
        req["ExpressionAttributeNames"] = dict(names)

    return req


def key_conditions(
    table: TableSchema,
    options: Mapping[str, Any],
    conditions: Mapping[str, Any],
) -> dict[str, dict[str, Any]]:
    if options.get("hash_value") is None:
        raise ConfigurationError("hash_value is required")

    hash_key = options.get("hash_key") or table.hash_key
    result: dict[str, dict[str, Any]] = {hash_key: {"eq": options["hash_value"]}}

    range_ops = {k: v for k, v in conditions.items() if k in RANGE_OPERATORS}
    if not range_ops:
        return result

    range_key = options.get("range_key") or table.range_key
    if not range_key:
        raise ConfigurationError("range conditions require a range key")
    if range_key == hash_key:
        raise ConfigurationError("range key must differ from hash key")

    compound = result.setdefault(range_key, {})
    for key, operand in range_ops.items():
        compound[RANGE_OPERATORS[key]] = operand
    return result


def non_key_conditions(conditions: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in conditions.items() if k not in RANGE_OPERATORS}


def build_query_request(table: TableSchema, opts: Mapping[str, Any] | None = None) -> dict[str, Any]:
    options, conditions = split_options(opts, QUERY_OPTIONS_KEYS)

    names = NamePlaceholders()
    values = ValuePlaceholders()

    key_expr = compile_conditions(
        key_conditions(table, options, conditions),
        names,
        values,
        operators=KEY_CONDITION_OPERATORS,
    )
    filter_expr = compile_conditions(non_key_conditions(conditions), names, values)
    projection_expr = compile_projection(options.get("project"), names)

    req = _assemble(
        table,
        options,
        names,
        values,
        {
            "KeyConditionExpression": key_expr,
            "FilterExpression": filter_expr,
            "ProjectionExpression": projection_expr,
        },
    )
    logger.debug("built query request for %s: %s", table.name, req.get("KeyConditionExpression"))
    return req


def build_scan_request(table: TableSchema, opts: Mapping[str, Any] | None = None) -> dict[str, Any]:
    options, conditions = split_options(opts, SCAN_OPTIONS_KEYS)
    stray = sorted(k for k in conditions if k in RANGE_OPERATORS)
    if stray:
        raise ConfigurationError(f"range conditions are not supported by scan: {stray}")

    names = NamePlaceholders()
    values = ValuePlaceholders()

    filter_expr = compile_conditions(conditions, names, values)
    projection_expr = compile_projection(options.get("project"), names)

    req = _assemble(
        table,
        options,
        names,
        values,
        {"FilterExpression": filter_expr, "ProjectionExpression": projection_expr},
    )
    logger.debug("built scan request for %s: %s", table.name, req.get("FilterExpression"))
    return req

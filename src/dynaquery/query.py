from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from boto3.dynamodb.types import TypeDeserializer

QUERY_OPTIONS_KEYS = frozenset(
    {
        "limit",
        "hash_key",
        "hash_value",
        "range_key",
        "consistent_read",
        "scan_index_forward",
        "select",
        "index_name",
        "batch_size",
        "exclusive_start_key",
        "record_limit",
        "scan_limit",
        "project",
        "return_consumed_capacity",
    }
)

SCAN_OPTIONS_KEYS = frozenset(
    {
        "limit",
        "consistent_read",
        "select",
        "index_name",
        "batch_size",
        "exclusive_start_key",
        "record_limit",
        "scan_limit",
        "project",
        "return_consumed_capacity",
    }
)

RANGE_OPERATORS: Mapping[str, str] = {
    "range_greater_than": "gt",
    "range_less_than": "lt",
    "range_gte": "gte",
    "range_lte": "lte",
    "range_begins_with": "begins_with",
    "range_between": "between",
    "range_eq": "eq",
}

KEY_CONDITION_OPERATORS = frozenset({"eq", "gt", "lt", "gte", "lte", "begins_with", "between"})

FILTER_OPERATORS = KEY_CONDITION_OPERATORS | {"ne", "in", "contains", "not_contains", "null", "not_null"}

# options passed through to the request as-is, in wire naming
PASSTHROUGH_OPTIONS: Mapping[str, str] = {
    "consistent_read": "ConsistentRead",
    "scan_index_forward": "ScanIndexForward",
    "select": "Select",
    "index_name": "IndexName",
    "return_consumed_capacity": "ReturnConsumedCapacity",
}

type Conditions = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    count: int
    scanned_count: int
    last_evaluated_key: dict[str, Any] | None = None
    consumed_capacity: Any | None = None
    truncated: bool = False

    @staticmethod
    def from_response(resp: Mapping[str, Any]) -> Page:
        items = list(resp.get("Items") or [])
        count = resp.get("Count")
        scanned = resp.get("ScannedCount")
        return Page(
            items=items,
            count=int(count) if count is not None else len(items),
            scanned_count=int(scanned) if scanned is not None else len(items),
            last_evaluated_key=resp.get("LastEvaluatedKey") or None,
            consumed_capacity=resp.get("ConsumedCapacity"),
        )

    @property
    def next_cursor(self) -> str | None:
        if not self.last_evaluated_key:
            return None
        return encode_cursor(self.last_evaluated_key)

    def deserialized_items(self) -> list[dict[str, Any]]:
        deserializer = TypeDeserializer()
        return [{k: deserializer.deserialize(v) for k, v in item.items()} for item in self.items]


@dataclass(frozen=True)
class Cursor:
    last_key: dict[str, Any]


def _key_value_to_json(av: Any) -> dict[str, str]:
    if not isinstance(av, dict) or len(av) != 1:
        raise ValueError("key attribute value must be a single-key map")
    (kind, value), *_ = av.items()

    if kind in {"S", "N"}:
        if not isinstance(value, str):
            raise ValueError(f"{kind} value must be a string")
        return {kind: value}
    if kind == "B":
        if not isinstance(value, (bytes, bytearray)):
            raise ValueError("B value must be bytes")
        return {"B": base64.b64encode(bytes(value)).decode("ascii")}

    raise ValueError(f"unsupported key attribute type: {kind}")


def _key_value_from_json(enc: Any) -> dict[str, Any]:
    if not isinstance(enc, dict) or len(enc) != 1:
        raise ValueError("key attribute value must be a single-key map")
    (kind, value), *_ = enc.items()
    if not isinstance(value, str):
        raise ValueError(f"{kind} value must be a string")

    if kind in {"S", "N"}:
        return {kind: value}
    if kind == "B":
        return {"B": base64.b64decode(value)}

    raise ValueError(f"unsupported key attribute type: {kind}")


def encode_cursor(last_key: Any) -> str:
    if not last_key:
        return ""
    if not isinstance(last_key, dict):
        raise ValueError("last_key must be a map")

    payload = {str(k): _key_value_to_json(last_key[k]) for k in sorted(last_key.keys())}
    data = json.dumps(payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Cursor:
    raw = str(cursor or "").strip()
    if not raw:
        raise ValueError("cursor is empty")

    padding = "=" * (-len(raw) % 4)
    parsed = json.loads(base64.urlsafe_b64decode(raw + padding).decode("utf-8"))
    if not isinstance(parsed, dict) or not parsed:
        raise ValueError("cursor must decode to a non-empty object")

    return Cursor(last_key={str(k): _key_value_from_json(v) for k, v in parsed.items()})

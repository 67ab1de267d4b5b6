from __future__ import annotations

import base64
import json

import pytest

from dynaquery.query import Page, decode_cursor, encode_cursor


def test_cursor_round_trip_with_key_types() -> None:
    key = {"pk": {"S": "A"}, "sk": {"N": "12"}, "blob": {"B": b"\x00hi"}}
    decoded = decode_cursor(encode_cursor(key))
    assert decoded.last_key == key


def test_cursor_is_url_safe_and_unpadded() -> None:
    cursor = encode_cursor({"pk": {"S": "??>>"}})
    assert "=" not in cursor
    assert "+" not in cursor
    assert "/" not in cursor


def test_decode_cursor_empty_raises() -> None:
    with pytest.raises(ValueError, match="cursor is empty"):
        decode_cursor("")


def test_encode_cursor_empty_returns_empty_string() -> None:
    assert encode_cursor({}) == ""
    assert encode_cursor(None) == ""


def test_encode_cursor_rejects_non_map() -> None:
    with pytest.raises(ValueError, match="last_key must be a map"):
        encode_cursor(["not-a-map"])


@pytest.mark.parametrize(
    "av",
    [
        {"S": 1},
        {"N": 1},
        {"B": "not-bytes"},
        {"BOOL": True},
        {"M": {}},
        {"S": "x", "N": "1"},
        "not-a-map",
    ],
)
def test_encode_cursor_rejects_non_key_attribute_values(av: object) -> None:
    with pytest.raises(ValueError):
        encode_cursor({"pk": av})


@pytest.mark.parametrize(
    "payload",
    [
        ["nope"],
        {},
        {"pk": {"S": 1}},
        {"pk": {"L": "x"}},
        {"pk": "nope"},
    ],
)
def test_decode_cursor_rejects_invalid_payloads(payload: object) -> None:
    cursor = base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    with pytest.raises(ValueError):
        decode_cursor(cursor)


def test_page_from_response_defaults_counts_to_item_count() -> None:
    page = Page.from_response({"Items": [{"pk": {"S": "A"}}]})
    assert page.count == 1
    assert page.scanned_count == 1
    assert page.last_evaluated_key is None
    assert page.next_cursor is None


def test_page_from_response_reads_counts_and_capacity() -> None:
    page = Page.from_response(
        {
            "Count": 3,
            "ScannedCount": 10,
            "LastEvaluatedKey": {"pk": {"S": "A"}},
            "ConsumedCapacity": {"TableName": "t", "CapacityUnits": 1.5},
        }
    )
    assert page.items == []
    assert page.count == 3
    assert page.scanned_count == 10
    assert page.consumed_capacity == {"TableName": "t", "CapacityUnits": 1.5}
    assert decode_cursor(page.next_cursor or "").last_key == {"pk": {"S": "A"}}


def test_page_deserialized_items() -> None:
    page = Page.from_response({"Items": [{"pk": {"S": "A"}, "n": {"N": "2"}, "tags": {"SS": ["x"]}}]})
    assert page.deserialized_items() == [{"pk": "A", "n": 2, "tags": {"x"}}]

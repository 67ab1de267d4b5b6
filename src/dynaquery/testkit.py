from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

from .mocks import ANY, FakeDynamoDBClient


def no_sleep(_: float) -> None:
    return None


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def client_error(code: str, message: str = "", operation: str = "Query") -> ClientError:
    response: dict[str, Any] = {"Error": {"Code": code, "Message": message or code}}
    return ClientError(response, operation)  # type: ignore[arg-type]


def throttling_error(operation: str = "Query") -> ClientError:
    return client_error(
        "ProvisionedThroughputExceededException",
        "The level of configured provisioned throughput for the table was exceeded.",
        operation,
    )


def query_response(
    items: list[dict[str, Any]],
    *,
    last_key: dict[str, Any] | None = None,
    scanned_count: int | None = None,
) -> dict[str, Any]:
    resp: dict[str, Any] = {
        "Items": items,
        "Count": len(items),
        "ScannedCount": len(items) if scanned_count is None else scanned_count,
    }
    if last_key is not None:
        resp["LastEvaluatedKey"] = last_key
    return resp


__all__ = [
    "ANY",
    "FakeDynamoDBClient",
    "RecordingSleep",
    "client_error",
    "no_sleep",
    "query_response",
    "throttling_error",
]

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


class _Wildcard:
    """Matches any value at its position in an expected request."""

    def __repr__(self) -> str:  # pragma: no cover
        return "ANY"


ANY: Any = _Wildcard()


def _mismatch(expected: Any, actual: Any, where: str) -> str | None:
    """Return a description of the first difference, or None when ``actual`` satisfies ``expected``.

    Mappings match as subsets (extra request keys are allowed); lists match
    element-wise and must have the same length.
    """
    if expected is ANY:
        return None

    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return f"{where}: expected dict, got {type(actual).__name__}"
        for key, want in expected.items():
            if key not in actual:
                return f"{where}: missing key {key!r}"
            problem = _mismatch(want, actual[key], f"{where}.{key}")
            if problem:
                return problem
        return None

    if isinstance(expected, list):
        if not isinstance(actual, list):
            return f"{where}: expected list, got {type(actual).__name__}"
        if len(expected) != len(actual):
            return f"{where}: expected {len(expected)} items, got {len(actual)}"
        for i, (want, got) in enumerate(zip(expected, actual, strict=True)):
            problem = _mismatch(want, got, f"{where}[{i}]")
            if problem:
                return problem
        return None

    return None if expected == actual else f"{where}: expected {expected!r}, got {actual!r}"


type RequestCheck = Mapping[str, Any] | Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class ExpectedCall:
    method: str
    expected: RequestCheck | None = None
    response: Mapping[str, Any] | None = None
    error: Exception | None = None
    absent: tuple[str, ...] = ()

    def check(self, method: str, req: Mapping[str, Any]) -> None:
        if self.method != method:
            raise AssertionError(f"expected {self.method}, got {method}")

        if callable(self.expected):
            self.expected(req)
        elif self.expected is not None:
            problem = _mismatch(dict(self.expected), dict(req), method)
            if problem:
                raise AssertionError(problem)

        present = [key for key in self.absent if key in req]
        if present:
            raise AssertionError(f"{method}: unexpected key {present[0]!r}")


class FakeDynamoDBClient:
    """Scripted stand-in for the ``query`` / ``scan`` calls of a boto3 DynamoDB client.

    Each ``expect`` queues one call; calls are consumed in order, checked
    against the queued request shape, and answered with the queued response
    or error. ``calls`` records every request as received.
    """

    def __init__(self) -> None:
        self._script: list[ExpectedCall] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def expect(
        self,
        method: str,
        expected: RequestCheck | None = None,
        *,
        response: Mapping[str, Any] | None = None,
        error: Exception | None = None,
        absent: tuple[str, ...] = (),
    ) -> None:
        self._script.append(ExpectedCall(method, expected, response, error, tuple(absent)))

    @property
    def pending(self) -> int:
        return len(self._script)

    def assert_no_pending(self) -> None:
        if self._script:
            raise AssertionError(f"pending expected calls: {self._script!r}")

    def _answer(self, method: str, req: dict[str, Any]) -> Mapping[str, Any]:
        self.calls.append((method, dict(req)))
        if not self._script:
            raise AssertionError(f"unexpected call: {method}")

        call = self._script.pop(0)
        call.check(method, req)
        if call.error is not None:
            raise call.error
        return dict(call.response or {})

    def query(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._answer("query", kwargs)

    def scan(self, **kwargs: Any) -> Mapping[str, Any]:
        return self._answer("scan", kwargs)

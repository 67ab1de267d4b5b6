from __future__ import annotations

import copy
import dataclasses
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .backoff import DEFAULT_BACKOFF, BackoffPolicy
from .errors import ConfigurationError, ThrottleRetryExceededError, ThrottlingError
from .query import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Continue:
    page: Page


@dataclass(frozen=True)
class Done:
    page: Page | None = None


type StepResult = Continue | Done
type Send = Callable[[dict[str, Any]], Page]
type CallNext = Callable[[dict[str, Any]], StepResult]


class Stage(Protocol):
    def process(self, request: dict[str, Any], call_next: CallNext) -> StepResult: ...


class Pipeline:
    """Ordered stages around a terminal send; the first stage is outermost."""

    def __init__(self, stages: Sequence[Stage], send: Send) -> None:
        self._stages = tuple(stages)
        self._send = send

    def _invoke(self, index: int, request: dict[str, Any]) -> StepResult:
        if index == len(self._stages):
            return Continue(self._send(request))
        return self._stages[index].process(request, lambda req: self._invoke(index + 1, req))

    def run(self, request: dict[str, Any]) -> StepResult:
        return self._invoke(0, request)


class BackoffStage:
    def __init__(
        self,
        policy: BackoffPolicy = DEFAULT_BACKOFF,
        *,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int | None = None,
        operation: str = "query",
    ) -> None:
        if max_retries is not None and max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        self._policy = policy
        self._sleep = sleep
        self._max_retries = max_retries
        self._operation = operation

    def process(self, request: dict[str, Any], call_next: CallNext) -> StepResult:
        attempts = 0
        while True:
            try:
                return call_next(request)
            except ThrottlingError as err:
                attempts += 1
                if self._max_retries is not None and attempts > self._max_retries:
                    raise ThrottleRetryExceededError(operation=self._operation, attempts=attempts) from err

                delay = self._policy.delay(attempts)
                logger.warning(
                    "%s throttled (%s), attempt %d, retrying in %.3fs",
                    self._operation,
                    err.code,
                    attempts,
                    delay,
                )
                if delay > 0:
                    self._sleep(delay)


class LimitStage:
    def __init__(
        self,
        *,
        record_limit: int | None = None,
        scan_limit: int | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.record_limit = record_limit
        self.scan_limit = scan_limit
        self.batch_size = batch_size
        self.record_count = 0
        self.scanned_count = 0

    def _remaining(self) -> list[int]:
        remaining: list[int] = []
        if self.record_limit is not None:
            remaining.append(self.record_limit - self.record_count)
        if self.scan_limit is not None:
            remaining.append(self.scan_limit - self.scanned_count)
        return remaining

    def process(self, request: dict[str, Any], call_next: CallNext) -> StepResult:
        remaining = self._remaining()
        if any(r <= 0 for r in remaining):
            return Done()

        caps = remaining + ([self.batch_size] if self.batch_size is not None else [])
        if caps:
            request["Limit"] = max(1, min(caps))

        result = call_next(request)
        page = result.page
        if page is None:
            return result

        prior_count = self.record_count
        self.record_count += page.count
        self.scanned_count += page.scanned_count

        if self.record_limit is not None and self.record_count >= self.record_limit:
            allowance = self.record_limit - prior_count
            if page.count > allowance:
                page = dataclasses.replace(
                    page,
                    items=page.items[:allowance],
                    count=allowance,
                    truncated=True,
                )
                self.record_count = self.record_limit
            logger.debug("record limit %d reached", self.record_limit)
            return Done(page)

        if self.scan_limit is not None and self.scanned_count >= self.scan_limit:
            logger.debug("scan limit %d reached", self.scan_limit)
            return Done(page)

        return result if isinstance(result, Done) else Continue(page)


class StartKeyStage:
    def __init__(self, start_key: dict[str, Any] | None = None) -> None:
        self.start_key = start_key

    def process(self, request: dict[str, Any], call_next: CallNext) -> StepResult:
        if self.start_key:
            request["ExclusiveStartKey"] = self.start_key

        result = call_next(request)
        if result.page is None:
            return result

        # the yielded page belongs to the consumer; keep a private copy of its key
        self.start_key = copy.deepcopy(result.page.last_evaluated_key)
        if not self.start_key:
            logger.debug("no continuation key, pagination complete")
            return Done(result.page)
        return result

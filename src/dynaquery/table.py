from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .aws_errors import map_client_error as _map_client_error
from .backoff import BackoffPolicy, backoff_from_env, max_retries_from_env
from .pipeline import BackoffStage, Done, LimitStage, Pipeline, StartKeyStage
from .query import QUERY_OPTIONS_KEYS, SCAN_OPTIONS_KEYS, Page
from .request_builder import (
    TableSchema,
    batch_size_of,
    build_query_request,
    build_scan_request,
    record_limit_of,
    scan_limit_of,
    split_options,
)

logger = logging.getLogger(__name__)


class _PagedOperation:
    operation: str
    options_keys: frozenset[str]
    request_builder: Callable[[TableSchema, Mapping[str, Any]], dict[str, Any]]

    def __init__(
        self,
        table: TableSchema,
        options: Mapping[str, Any] | None = None,
        *,
        client: Any | None = None,
        backoff: BackoffPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int | None = None,
        **opts: Any,
    ) -> None:
        self._table = table
        self._opts: dict[str, Any] = {**(options or {}), **opts}
        self._client: Any = client or boto3.client("dynamodb")
        self._backoff = backoff or backoff_from_env()
        self._sleep = sleep
        self._max_retries = max_retries if max_retries is not None else max_retries_from_env()

    @property
    def table(self) -> TableSchema:
        return self._table

    def build_request(self) -> dict[str, Any]:
        return self.request_builder(self._table, self._opts)

    def _send(self, request: dict[str, Any]) -> Page:
        try:
            resp = getattr(self._client, self.operation)(**request)
        except ClientError as err:
            raise _map_client_error(err) from err

        page = Page.from_response(resp)
        logger.debug(
            "%s %s: count=%d scanned=%d more=%s",
            self.operation,
            self._table.name,
            page.count,
            page.scanned_count,
            page.last_evaluated_key is not None,
        )
        return page

    def _pipeline(self) -> Pipeline:
        options, _ = split_options(self._opts, self.options_keys)
        return Pipeline(
            [
                StartKeyStage(),
                LimitStage(
                    record_limit=record_limit_of(options),
                    scan_limit=scan_limit_of(options),
                    batch_size=batch_size_of(options),
                ),
                BackoffStage(
                    self._backoff,
                    sleep=self._sleep,
                    max_retries=self._max_retries,
                    operation=self.operation,
                ),
            ],
            self._send,
        )

    def pages(self) -> Iterator[Page]:
        request = self.build_request()
        pipeline = self._pipeline()

        while True:
            result = pipeline.run(dict(request))
            if result.page is not None:
                yield result.page
            if isinstance(result, Done):
                return

    def __iter__(self) -> Iterator[Page]:
        return self.pages()

    def items(self) -> Iterator[dict[str, Any]]:
        for page in self.pages():
            yield from page.items


class Query(_PagedOperation):
    operation = "query"
    options_keys = QUERY_OPTIONS_KEYS
    request_builder = staticmethod(build_query_request)


class Scan(_PagedOperation):
    operation = "scan"
    options_keys = SCAN_OPTIONS_KEYS
    request_builder = staticmethod(build_scan_request)

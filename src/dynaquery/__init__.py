from __future__ import annotations

import json
import re
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .errors import (
    AwsError,
    ConfigurationError,
    DynaqueryError,
    NotFoundError,
    ThrottleRetryExceededError,
    ThrottlingError,
    ValidationError,
)
from .expressions import (
    NamePlaceholders,
    PlaceholderSequence,
    ValuePlaceholders,
    compile_conditions,
    compile_projection,
)
from .query import Page, decode_cursor, encode_cursor
from .request_builder import TableSchema, build_query_request, build_scan_request

if TYPE_CHECKING:
    from .backoff import (
        BackoffPolicy,
        ConstantBackoff,
        ExponentialBackoff,
        backoff_from_env,
        max_retries_from_env,
    )
    from .pipeline import BackoffStage, Continue, Done, LimitStage, Pipeline, StartKeyStage
    from .table import Query, Scan


def _read_repo_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except Exception:
        return "0.0.0"

    version = data.get("version")
    return version if isinstance(version, str) and version else "0.0.0"


def _normalize_repo_version(repo_version: str) -> str:
    match = re.match(r"^(\d+\.\d+\.\d+)-rc\.?([0-9]+)$", repo_version)
    if match:
        return f"{match.group(1)}rc{match.group(2)}"
    return repo_version


__repo_version__ = _read_repo_version()
__version__ = _normalize_repo_version(__repo_version__)


def __getattr__(name: str) -> Any:
    if name in {"Query", "Scan"}:
        from . import table

        return getattr(table, name)
    if name in {
        "BackoffPolicy",
        "ConstantBackoff",
        "ExponentialBackoff",
        "backoff_from_env",
        "max_retries_from_env",
    }:
        from . import backoff

        return getattr(backoff, name)
    if name in {"BackoffStage", "Continue", "Done", "LimitStage", "Pipeline", "StartKeyStage"}:
        from . import pipeline

        return getattr(pipeline, name)
    raise AttributeError(name)


__all__ = [
    "AwsError",
    "BackoffPolicy",
    "BackoffStage",
    "ConfigurationError",
    "ConstantBackoff",
    "Continue",
    "Done",
    "DynaqueryError",
    "ExponentialBackoff",
    "LimitStage",
    "NamePlaceholders",
    "NotFoundError",
    "Page",
    "Pipeline",
    "PlaceholderSequence",
    "Query",
    "Scan",
    "StartKeyStage",
    "TableSchema",
    "ThrottleRetryExceededError",
    "ThrottlingError",
    "ValidationError",
    "ValuePlaceholders",
    "__repo_version__",
    "__version__",
    "backoff_from_env",
    "build_query_request",
    "build_scan_request",
    "compile_conditions",
    "compile_projection",
    "decode_cursor",
    "encode_cursor",
    "max_retries_from_env",
]

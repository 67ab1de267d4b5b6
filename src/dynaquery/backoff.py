from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from .errors import ConfigurationError

ENV_STRATEGY = "DYNAQUERY_BACKOFF"
ENV_BASE_SECONDS = "DYNAQUERY_BACKOFF_BASE_SECONDS"
ENV_MAX_SECONDS = "DYNAQUERY_BACKOFF_MAX_SECONDS"
ENV_CEILING = "DYNAQUERY_BACKOFF_CEILING"
ENV_MAX_RETRIES = "DYNAQUERY_BACKOFF_MAX_RETRIES"


class BackoffPolicy(Protocol):
    def delay(self, attempt: int) -> float: ...


@dataclass(frozen=True)
class ConstantBackoff:
    seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ConfigurationError("seconds must be >= 0")

    def delay(self, attempt: int) -> float:
        return self.seconds


@dataclass(frozen=True)
class ExponentialBackoff:
    """Doubling delay per consecutive throttle.

    ``ceiling`` stops the doubling after that many attempts; ``max_seconds``
    caps the delay itself.
    """

    base_seconds: float = 0.05
    max_seconds: float = 1.0
    ceiling: int | None = None

    def __post_init__(self) -> None:
        if self.base_seconds < 0:
            raise ConfigurationError("base_seconds must be >= 0")
        if self.max_seconds < self.base_seconds:
            raise ConfigurationError("max_seconds must be >= base_seconds")
        if self.ceiling is not None and self.ceiling <= 0:
            raise ConfigurationError("ceiling must be > 0")

    def delay(self, attempt: int) -> float:
        if attempt < 1:
            attempt = 1
        if self.ceiling is not None:
            attempt = min(attempt, self.ceiling)
        seconds = self.base_seconds * (2.0 ** (attempt - 1))
        if seconds > self.max_seconds:
            return self.max_seconds
        return seconds


DEFAULT_BACKOFF = ExponentialBackoff()


def _float_env(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as err:
        raise ConfigurationError(f"{name} must be a number") from err


def _int_env(environ: Mapping[str, str], name: str) -> int | None:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as err:
        raise ConfigurationError(f"{name} must be an integer") from err


def backoff_from_env(environ: Mapping[str, str] = os.environ) -> BackoffPolicy:
    strategy = (environ.get(ENV_STRATEGY) or "exponential").strip().lower()

    if strategy == "constant":
        return ConstantBackoff(seconds=_float_env(environ, ENV_BASE_SECONDS, 1.0))

    if strategy == "exponential":
        return ExponentialBackoff(
            base_seconds=_float_env(environ, ENV_BASE_SECONDS, DEFAULT_BACKOFF.base_seconds),
            max_seconds=_float_env(environ, ENV_MAX_SECONDS, DEFAULT_BACKOFF.max_seconds),
            ceiling=_int_env(environ, ENV_CEILING),
        )

    raise ConfigurationError(f"unknown backoff strategy: {strategy}")


def max_retries_from_env(environ: Mapping[str, str] = os.environ) -> int | None:
    max_retries = _int_env(environ, ENV_MAX_RETRIES)
    if max_retries is not None and max_retries < 0:
        raise ConfigurationError(f"{ENV_MAX_RETRIES} must be >= 0")
    return max_retries

from __future__ import annotations

from botocore.exceptions import ClientError

from .errors import AwsError, NotFoundError, ThrottlingError, ValidationError

THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


def is_throttling_error(err: ClientError) -> bool:
    return _error_code(err) in THROTTLING_CODES


def map_client_error(err: ClientError) -> Exception:
    code = _error_code(err)
    message = str(err.response.get("Error", {}).get("Message", ""))

    if is_throttling_error(err):
        return ThrottlingError(code=code, message=message)
    if code == "ValidationException":
        return ValidationError(message)
    if code == "ResourceNotFoundException":
        return NotFoundError(message)

    return AwsError(code=code or "UnknownError", message=message or str(err))

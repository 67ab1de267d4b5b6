from __future__ import annotations

import pytest

from dynaquery import AwsError, NotFoundError, ThrottlingError, ValidationError
from dynaquery.aws_errors import is_throttling_error, map_client_error
from dynaquery.testkit import client_error


@pytest.mark.parametrize(
    "code",
    ["ProvisionedThroughputExceededException", "ThrottlingException", "RequestLimitExceeded"],
)
def test_throttling_codes_map_to_throttling_error(code: str) -> None:
    err = client_error(code, "slow down")
    assert is_throttling_error(err) is True

    mapped = map_client_error(err)
    assert isinstance(mapped, ThrottlingError)
    assert mapped.code == code
    assert mapped.message == "slow down"


def test_service_errors_map_to_typed_errors() -> None:
    assert isinstance(map_client_error(client_error("ValidationException")), ValidationError)
    assert isinstance(map_client_error(client_error("ResourceNotFoundException")), NotFoundError)

    other = map_client_error(client_error("InternalServerError", "oops"))
    assert isinstance(other, AwsError)
    assert other.code == "InternalServerError"
    assert is_throttling_error(client_error("InternalServerError")) is False


def test_missing_code_maps_to_unknown_error() -> None:
    mapped = map_client_error(client_error(""))
    assert isinstance(mapped, AwsError)
    assert mapped.code == "UnknownError"


@pytest.mark.parametrize(
    "code",
    ["ThrottlingException", "RequestLimitExceeded", "ValidationException", "InternalServerError", ""],
)
def test_mapping_agrees_with_throttling_detection(code: str) -> None:
    err = client_error(code)
    assert isinstance(map_client_error(err), ThrottlingError) is is_throttling_error(err)

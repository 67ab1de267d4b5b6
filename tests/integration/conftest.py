from __future__ import annotations

import os

import pytest


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("DYNAMODB_ENDPOINT"):
        return
    skip = pytest.mark.skip(reason="DYNAMODB_ENDPOINT is not set")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)

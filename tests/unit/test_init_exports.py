from __future__ import annotations

import pytest

import dynaquery


def test_init_exposes_lazy_exports_via_getattr() -> None:
    assert dynaquery._normalize_repo_version("1.2.3") == "1.2.3"
    assert dynaquery._normalize_repo_version("1.2.3-rc.4") == "1.2.3rc4"

    assert callable(dynaquery.Query)
    assert callable(dynaquery.Scan)
    assert callable(dynaquery.backoff_from_env)
    assert callable(dynaquery.ExponentialBackoff)
    assert callable(dynaquery.Pipeline)


def test_init_unknown_attribute_raises() -> None:
    with pytest.raises(AttributeError):
        dynaquery.does_not_exist  # noqa: B018


def test_all_names_resolve() -> None:
    for name in dynaquery.__all__:
        assert getattr(dynaquery, name) is not None

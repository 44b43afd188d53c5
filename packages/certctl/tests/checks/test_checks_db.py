from __future__ import annotations

import sys
from pathlib import Path

import pytest
from helpers import make_db, passing, write_suite_module

from certctl.catalog import CatalogBuilder
from certctl.checks import ChecksDB, load_suites
from certctl.errors import CatalogError, DuplicateCheckError, UnknownCheckError


def test_checks_get_catalog_tags() -> None:
    db = make_db({"networking": [("net-a", passing)]}, tags={"net-a": ("common", "telco")})
    check = db.get("net-a")
    assert check is not None
    assert check.tags == ("common", "telco", "networking", "net-a")


def test_unknown_and_duplicate_ids_rejected() -> None:
    builder = CatalogBuilder()
    builder.register("net-a", "networking", "d", "r")
    db = ChecksDB(builder.build())
    group = db.group("networking")
    db.add(group, "net-a", passing)
    with pytest.raises(DuplicateCheckError):
        db.add(group, "net-a", passing)
    with pytest.raises(UnknownCheckError):
        db.add(group, "net-b", passing)


def test_group_must_match_catalog_suite() -> None:
    builder = CatalogBuilder()
    builder.register("net-a", "networking", "d", "r")
    db = ChecksDB(builder.build())
    with pytest.raises(CatalogError):
        db.add("lifecycle", "net-a", passing)


def test_filter_check_ids_in_registration_order() -> None:
    db = make_db(
        {"one": [("b-check", passing), ("a-check", passing)], "two": [("c-check", passing)]},
        tags={"c-check": ("telco",)},
    )
    assert db.filter_check_ids("common") == ["b-check", "a-check"]
    assert db.filter_check_ids("telco || a-check") == ["a-check", "c-check"]
    assert db.filter_check_ids("none") == []
    assert [g.name for g in db] == ["one", "two"]


def test_load_suites(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_suite_module(tmp_path, "suite_for_db_test")
    monkeypatch.syspath_prepend(str(tmp_path))
    db = load_suites(["suite_for_db_test"])
    assert [c.id for c in db.checks()] == ["demo-pass", "demo-fail", "demo-skip"]
    sys.modules.pop("suite_for_db_test", None)


def test_load_suites_missing_module() -> None:
    with pytest.raises(CatalogError, match="could not import"):
        load_suites(["certctl_no_such_suite_module"])

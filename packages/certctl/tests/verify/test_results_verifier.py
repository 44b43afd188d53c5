from __future__ import annotations

import io
from pathlib import Path

import pytest
import yaml
from hypothesis import given
from hypothesis import strategies as st
from helpers import make_db, passing

from certctl.checks import Check, CheckState, run_checks
from certctl.core.logging import EventLog
from certctl.environment import Environment
from certctl.errors import ConfigError, ReportValidationError
from certctl.verify import compare_results, generate_template, load_expected_results, parse_results_log, write_template
from certctl.verify.results import (
    MISMATCH_RULE,
    RESULT_MISSING,
    expected_from_template,
    parse_results_lines,
    render_mismatch_table,
)


def _log(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "certctl.log"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_last_recorded_result_wins(tmp_path: Path) -> None:
    log = _log(
        tmp_path,
        'ts=1 level=info component=checks action=check [net-policy-deny-all] Recording result "FAILED"',
        "ts=2 level=info component=checks action=check [net-policy-deny-all] retrying",
        'ts=3 level=info component=checks action=check [net-policy-deny-all] Recording result "PASSED"',
    )
    assert parse_results_log(log) == {"net-policy-deny-all": "PASSED"}


def test_unrelated_lines_ignored() -> None:
    lines = ["no brackets here", '[a] something else "PASSED"', 'INFO [b]   Recording result  "SKIPPED"']
    assert parse_results_lines(lines) == {"b": "SKIPPED"}


def test_one_mismatch_for_wrong_bucket() -> None:
    expected = expected_from_template({"testCases": {"pass": ["a"], "fail": [], "skip": ["b"]}})
    mismatches = compare_results({"a": "PASSED", "b": "FAILED"}, expected)
    assert [(m.check_id, m.expected, m.actual) for m in mismatches] == [("b", "SKIPPED", "FAILED")]


def test_missing_actual_result() -> None:
    expected = expected_from_template({"testCases": {"pass": ["c"]}})
    mismatches = compare_results({}, expected)
    assert [(m.check_id, m.expected, m.actual) for m in mismatches] == [("c", "PASSED", RESULT_MISSING)]


def test_unexpected_actual_result() -> None:
    mismatches = compare_results({"d": "PASSED"}, {})
    assert [(m.expected, m.actual) for m in mismatches] == [(RESULT_MISSING, "PASSED")]


def test_mismatch_table_layout() -> None:
    table = render_mismatch_table(compare_results({"b": "FAILED"}, {"b": "SKIPPED"}))
    lines = [line for line in table.splitlines() if line]
    assert lines[0] == MISMATCH_RULE
    assert lines[1].startswith("| TEST_CASE")
    assert "EXPECTED_RESULT" in lines[1]
    assert lines[3].startswith("| b ")
    assert lines[3].rstrip().endswith("FAILED |")


def test_template_round_trip(tmp_path: Path) -> None:
    actual = {"a": "PASSED", "b": "SKIPPED", "c": "FAILED"}
    path = write_template(generate_template(actual), tmp_path / "expected_results.yaml")
    text = path.read_text(encoding="utf-8")
    assert text.startswith("testCases:\n  pass:\n")
    assert yaml.safe_load(text) == {"testCases": {"pass": ["a"], "fail": ["c"], "skip": ["b"]}}
    assert compare_results(actual, load_expected_results(path)) == []


def test_unknown_result_cannot_be_templated() -> None:
    with pytest.raises(ReportValidationError, match="ERROR"):
        generate_template({"a": "ERROR"})


def test_unreadable_inputs(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        parse_results_log(tmp_path / "missing.log")
    with pytest.raises(ConfigError):
        load_expected_results(tmp_path / "missing.yaml")
    bad = tmp_path / "bad.yaml"
    bad.write_text("testCases:\n  pass: [a\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_expected_results(bad)
    wrong = tmp_path / "wrong.yaml"
    wrong.write_text("cases:\n  pass: [a]\n", encoding="utf-8")
    with pytest.raises(ReportValidationError):
        load_expected_results(wrong)


IDS = st.from_regex(r"[a-z][a-z0-9-]{0,12}", fullmatch=True)
RESULTS = st.sampled_from(["PASSED", "FAILED", "SKIPPED"])


@given(st.dictionaries(IDS, RESULTS, max_size=12))
def test_generated_template_verifies_same_log(actual: dict[str, str]) -> None:
    lines = [f'ts=x level=info [{check_id}] Recording result "{result}"' for check_id, result in actual.items()]
    parsed = parse_results_lines(lines)
    template = generate_template(parsed)
    rendered = yaml.safe_load(yaml.safe_dump(template))
    assert compare_results(parsed, expected_from_template(rendered)) == []


def test_errored_check_is_recorded_as_failed_and_round_trips(tmp_path: Path) -> None:
    def boom(check: Check, env: Environment) -> None:
        raise RuntimeError("cluster went away")

    db = make_db({"lifecycle": [("ok-check", passing), ("boom-check", boom)]})
    log_path = tmp_path / "certctl.log"
    with EventLog("run-err", stream=io.StringIO()) as log:
        log.open_file(log_path)
        result = run_checks(db, "common", log=log)
    assert result.get("boom-check").state is CheckState.ERROR

    actual = parse_results_log(log_path)
    assert actual == {"ok-check": "PASSED", "boom-check": "FAILED"}
    template_path = write_template(generate_template(actual), tmp_path / "expected_results.yaml")
    assert compare_results(actual, load_expected_results(template_path)) == []

from __future__ import annotations

import io
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from helpers import FakeClock, failing, make_db, passing

from certctl.checks import Check, CheckState, run_checks
from certctl.checks.evidence import CHECK_ERROR_TYPE
from certctl.core.logging import EventLog
from certctl.environment import Environment
from certctl.errors import LabelExpressionError
from certctl.reporting import build_claim


def _states(result) -> dict[str, CheckState]:
    return {r.id: r.state for r in result.records}


def test_classification_and_order() -> None:
    order: list[str] = []

    def tracked(fn):
        def _inner(check: Check, env: Environment) -> None:
            order.append(check.id)
            fn(check, env)

        return _inner

    db = make_db(
        {
            "one": [("b-check", tracked(passing)), ("a-check", tracked(failing))],
            "two": [("c-check", tracked(passing))],
        }
    )
    result = run_checks(db, "common", clock=FakeClock())
    assert order == ["b-check", "a-check", "c-check"]
    assert _states(result) == {
        "b-check": CheckState.PASSED,
        "a-check": CheckState.FAILED,
        "c-check": CheckState.PASSED,
    }
    assert result.has_failures


def test_label_mismatch_excludes_check_entirely() -> None:
    db = make_db({"one": [("a-check", passing), ("b-check", passing)]}, tags={"b-check": ("telco",)})
    result = run_checks(db, "common")
    assert [r.id for r in result.records] == ["a-check"]
    assert result.selected == 1


def test_none_runs_nothing() -> None:
    db = make_db({"one": [("a-check", passing)]})
    assert run_checks(db, "none").records == []


def test_bad_expression_fails_before_running() -> None:
    ran: list[str] = []
    db = make_db({"one": [("a-check", lambda c, e: ran.append(c.id))]})
    with pytest.raises(LabelExpressionError):
        run_checks(db, "common &&")
    assert ran == []


def test_check_without_evidence_passes_with_warning() -> None:
    db = make_db({"one": [("a-check", lambda c, e: None)]})
    result = run_checks(db, "common")
    record = result.records[0]
    assert record.state is CheckState.PASSED
    assert not record.evidence_recorded
    assert "recorded no evidence" in record.captured_output


def test_one_non_compliant_record_fails() -> None:
    def many(check: Check, env: Environment) -> None:
        for _ in range(10):
            passing(check, env)
        failing(check, env)

    db = make_db({"one": [("a-check", many)]})
    record = run_checks(db, "common").records[0]
    assert record.state is CheckState.FAILED
    assert len(record.evidence.compliant) == 11


def test_check_exception_becomes_error_and_run_continues() -> None:
    def broken(check: Check, env: Environment) -> None:
        raise RuntimeError("kaboom")

    db = make_db({"one": [("a-check", broken), ("b-check", passing)]})
    result = run_checks(db, "common")
    states = _states(result)
    assert states == {"a-check": CheckState.ERROR, "b-check": CheckState.PASSED}
    record = result.get("a-check")
    assert "kaboom" in record.failure_reason
    assert record.evidence.non_compliant[0].object_type == CHECK_ERROR_TYPE


def test_in_body_skip() -> None:
    db = make_db({"one": [("a-check", lambda c, e: c.skip("no operators installed"))]})
    record = run_checks(db, "common").records[0]
    assert record.state is CheckState.SKIPPED
    assert record.skip_reason == "no operators installed"


def test_skip_predicates_run_before_function() -> None:
    db = make_db({"one": [("a-check", lambda c, e: pytest.fail("should be skipped"))]})
    db.get("a-check").with_skip_check(lambda env: (not env.resources("pods"), "no pods"))
    record = run_checks(db, "common", environment=Environment({"pods": []})).records[0]
    assert record.state is CheckState.SKIPPED
    assert record.skip_reason == "no pods"


def test_before_each_failure_errors_rest_of_group_only() -> None:
    calls: list[str] = []

    def before_each(check: Check, env: Environment) -> None:
        calls.append(check.id)
        if check.id == "b-check":
            raise RuntimeError("cannot refresh")

    db = make_db(
        {
            "one": [("a-check", passing), ("b-check", passing), ("c-check", passing)],
            "two": [("d-check", passing)],
        }
    )
    db.group("one").with_before_each(before_each)
    result = run_checks(db, "common")
    assert _states(result) == {
        "a-check": CheckState.PASSED,
        "b-check": CheckState.ERROR,
        "c-check": CheckState.ERROR,
        "d-check": CheckState.PASSED,
    }
    assert calls == ["a-check", "b-check"]
    assert any("before_each" in err for err in result.errors)


def test_before_each_precedes_skip_evaluation() -> None:
    env = Environment({"pods": []})
    events: list[str] = []

    def before_each(check: Check, e: Environment) -> None:
        events.append("before_each")

    def pred(e: Environment) -> tuple[bool, str]:
        events.append("skip")
        return False, ""

    def fn(check: Check, e: Environment) -> None:
        events.append("fn")

    db = make_db({"one": [("a-check", fn)]})
    db.group("one").with_before_each(before_each)
    db.get("a-check").with_skip_check(pred)
    run_checks(db, "common", environment=env)
    assert events == ["before_each", "skip", "fn"]


def test_after_each_failure_keeps_current_state_and_errors_the_rest() -> None:
    def after_each(check: Check, env: Environment) -> None:
        if check.id == "a-check":
            raise RuntimeError("teardown broke")

    db = make_db({"one": [("a-check", failing), ("b-check", passing)]})
    db.group("one").with_after_each(after_each)
    result = run_checks(db, "common")
    assert _states(result) == {"a-check": CheckState.FAILED, "b-check": CheckState.ERROR}
    assert "after_each" in result.get("b-check").failure_reason
    assert "non-compliant" in result.get("a-check").failure_reason


def test_before_all_failure_errors_whole_group() -> None:
    def before_all(checks: list[Check], env: Environment) -> None:
        raise RuntimeError("no cluster")

    db = make_db({"one": [("a-check", passing), ("b-check", passing)], "two": [("c-check", passing)]})
    db.group("one").with_before_all(before_all)
    states = _states(run_checks(db, "common"))
    assert states["a-check"] is CheckState.ERROR
    assert states["b-check"] is CheckState.ERROR
    assert states["c-check"] is CheckState.PASSED


def test_after_all_failure_is_reported_not_fatal() -> None:
    def after_all(checks: list[Check], env: Environment) -> None:
        raise RuntimeError("cleanup")

    db = make_db({"one": [("a-check", passing)]})
    db.group("one").with_after_all(after_all)
    result = run_checks(db, "common")
    assert result.records[0].state is CheckState.PASSED
    assert any("after_all" in err for err in result.errors)


def test_refresh_hook_updates_snapshot_per_check() -> None:
    counter = {"n": 0}

    def loader() -> dict[str, object]:
        counter["n"] += 1
        return {"generation": counter["n"]}

    seen: list[int] = []

    def record(check: Check, env: Environment) -> None:
        seen.append(env["generation"])

    db = make_db({"one": [("a-check", record), ("b-check", record)]})
    db.group("one").refresh_environment_each()
    run_checks(db, "common", environment=Environment(loader=loader))
    assert seen == [2, 3]


def test_recording_result_lines_in_run_log(tmp_path: Path) -> None:
    db = make_db({"one": [("a-check", passing), ("b-check", failing)]})
    with EventLog("run-x", stream=io.StringIO()) as log:
        log.open_file(tmp_path / "certctl.log")
        run_checks(db, "common", log=log)
    text = (tmp_path / "certctl.log").read_text(encoding="utf-8")
    assert '[a-check] Recording result "PASSED"' in text
    assert '[b-check] Recording result "FAILED"' in text


def test_db_can_be_run_again_with_fresh_state() -> None:
    calls: list[str] = []

    def tracked(check: Check, env: Environment) -> None:
        calls.append(check.id)
        passing(check, env)

    db = make_db({"one": [("a-check", tracked), ("b-check", failing)]})
    first = run_checks(db, "common")
    second = run_checks(db, "a-check")
    assert calls == ["a-check", "a-check"]
    assert [r.state for r in first.records] == [CheckState.PASSED, CheckState.FAILED]
    assert [r.id for r in second.records] == ["a-check"]
    assert len(second.records[0].evidence.compliant) == 1
    assert len(first.records[0].evidence.compliant) == 1
    assert second.records[0].captured_output.count("Recording result") == 1


class _BackwardsClock(FakeClock):
    def now(self) -> datetime:
        return self.base - timedelta(seconds=self.ticks)


def test_durations_use_monotonic_time_when_wall_clock_steps_back() -> None:
    db = make_db({"one": [("a-check", passing), ("b-check", failing)]})
    result = run_checks(db, "common", clock=_BackwardsClock(step=0.5))
    for record in result.records:
        assert record.end_time < record.start_time
        assert record.duration_seconds == pytest.approx(0.5)
    claim = build_claim(result, db.catalog)
    assert claim["claim"]["results"]["a-check"]["duration"] == pytest.approx(0.5)

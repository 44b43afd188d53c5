"""Sequential check scheduler.

Groups run in registration order and so do the checks inside them. Per check
the order is fixed: ``before_each`` hook, skip policy, check function, result
classification, ``after_each`` hook. A single global budget bounds the run;
it is checked before every group and every check, and once exceeded no
further check starts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.clock import Clock
from ..core.logging import EventLog, null_log
from ..environment import Environment
from ..errors import CheckAborted, CheckSkipped
from ..labels import LabelExpression, parse_label_expression
from .evidence import CHECK_ERROR_TYPE, ERROR_FIELD, Evidence, ReportObject
from .group import CheckGroup
from .model import Check, CheckState
from .skips import should_skip

if TYPE_CHECKING:
    from .registry import ChecksDB

TIMEOUT_REASON = "global time-out"
SIGINT_REASON = "SIGINT"


class AbortFlag:
    """Set-once stop signal shared by the scheduler and check bodies."""

    def __init__(self) -> None:
        self._reason: str | None = None

    def set(self, reason: str) -> None:
        if self._reason is None:
            self._reason = reason or "aborted"

    @property
    def is_set(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> str:
        return self._reason or ""


@dataclass(frozen=True)
class CheckRecord:
    id: str
    suite: str
    state: CheckState
    tags: tuple[str, ...]
    skip_reason: str
    failure_reason: str
    start_time: datetime | None
    end_time: datetime | None
    duration_seconds: float
    evidence: Evidence
    captured_output: str

    @classmethod
    def from_check(cls, check: Check) -> CheckRecord:
        return cls(
            id=check.id,
            suite=check.suite,
            state=check.state,
            tags=check.tags,
            skip_reason=check.skip_reason,
            failure_reason=check.failure_reason,
            start_time=check.start_time,
            end_time=check.end_time,
            duration_seconds=check.duration_seconds,
            evidence=check.evidence,
            captured_output=check.captured_output,
        )

    @property
    def evidence_recorded(self) -> bool:
        return not self.evidence.is_empty


@dataclass
class RunResult:
    expression: str
    started_at: datetime
    finished_at: datetime | None = None
    timeout_seconds: float | None = None
    records: list[CheckRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    timed_out: bool = False
    aborted: bool = False
    abort_reason: str = ""

    @property
    def selected(self) -> int:
        return len(self.records)

    def count(self, state: CheckState) -> int:
        return sum(1 for record in self.records if record.state is state)

    @property
    def has_failures(self) -> bool:
        return any(record.state in {CheckState.FAILED, CheckState.ERROR} for record in self.records)

    def suites(self) -> list[str]:
        return list(dict.fromkeys(record.suite for record in self.records))

    def get(self, check_id: str) -> CheckRecord | None:
        return next((record for record in self.records if record.id == check_id), None)


class Scheduler:
    def __init__(
        self,
        db: ChecksDB,
        expression: LabelExpression | str,
        *,
        timeout: float | None = None,
        environment: Environment | None = None,
        log: EventLog | None = None,
        clock: Clock | None = None,
        abort: AbortFlag | None = None,
    ) -> None:
        self.db = db
        self.expression = parse_label_expression(expression) if isinstance(expression, str) else expression
        self.timeout = timeout
        self.env = environment if environment is not None else Environment({})
        self.log = log or null_log()
        self.clock = clock or Clock()
        self.abort = abort or AbortFlag()
        self._deadline: float | None = None
        self._result: RunResult | None = None

    @property
    def result(self) -> RunResult:
        if self._result is None:
            raise RuntimeError("scheduler has not run")
        return self._result

    def run(self) -> RunResult:
        self._result = RunResult(expression=str(self.expression), started_at=self.clock.now(), timeout_seconds=self.timeout)
        if self.timeout is not None:
            self._deadline = self.clock.monotonic() + self.timeout
        self.log.info("runner", "start", f"running checks matching labels expression {str(self.expression)!r}")
        plan = [(group, [check for check in group.checks if self.expression.matches(check.tags)]) for group in self.db]
        plan = [(group, selected) for group, selected in plan if selected]
        for _, selected in plan:
            for check in selected:
                check.reset()
                check.bind_log(self.log)
        for group, selected in plan:
            self._run_group(group, selected)
        result = self.result
        result.finished_at = self.clock.now()
        result.aborted = self.abort.is_set
        result.abort_reason = self.abort.reason
        if result.timed_out:
            self.log.warn("runner", "timeout", "global time-out exceeded; remaining checks were not started")
        elif result.aborted:
            self.log.warn("runner", "abort", f"run aborted: {result.abort_reason}")
        self.log.info(
            "runner",
            "finish",
            selected=result.selected,
            passed=result.count(CheckState.PASSED),
            failed=result.count(CheckState.FAILED),
            skipped=result.count(CheckState.SKIPPED),
            errored=result.count(CheckState.ERROR),
        )
        return result

    def _should_stop(self) -> bool:
        if self.abort.is_set:
            return True
        if self._deadline is not None and self.clock.monotonic() >= self._deadline:
            self.result.timed_out = True
            self.abort.set(TIMEOUT_REASON)
            return True
        return False

    def _run_group(self, group: CheckGroup, selected: list[Check]) -> None:
        if self._should_stop():
            self._skip_remaining(selected)
            return
        self.log.info("runner", "group", f"running group {group.name!r}", checks=len(selected))
        if group.before_all_fn is not None:
            try:
                group.before_all_fn(selected, self.env)
            except Exception as exc:  # noqa: BLE001
                reason = f"before_all hook of group {group.name!r} failed: {exc}"
                self._group_error(reason)
                for check in selected:
                    self._error(check, reason)
                return
        for idx, check in enumerate(selected):
            if self._should_stop():
                self._skip_remaining(selected[idx:])
                break
            failure = self._run_check(group, check)
            if failure:
                self._error_remaining(selected[idx + 1 :], failure)
                break
        if group.after_all_fn is not None:
            try:
                group.after_all_fn(selected, self.env)
            except Exception as exc:  # noqa: BLE001
                self._group_error(f"after_all hook of group {group.name!r} failed: {exc}")

    def _run_check(self, group: CheckGroup, check: Check) -> str:
        """Run one check; a non-empty hook failure errors the rest of its group."""
        self._start(check)
        if group.before_each_fn is not None:
            try:
                group.before_each_fn(check, self.env)
            except Exception as exc:  # noqa: BLE001
                reason = f"before_each hook of group {group.name!r} failed: {exc}"
                self._group_error(reason)
                self._error(check, reason)
                return reason
        skip, reason = should_skip(check.skip_checks, check.skip_mode, self.env)
        if skip:
            self._finish(check, CheckState.SKIPPED, reason)
        else:
            self._invoke(check)
        if group.after_each_fn is not None:
            try:
                group.after_each_fn(check, self.env)
            except Exception as exc:  # noqa: BLE001
                message = f"after_each hook of group {group.name!r} failed: {exc}"
                self._group_error(message)
                return message
        return ""

    def _invoke(self, check: Check) -> None:
        check.mark_invoked()
        try:
            check.fn(check, self.env)
        except CheckSkipped as exc:
            self._finish(check, CheckState.SKIPPED, exc.reason)
            return
        except CheckAborted as exc:
            self.abort.set(exc.reason)
            self._error(check, f"check aborted the run: {exc.reason}")
            return
        except KeyboardInterrupt:
            self.abort.set(SIGINT_REASON)
            self._error(check, f"check interrupted: {SIGINT_REASON}")
            return
        except Exception as exc:  # noqa: BLE001
            self._error(check, f"check function raised {type(exc).__name__}: {exc}")
            return
        if check.evidence.has_failures:
            self._finish(check, CheckState.FAILED, f"{len(check.evidence.non_compliant)} non-compliant object(s)")
            return
        if check.evidence.is_empty:
            check.log_warn("check recorded no evidence; classified as passed")
        self._finish(check, CheckState.PASSED)

    def _finish(self, check: Check, state: CheckState, reason: str = "") -> None:
        if check.start_time is None:
            self._start(check)
        check.end_time = self.clock.now()
        check.end_monotonic = self.clock.monotonic()
        check.transition(state, reason)
        if state is CheckState.SKIPPED and reason:
            check.log_info("skipped: %s", reason)
        check.log_info('Recording result "%s"', state.result_tag)
        self.result.records.append(CheckRecord.from_check(check))

    def _start(self, check: Check) -> None:
        check.start_time = self.clock.now()
        check.start_monotonic = self.clock.monotonic()

    def _error(self, check: Check, reason: str) -> None:
        check.add_non_compliant(ReportObject.new(reason, CHECK_ERROR_TYPE, False).add_field(ERROR_FIELD, reason))
        check.log_error("%s", reason)
        self._finish(check, CheckState.ERROR, reason)

    def _error_remaining(self, checks: list[Check], reason: str) -> None:
        for check in checks:
            self._error(check, reason)

    def _skip_remaining(self, checks: list[Check]) -> None:
        for check in checks:
            self._finish(check, CheckState.SKIPPED, self.abort.reason)

    def _group_error(self, message: str) -> None:
        self.result.errors.append(message)
        self.log.error("runner", "hook", message)


def run_checks(
    db: ChecksDB,
    expression: LabelExpression | str,
    *,
    timeout: float | None = None,
    environment: Environment | None = None,
    log: EventLog | None = None,
    clock: Clock | None = None,
    abort: AbortFlag | None = None,
) -> RunResult:
    """Run every check of ``db`` matching ``expression`` and classify it."""
    scheduler = Scheduler(
        db,
        expression,
        timeout=timeout,
        environment=environment,
        log=log,
        clock=clock,
        abort=abort,
    )
    return scheduler.run()


__all__ = [
    "AbortFlag",
    "CheckRecord",
    "RunResult",
    "SIGINT_REASON",
    "Scheduler",
    "TIMEOUT_REASON",
    "run_checks",
]

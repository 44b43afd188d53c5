from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable

from ..errors import CheckAborted, CheckSkipped, InvalidTransitionError
from .evidence import Evidence, ReportObject

if TYPE_CHECKING:
    from ..core.logging import EventLog
    from ..environment import Environment


class CheckState(str, Enum):
    NOT_RUN = "not_run"
    SKIPPED = "skipped"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self is not CheckState.NOT_RUN

    @property
    def tag(self) -> str:
        return self.value.upper()

    @property
    def result_tag(self) -> str:
        """Word written to the run log; an errored check is recorded as FAILED."""
        return "FAILED" if self is CheckState.ERROR else self.tag


class SkipMode(str, Enum):
    ANY = "any"
    ALL = "all"


SkipPredicate = Callable[["Environment"], "tuple[bool, str]"]
CheckFn = Callable[["Check", "Environment"], Any]


class Check:
    """One compliance assertion and its mutable run state.

    Only the scheduler moves a check through its states; the check body gets
    the instance to add evidence, log, and end itself early via ``skip`` or
    ``abort``.
    """

    def __init__(
        self,
        check_id: str,
        fn: CheckFn,
        *,
        suite: str = "",
        tags: Iterable[str] = (),
        skip_checks: Iterable[SkipPredicate] = (),
        skip_mode: SkipMode | None = None,
    ) -> None:
        self.id = str(check_id).strip()
        self.suite = str(suite).strip()
        self.fn = fn
        base = [*tags, self.suite, self.id]
        self.tags: tuple[str, ...] = tuple(dict.fromkeys(t for t in (str(t).strip() for t in base) if t))
        self.skip_checks: list[SkipPredicate] = list(skip_checks)
        self.skip_mode = skip_mode
        self._event_log: EventLog | None = None
        self.reset()

    def __repr__(self) -> str:
        return f"Check(id={self.id!r}, suite={self.suite!r}, state={self.state.value})"

    def with_skip_check(self, *predicates: SkipPredicate) -> Check:
        self.skip_checks.extend(predicates)
        return self

    def with_skip_mode_any(self) -> Check:
        self.skip_mode = SkipMode.ANY
        return self

    def with_skip_mode_all(self) -> Check:
        self.skip_mode = SkipMode.ALL
        return self

    # evidence

    def add_compliant(self, *objects: ReportObject) -> None:
        self.evidence.add_compliant(*objects)

    def add_non_compliant(self, *objects: ReportObject) -> None:
        self.evidence.add_non_compliant(*objects)

    def record(self, compliant: Iterable[ReportObject] = (), non_compliant: Iterable[ReportObject] = ()) -> None:
        self.evidence.extend(compliant, non_compliant)

    def skip(self, reason: str) -> None:
        raise CheckSkipped(reason)

    def abort(self, reason: str) -> None:
        raise CheckAborted(reason)

    # logging

    def bind_log(self, log: EventLog | None) -> None:
        self._event_log = log

    def _log(self, level: str, msg: str, args: tuple[object, ...]) -> None:
        text = msg % args if args else msg
        self._log_lines.append(f"{level.upper():<5} [{self.id}] {text}")
        if self._event_log is not None:
            self._event_log.log_event(level, "checks", "check", f"[{self.id}] {text}")

    def log_debug(self, msg: str, *args: object) -> None:
        self._log("debug", msg, args)

    def log_info(self, msg: str, *args: object) -> None:
        self._log("info", msg, args)

    def log_warn(self, msg: str, *args: object) -> None:
        self._log("warn", msg, args)

    def log_error(self, msg: str, *args: object) -> None:
        self._log("error", msg, args)

    @property
    def captured_output(self) -> str:
        return "\n".join(self._log_lines)

    # state machine

    def reset(self) -> None:
        """Drop all run state so the check can be scheduled again."""
        self.state = CheckState.NOT_RUN
        self.evidence = Evidence()
        self.skip_reason = ""
        self.failure_reason = ""
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.start_monotonic: float | None = None
        self.end_monotonic: float | None = None
        self._log_lines: list[str] = []
        self._invoked = False

    def transition(self, state: CheckState, reason: str = "") -> None:
        if self.state.terminal:
            raise InvalidTransitionError(f"{self.id}: cannot move from {self.state.value} to {state.value}")
        if not state.terminal:
            raise InvalidTransitionError(f"{self.id}: {state.value} is not a terminal state")
        self.state = state
        if state is CheckState.SKIPPED:
            self.skip_reason = reason
        elif reason:
            self.failure_reason = reason

    def mark_invoked(self) -> None:
        if self._invoked:
            raise InvalidTransitionError(f"{self.id}: check function already invoked")
        self._invoked = True

    @property
    def duration_seconds(self) -> float:
        if self.start_monotonic is None or self.end_monotonic is None:
            return 0.0
        return max(0.0, self.end_monotonic - self.start_monotonic)


__all__ = ["Check", "CheckFn", "CheckState", "SkipMode", "SkipPredicate"]

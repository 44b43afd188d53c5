from __future__ import annotations

from .evidence import Evidence, ReportObject
from .group import CheckGroup
from .model import Check, CheckState, SkipMode
from .registry import ChecksDB, load_suites
from .runner import AbortFlag, CheckRecord, RunResult, Scheduler, run_checks
from .skips import should_skip, skip_if_all_empty, skip_if_empty

__all__ = [
    "AbortFlag",
    "Check",
    "CheckGroup",
    "CheckRecord",
    "CheckState",
    "ChecksDB",
    "Evidence",
    "ReportObject",
    "RunResult",
    "Scheduler",
    "SkipMode",
    "load_suites",
    "run_checks",
    "should_skip",
    "skip_if_all_empty",
    "skip_if_empty",
]

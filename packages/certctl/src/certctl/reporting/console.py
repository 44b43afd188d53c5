from __future__ import annotations

from dataclasses import dataclass

from ..checks.model import CheckState
from ..checks.runner import RunResult

TABLE_RULE = "-" * 59
_HEADER_FMT = "| {:<27} {:<9} {:<9} {} |"
_ROW_FMT = "| {:<25} {:>8} {:>9} {:>10} |"


@dataclass(frozen=True)
class SuiteSummary:
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errored: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped + self.errored

    def add(self, state: CheckState) -> SuiteSummary:
        return SuiteSummary(
            passed=self.passed + (state is CheckState.PASSED),
            failed=self.failed + (state is CheckState.FAILED),
            skipped=self.skipped + (state is CheckState.SKIPPED),
            errored=self.errored + (state is CheckState.ERROR),
        )

    def __add__(self, other: SuiteSummary) -> SuiteSummary:
        return SuiteSummary(
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
            errored=self.errored + other.errored,
        )

    def to_dict(self) -> dict[str, int]:
        return {"passed": self.passed, "failed": self.failed, "skipped": self.skipped, "errored": self.errored}


def summarize(result: RunResult) -> dict[str, SuiteSummary]:
    """Fold terminal check states into per-suite counters, in run order."""
    out: dict[str, SuiteSummary] = {}
    for record in result.records:
        out[record.suite] = out.get(record.suite, SuiteSummary()).add(record.state)
    return out


def total(summaries: dict[str, SuiteSummary]) -> SuiteSummary:
    acc = SuiteSummary()
    for summary in summaries.values():
        acc = acc + summary
    return acc


def render_results_table(summaries: dict[str, SuiteSummary]) -> str:
    """Fixed-width SUITE/PASSED/FAILED/SKIPPED table; errored checks count as failed."""
    lines = ["", TABLE_RULE, _HEADER_FMT.format("SUITE", "PASSED", "FAILED", "SKIPPED"), TABLE_RULE]
    for name, summary in summaries.items():
        lines.append(_ROW_FMT.format(name, summary.passed, summary.failed + summary.errored, summary.skipped))
        lines.append(TABLE_RULE)
    grand = total(summaries)
    lines.append(_ROW_FMT.format("TOTAL", grand.passed, grand.failed + grand.errored, grand.skipped))
    lines.append(TABLE_RULE)
    lines.append("")
    return "\n".join(lines)


def render_failed_checks_log(result: RunResult) -> str:
    blocks: list[str] = []
    for record in result.records:
        if record.state not in {CheckState.FAILED, CheckState.ERROR}:
            continue
        header = f"| LOG ({record.id}) |"
        blocks.append("-" * len(header))
        blocks.append(header)
        blocks.append("-" * len(header))
        blocks.append(record.captured_output or "Empty log output")
    return "\n".join(blocks)


def render_run_warnings(result: RunResult) -> list[str]:
    warnings: list[str] = []
    if result.timed_out:
        warnings.append("WARNING: global time-out exceeded; checks not started in time were marked skipped")
    elif result.aborted:
        warnings.append(f"WARNING: run aborted ({result.abort_reason}); remaining checks were marked skipped")
    for error in result.errors:
        warnings.append(f"WARNING: {error}")
    unrecorded = [r.id for r in result.records if r.state is CheckState.PASSED and not r.evidence_recorded]
    if unrecorded:
        warnings.append(f"WARNING: passed without recording evidence: {', '.join(unrecorded)}")
    return warnings


__all__ = [
    "SuiteSummary",
    "TABLE_RULE",
    "render_failed_checks_log",
    "render_results_table",
    "render_run_warnings",
    "summarize",
    "total",
]

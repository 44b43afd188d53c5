from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .claim import claim_results

NOT_FOUND = "not found"
_DIFF_ROW = "{:<60}{:<10}{}"
_SUMMARY_ROW = "{:<15}{:<20}{}"


@dataclass(frozen=True)
class StatusSummary:
    passed: int = 0
    skipped: int = 0
    failed: int = 0
    errored: int = 0

    @classmethod
    def from_states(cls, states: dict[str, str]) -> StatusSummary:
        values = list(states.values())
        return cls(
            passed=values.count("passed"),
            skipped=values.count("skipped"),
            failed=values.count("failed"),
            errored=values.count("error"),
        )

    def to_dict(self) -> dict[str, int]:
        return {"passed": self.passed, "skipped": self.skipped, "failed": self.failed, "errored": self.errored}


@dataclass(frozen=True)
class ResultDifference:
    name: str
    claim1: str
    claim2: str


@dataclass(frozen=True)
class DiffReport:
    claim1_summary: StatusSummary
    claim2_summary: StatusSummary
    differences: list[ResultDifference] = field(default_factory=list)

    @property
    def different(self) -> int:
        return len(self.differences)

    def to_dict(self) -> dict[str, object]:
        return {
            "claimFile1ResultsSummary": self.claim1_summary.to_dict(),
            "claimFile2ResultsSummary": self.claim2_summary.to_dict(),
            "resultsDifferences": [
                {"name": d.name, "claim1Result": d.claim1, "claim2Result": d.claim2} for d in self.differences
            ],
            "differentTestCasesResults": self.different,
        }

    def render(self) -> str:
        lines = [
            "RESULTS SUMMARY",
            "---------------",
            _SUMMARY_ROW.format("STATUS", "# in CLAIM-1", "# in CLAIM-2"),
        ]
        for status in ("passed", "skipped", "failed", "errored"):
            lines.append(
                _SUMMARY_ROW.format(
                    status, getattr(self.claim1_summary, status), getattr(self.claim2_summary, status)
                ).rstrip()
            )
        lines += ["", "RESULTS DIFFERENCES", "-------------------"]
        if not self.differences:
            lines.append("<none>")
            return "\n".join(lines)
        lines.append(_DIFF_ROW.format("TEST CASE NAME", "CLAIM-1", "CLAIM-2"))
        for diff in self.differences:
            lines.append(_DIFF_ROW.format(diff.name, diff.claim1, diff.claim2))
        return "\n".join(lines)


def _states(claim: dict[str, Any]) -> dict[str, str]:
    return {check_id: str(row["state"]) for check_id, row in claim_results(claim).items()}


def compare_claims(claim1: dict[str, Any], claim2: dict[str, Any]) -> DiffReport:
    """Per-check state differences between two claims, ordered by check id."""
    states1 = _states(claim1)
    states2 = _states(claim2)
    differences = []
    for name in sorted(set(states1) | set(states2)):
        left = states1.get(name, NOT_FOUND)
        right = states2.get(name, NOT_FOUND)
        if left == right:
            continue
        differences.append(ResultDifference(name=name, claim1=left, claim2=right))
    return DiffReport(
        claim1_summary=StatusSummary.from_states(states1),
        claim2_summary=StatusSummary.from_states(states2),
        differences=differences,
    )


__all__ = ["DiffReport", "NOT_FOUND", "ResultDifference", "StatusSummary", "compare_claims"]

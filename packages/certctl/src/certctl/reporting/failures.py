"""Failed checks of a claim, grouped by suite, with their non-compliant objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from ..checks.evidence import REASON_FOR_NON_COMPLIANCE
from .claim import claim_results


@dataclass(frozen=True)
class NonCompliantObject:
    type: str
    reason: str
    spec: tuple[tuple[str, str], ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "reason": self.reason, "spec": dict(self.spec)}


@dataclass(frozen=True)
class FailedCheck:
    name: str
    description: str
    non_compliant_objects: tuple[NonCompliantObject, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "nonCompliantObjects": [obj.to_dict() for obj in self.non_compliant_objects],
        }


@dataclass(frozen=True)
class FailedSuite:
    name: str
    failures: list[FailedCheck] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "failures": [f.to_dict() for f in self.failures]}


def _non_compliant_objects(row: dict[str, Any]) -> tuple[NonCompliantObject, ...]:
    out = []
    for obj in row["checkDetails"]["NonCompliantObjectsOut"]:
        pairs = list(zip(obj["ObjectFieldsKeys"], obj["ObjectFieldsValues"]))
        reason = ""
        if pairs and pairs[0][0] == REASON_FOR_NON_COMPLIANCE:
            reason = pairs.pop(0)[1]
        out.append(NonCompliantObject(type=obj["ObjectType"], reason=reason, spec=tuple(pairs)))
    return tuple(out)


def collect_failures(claim: dict[str, Any], suites: Iterable[str] | None = None) -> list[FailedSuite]:
    wanted = {s.strip() for s in suites if s.strip()} if suites is not None else None
    by_suite: dict[str, FailedSuite] = {}
    for check_id, row in claim_results(claim).items():
        suite = row["testID"]["suite"]
        if wanted is not None and suite not in wanted:
            continue
        if row["state"] != "failed":
            continue
        target = by_suite.setdefault(suite, FailedSuite(name=suite))
        target.failures.append(
            FailedCheck(
                name=check_id,
                description=row["catalogInfo"]["description"],
                non_compliant_objects=_non_compliant_objects(row),
            )
        )
    return [by_suite[name] for name in sorted(by_suite)]


def render_failures_text(suites: list[FailedSuite]) -> str:
    lines: list[str] = []
    for suite in suites:
        lines.append(f"Test Suite: {suite.name}")
        for check in suite.failures:
            lines.append(f"  Test Case: {check.name}")
            lines.append(f"    Description: {check.description}")
            lines.append("    Failure reasons:")
            for idx, obj in enumerate(check.non_compliant_objects, start=1):
                lines.append(f"      {idx:2d} - Type: {obj.type}, Reason: {obj.reason}")
                lines.append("           " + ", ".join(f"{k}: {v}" for k, v in obj.spec))
    return "\n".join(lines)


def failures_payload(suites: list[FailedSuite]) -> dict[str, object]:
    return {"testSuites": [suite.to_dict() for suite in suites]}


__all__ = [
    "FailedCheck",
    "FailedSuite",
    "NonCompliantObject",
    "collect_failures",
    "failures_payload",
    "render_failures_text",
]

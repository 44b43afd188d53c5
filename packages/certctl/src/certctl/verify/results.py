"""Compare the results recorded in a run log against a reference template.

The log is scanned for ``[<check-id>] ... Recording result "<RESULT>"`` lines;
when one id is recorded several times the last line wins. The template is a
YAML document of the form::

    testCases:
      pass: [...]
      fail: [...]
      skip: [...]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from ..contracts import EXPECTED_RESULTS_SCHEMA, validate
from ..core.yaml_utils import dump_yaml, load_yaml
from ..errors import ConfigError, ReportValidationError

TEMPLATE_FILE_NAME = "expected_results.yaml"
DEFAULT_LOG_FILE = "certctl.log"

RESULT_PASS = "PASSED"
RESULT_SKIP = "SKIPPED"
RESULT_FAIL = "FAILED"
RESULT_MISSING = "MISSING"

BUCKETS = (("pass", RESULT_PASS), ("skip", RESULT_SKIP), ("fail", RESULT_FAIL))

MISMATCH_RULE = "-" * 96

_RECORDING = re.compile(r'.*\[(.*?)\]\s+Recording result\s+"(.*?)"')


@dataclass(frozen=True)
class Mismatch:
    check_id: str
    expected: str
    actual: str


def parse_results_lines(lines: Iterable[str]) -> dict[str, str]:
    results: dict[str, str] = {}
    for line in lines:
        match = _RECORDING.match(line)
        if match is not None:
            results[match.group(1)] = match.group(2)
    return results


def parse_results_log(path: Path) -> dict[str, str]:
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            return parse_results_lines(f)
    except OSError as exc:
        raise ConfigError(f"could not open log file {str(path)!r}: {exc}") from exc


def expected_from_template(payload: Mapping[str, object]) -> dict[str, str]:
    validate(EXPECTED_RESULTS_SCHEMA, payload)
    cases = payload["testCases"] or {}
    expected: dict[str, str] = {}
    for bucket, result in BUCKETS:
        for check_id in cases.get(bucket) or []:
            expected[str(check_id)] = result
    return expected


def load_expected_results(path: Path) -> dict[str, str]:
    if not path.is_file():
        raise ConfigError(f"could not open template file {str(path)!r}")
    payload = load_yaml(path)
    if not isinstance(payload, dict):
        raise ReportValidationError(f"template file {str(path)!r}: root must be a mapping with `testCases`")
    return expected_from_template(payload)


def compare_results(actual: Mapping[str, str], expected: Mapping[str, str]) -> list[Mismatch]:
    """Every id whose actual and expected results differ, ordered by id.

    Ids present on only one side are reported with ``MISSING`` on the other.
    """
    mismatches = []
    for check_id in sorted(set(actual) | set(expected)):
        want = expected.get(check_id, RESULT_MISSING)
        got = actual.get(check_id, RESULT_MISSING)
        if want != got:
            mismatches.append(Mismatch(check_id=check_id, expected=want, actual=got))
    return mismatches


def render_mismatch_table(mismatches: Iterable[Mismatch]) -> str:
    lines = ["", MISMATCH_RULE, f"| {'TEST_CASE':<58} {'EXPECTED_RESULT':<19} {'ACTUAL_RESULT'} |", MISMATCH_RULE]
    for row in mismatches:
        lines.append(f"| {row.check_id:<54} {row.expected:>19} {row.actual:>17} |")
        lines.append(MISMATCH_RULE)
    return "\n".join(lines)


def generate_template(actual: Mapping[str, str]) -> dict[str, dict[str, list[str]]]:
    buckets: dict[str, list[str]] = {"pass": [], "fail": [], "skip": []}
    by_result = {result: bucket for bucket, result in BUCKETS}
    for check_id in sorted(actual):
        result = actual[check_id]
        bucket = by_result.get(result)
        if bucket is None:
            raise ReportValidationError(f"unknown test case result {result!r} for `{check_id}`")
        buckets[bucket].append(check_id)
    return {"testCases": buckets}


def render_template(template: Mapping[str, object]) -> str:
    return dump_yaml(dict(template))


def write_template(template: Mapping[str, object], path: Path | None = None) -> Path:
    validate(EXPECTED_RESULTS_SCHEMA, dict(template))
    target = path or Path(TEMPLATE_FILE_NAME)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_template(template), encoding="utf-8")
    return target


__all__ = [
    "DEFAULT_LOG_FILE",
    "MISMATCH_RULE",
    "Mismatch",
    "RESULT_FAIL",
    "RESULT_MISSING",
    "RESULT_PASS",
    "RESULT_SKIP",
    "TEMPLATE_FILE_NAME",
    "compare_results",
    "expected_from_template",
    "generate_template",
    "load_expected_results",
    "parse_results_lines",
    "parse_results_log",
    "render_mismatch_table",
    "render_template",
    "write_template",
]

"""The claim: the machine-readable report of one run.

Serialized with sorted keys and two-space indentation so that writing a
loaded claim reproduces the same bytes.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import __version__
from ..catalog import Catalog
from ..checks.runner import CheckRecord, RunResult
from ..config import RunConfig
from ..contracts import CLAIM_SCHEMA, validate
from ..core.durations import format_duration
from ..core.serialize import dumps_json
from ..errors import ReportValidationError

CLAIM_FORMAT = "v1"


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""


def _result_payload(record: CheckRecord, catalog: Catalog) -> dict[str, Any]:
    entry = catalog.get(record.id)
    return {
        "testID": {"id": record.id, "suite": record.suite, "tags": ",".join(record.tags)},
        "state": record.state.value,
        "skipReason": record.skip_reason,
        "failureReason": record.failure_reason,
        "startTime": _iso(record.start_time),
        "endTime": _iso(record.end_time),
        "duration": round(record.duration_seconds, 6),
        "checkDetails": record.evidence.to_dict(),
        "capturedTestOutput": record.captured_output,
        "evidenceRecorded": record.evidence_recorded,
        "catalogInfo": {
            "description": entry.description if entry else "",
            "remediation": entry.remediation if entry else "",
            "exceptionProcess": entry.exception_process if entry else "",
            "bestPracticeReference": entry.best_practice_reference if entry else "",
        },
        "categoryClassification": (
            {s.value: c.value for s, c in entry.classification.items()} if entry else {}
        ),
    }


def build_claim(result: RunResult, catalog: Catalog, config: RunConfig | None = None) -> dict[str, Any]:
    timeout = config.timeout if config else (format_duration(result.timeout_seconds) if result.timeout_seconds else "")
    payload = {
        "claim": {
            "versions": {"certctl": __version__, "claimFormat": CLAIM_FORMAT},
            "metadata": {
                "runId": config.run_id if config else "",
                "startTime": _iso(result.started_at),
                "endTime": _iso(result.finished_at),
                "labelsFilter": result.expression,
                "timeout": timeout,
                "timedOut": result.timed_out,
                "aborted": result.aborted,
                "abortReason": result.abort_reason,
            },
            "configurations": config.to_payload() if config else {},
            "results": {record.id: _result_payload(record, catalog) for record in result.records},
            "errors": list(result.errors),
        }
    }
    validate(CLAIM_SCHEMA, payload)
    return payload


def render_claim(payload: dict[str, Any]) -> str:
    return dumps_json(payload, pretty=True) + "\n"


def write_claim(path: Path, payload: dict[str, Any]) -> Path:
    validate(CLAIM_SCHEMA, payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_claim(payload), encoding="utf-8")
    return path


def load_claim(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ReportValidationError(f"could not read claim file {str(path)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ReportValidationError(f"claim file {str(path)!r} is not valid JSON: {exc}") from exc
    validate(CLAIM_SCHEMA, payload)
    return payload


def claim_results(payload: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return dict(payload["claim"]["results"])


__all__ = ["CLAIM_FORMAT", "build_claim", "claim_results", "load_claim", "render_claim", "write_claim"]

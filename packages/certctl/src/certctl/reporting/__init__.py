"""Run summaries, the claim artifact and its derived views."""

from __future__ import annotations

from .claim import build_claim, load_claim, render_claim, write_claim
from .compare import DiffReport, compare_claims
from .console import (
    SuiteSummary,
    render_failed_checks_log,
    render_results_table,
    render_run_warnings,
    summarize,
)
from .failures import collect_failures, failures_payload, render_failures_text
from .junit import build_junit, write_junit

__all__ = [
    "DiffReport",
    "SuiteSummary",
    "build_claim",
    "build_junit",
    "collect_failures",
    "compare_claims",
    "failures_payload",
    "load_claim",
    "render_claim",
    "render_failed_checks_log",
    "render_failures_text",
    "render_results_table",
    "render_run_warnings",
    "summarize",
    "write_claim",
    "write_junit",
]

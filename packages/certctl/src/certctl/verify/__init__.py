from __future__ import annotations

from .results import (
    Mismatch,
    compare_results,
    generate_template,
    load_expected_results,
    parse_results_log,
    render_mismatch_table,
    write_template,
)

__all__ = [
    "Mismatch",
    "compare_results",
    "generate_template",
    "load_expected_results",
    "parse_results_log",
    "render_mismatch_table",
    "write_template",
]

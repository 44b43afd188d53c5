from __future__ import annotations

import argparse
from pathlib import Path

from ..exit_codes import ERR_CHECKS_FAILED, OK
from ..verify.results import (
    DEFAULT_LOG_FILE,
    TEMPLATE_FILE_NAME,
    compare_results,
    generate_template,
    load_expected_results,
    parse_results_log,
    render_mismatch_table,
    write_template,
)
from .output import build_base_payload, emit


def configure_check_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("check", help="verify recorded results of a previous run")
    check_sub = p.add_subparsers(dest="check_cmd", required=True)
    results = check_sub.add_parser("results", help="compare a run log against a reference template")
    mode = results.add_mutually_exclusive_group()
    mode.add_argument("--template", help=f"reference YAML template (default: {TEMPLATE_FILE_NAME})")
    mode.add_argument("--generate-template", action="store_true", help="write a template from the log instead")
    results.add_argument("--log-file", default=DEFAULT_LOG_FILE, help=f"run log to scan (default: {DEFAULT_LOG_FILE})")
    results.add_argument("--out", help=f"generated template path (default: ./{TEMPLATE_FILE_NAME})")


def run_check_command(ns: argparse.Namespace, *, as_json: bool) -> int:
    actual = parse_results_log(Path(ns.log_file))
    if ns.generate_template:
        path = write_template(generate_template(actual), Path(ns.out) if ns.out else None)
        if as_json:
            payload = build_base_payload()
            payload["template"] = str(path)
            payload["checks"] = len(actual)
            emit(payload, True)
        else:
            print(f"template written to {path}")
        return OK
    expected = load_expected_results(Path(ns.template or TEMPLATE_FILE_NAME))
    mismatches = compare_results(actual, expected)
    if as_json:
        payload = build_base_payload(status="fail" if mismatches else "ok")
        payload["mismatches"] = [
            {"id": m.check_id, "expected": m.expected, "actual": m.actual} for m in mismatches
        ]
        emit(payload, True)
    elif mismatches:
        print("Expected results DO NOT match actual results")
        print(render_mismatch_table(mismatches))
    else:
        print("Expected results and actual results match")
    return ERR_CHECKS_FAILED if mismatches else OK


__all__ = ["configure_check_parser", "run_check_command"]

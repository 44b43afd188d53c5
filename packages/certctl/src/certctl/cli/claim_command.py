from __future__ import annotations

import argparse
from pathlib import Path

from ..exit_codes import OK
from ..reporting import collect_failures, compare_claims, failures_payload, load_claim, render_failures_text
from .output import emit


def configure_claim_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("claim", help="inspect claim files")
    claim_sub = p.add_subparsers(dest="claim_cmd", required=True)

    show = claim_sub.add_parser("show", help="show parts of a claim file")
    show_sub = show.add_subparsers(dest="show_cmd", required=True)
    failures = show_sub.add_parser("failures", help="failed checks with their non-compliant objects")
    failures.add_argument("-c", "--claim", required=True, help="claim file path")
    failures.add_argument("-s", "--testsuites", help="comma separated suites to include")
    failures.add_argument("-o", "--output", choices=["text", "json"], default="text")

    compare = claim_sub.add_parser("compare", help="per-check result differences of two claim files")
    compare.add_argument("--claim1", required=True, help="first claim file")
    compare.add_argument("--claim2", required=True, help="second claim file")


def run_claim_command(ns: argparse.Namespace, *, as_json: bool) -> int:
    if ns.claim_cmd == "show":
        claim = load_claim(Path(ns.claim))
        suites = ns.testsuites.split(",") if ns.testsuites else None
        failed = collect_failures(claim, suites)
        if as_json or ns.output == "json":
            emit(failures_payload(failed), False)
        else:
            text = render_failures_text(failed)
            if text:
                print(text)
        return OK
    report = compare_claims(load_claim(Path(ns.claim1)), load_claim(Path(ns.claim2)))
    if as_json:
        emit(report.to_dict(), True)
    else:
        print(report.render())
    return OK


__all__ = ["configure_claim_parser", "run_claim_command"]

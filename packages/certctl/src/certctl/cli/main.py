from __future__ import annotations

import argparse
import platform
import sys

from .. import __version__
from ..errors import CertctlError
from ..exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from .claim_command import configure_claim_parser, run_claim_command
from .output import build_base_payload, emit, render_error
from .results_command import configure_check_parser, run_check_command
from .run_command import configure_run_parser, run_run_command


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="certctl", description="Run, report and verify compliance checks.")
    p.add_argument("--version", action="version", version=f"certctl {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON")
    p.add_argument("--quiet", action="store_true", help="do not echo log events to stderr")
    p.add_argument("--run-id", help="run identifier (default: CERTCTL_RUN_ID or a timestamp)")
    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("version", help="print version information")
    configure_run_parser(sub)
    configure_check_parser(sub)
    configure_claim_parser(sub)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        ns = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code) if isinstance(exc.code, int) else ERR_USAGE
    as_json = bool(ns.json)
    try:
        if ns.cmd == "version":
            payload = build_base_payload()
            payload["python_version"] = platform.python_version()
            if as_json:
                emit(payload, True)
            else:
                print(f"certctl {__version__}")
            return OK
        if ns.cmd == "run":
            return run_run_command(ns, as_json=as_json, log_json=bool(ns.log_json), quiet=bool(ns.quiet))
        if ns.cmd == "check":
            return run_check_command(ns, as_json=as_json)
        if ns.cmd == "claim":
            return run_claim_command(ns, as_json=as_json)
        return ERR_USAGE
    except CertctlError as exc:
        print(render_error(as_json=as_json, message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())

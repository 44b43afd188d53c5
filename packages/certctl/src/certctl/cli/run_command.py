from __future__ import annotations

import argparse

from ..checks import load_suites, run_checks
from ..config import RunConfig
from ..core.logging import LEVELS, EventLog
from ..environment import Environment
from ..errors import ConfigError
from ..exit_codes import ERR_CHECKS_FAILED, OK
from ..labels import parse_label_expression
from ..reporting import (
    build_claim,
    render_failed_checks_log,
    render_results_table,
    render_run_warnings,
    summarize,
    write_claim,
    write_junit,
)
from ..reporting.console import total
from .output import build_base_payload, emit


def configure_run_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("run", help="run the checks selected by a labels expression")
    p.add_argument("-l", "--label-filter", dest="labels_filter", help="labels expression selecting checks (default: none)")
    p.add_argument("-t", "--timeout", help="global time budget of the run, e.g. 30m or 1h30m (default: 24h)")
    p.add_argument("-o", "--output-dir", help="directory for claim.json, certctl.log and junit.xml")
    p.add_argument("-c", "--config-file", help="YAML run configuration")
    p.add_argument("-s", "--suite", action="append", dest="suites", help="importable suite module (repeatable)")
    p.add_argument("-e", "--environment", help="environment snapshot file (YAML or JSON)")
    p.add_argument("--enable-xml", action="store_true", default=None, help="also write a JUnit XML report")
    p.add_argument("--log-level", choices=sorted(LEVELS, key=LEVELS.__getitem__))
    p.add_argument("--list", action="store_true", help="print the selected check ids and exit")


def run_run_command(ns: argparse.Namespace, *, as_json: bool, log_json: bool, quiet: bool) -> int:
    config = RunConfig.from_args(
        labels_filter=ns.labels_filter,
        timeout=ns.timeout,
        output_dir=ns.output_dir,
        suites=ns.suites,
        environment_file=ns.environment,
        enable_xml=ns.enable_xml,
        log_json=log_json,
        log_level=ns.log_level,
        run_id=ns.run_id,
        config_file=ns.config_file,
    )
    expression = parse_label_expression(config.labels_filter)
    if not config.suites:
        raise ConfigError("no suite modules configured: pass --suite or set `suites` in the config file")
    db = load_suites(config.suites)
    if ns.list:
        selected = db.filter_check_ids(expression)
        if as_json:
            payload = build_base_payload(run_id=config.run_id)
            payload["labels_filter"] = config.labels_filter
            payload["checks"] = selected
            emit(payload, True)
        else:
            for check_id in selected:
                print(check_id)
        return OK
    environment = Environment.from_file(config.environment_file) if config.environment_file else Environment({})
    with EventLog(config.run_id, log_json=config.log_json, level=config.log_level, quiet=quiet) as log:
        log.open_file(config.log_path)
        log.info("cli", "run", output_dir=str(config.output_dir), suites=",".join(config.suites), timeout=config.timeout)
        result = run_checks(
            db,
            expression,
            timeout=config.timeout_seconds,
            environment=environment,
            log=log,
        )
        claim = build_claim(result, db.catalog, config)
        write_claim(config.claim_path, claim)
        log.info("cli", "claim", path=str(config.claim_path))
        if config.enable_xml:
            write_junit(config.junit_path, claim)
            log.info("cli", "junit", path=str(config.junit_path))
    summaries = summarize(result)
    status = "fail" if result.has_failures else "ok"
    if as_json:
        payload = build_base_payload(status=status, run_id=config.run_id)
        payload.update(
            {
                "labels_filter": config.labels_filter,
                "selected": result.selected,
                "suites": {name: summary.to_dict() for name, summary in summaries.items()},
                "total": total(summaries).to_dict(),
                "timed_out": result.timed_out,
                "aborted": result.aborted,
                "abort_reason": result.abort_reason,
                "errors": list(result.errors),
                "claim": str(config.claim_path),
                "log": str(config.log_path),
                "junit": str(config.junit_path) if config.enable_xml else "",
            }
        )
        emit(payload, True)
    else:
        print(render_results_table(summaries))
        failed_log = render_failed_checks_log(result)
        if failed_log:
            print(failed_log)
        for line in render_run_warnings(result):
            print(line)
        print(f"claim file: {config.claim_path}")
    return ERR_CHECKS_FAILED if result.has_failures else OK


__all__ = ["configure_run_parser", "run_run_command"]

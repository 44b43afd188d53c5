from __future__ import annotations

import os
import subprocess
import sys
import textwrap
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from certctl.catalog import CatalogBuilder
from certctl.checks import Check, ChecksDB
from certctl.core.clock import Clock

ROOT = Path(__file__).resolve().parents[3]
SRC = ROOT / "packages/certctl/src"


def run_certctl(*args: str, cwd: Path | None = None, extra_path: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("CERTCTL_")}
    paths = [str(SRC)]
    if extra_path is not None:
        paths.append(str(extra_path))
    env["PYTHONPATH"] = os.pathsep.join(paths)
    env["CERTCTL_RUN_ID"] = "pytest-run"
    return subprocess.run(
        [sys.executable, "-m", "certctl.cli", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


class FakeClock(Clock):
    """Deterministic clock; every monotonic read advances by ``step`` seconds."""

    def __init__(self, step: float = 1.0) -> None:
        self.step = step
        self.ticks = 0.0
        self.base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.base + timedelta(seconds=self.ticks)

    def monotonic(self) -> float:
        self.ticks += self.step
        return self.ticks


def passing(check: Check, _env: object) -> None:
    check.add_compliant(_obj(check.id, "ok", True))


def failing(check: Check, _env: object) -> None:
    check.add_compliant(_obj(check.id, "ok", True))
    check.add_non_compliant(_obj(check.id, "bad", False))


def _obj(name: str, reason: str, compliant: bool):
    from certctl.checks.evidence import namespace_report_object

    return namespace_report_object(name, reason, compliant)


def make_db(spec: dict[str, list[tuple[str, Callable[..., None]]]], tags: dict[str, tuple[str, ...]] | None = None) -> ChecksDB:
    """Build a ChecksDB from ``{suite: [(check_id, fn), ...]}``."""
    builder = CatalogBuilder()
    for suite, checks in spec.items():
        for check_id, _fn in checks:
            builder.register(check_id, suite, f"{check_id} description", f"fix {check_id}", "", "", False, None, *(tags or {}).get(check_id, ("common",)))
    db = ChecksDB(builder.build())
    for suite, checks in spec.items():
        group = db.group(suite)
        for check_id, fn in checks:
            db.add(group, check_id, fn)
    return db


SUITE_MODULE = textwrap.dedent(
    '''
    from certctl.checks.evidence import namespace_report_object


    def register_catalog(builder):
        builder.register("demo-pass", "demo", "always compliant", "nothing to do", "", "", False, None, "common")
        builder.register("demo-fail", "demo", "never compliant", "fix the namespace", "", "", False, None, "common")
        builder.register("demo-skip", "demo", "needs pods", "deploy pods", "", "", False, None, "extended")


    def _pass(check, env):
        for ns in env.resources("namespaces"):
            check.add_compliant(namespace_report_object(ns, "namespace is labelled", True))


    def _fail(check, env):
        check.log_info("inspecting %d namespaces", len(env.resources("namespaces")))
        check.add_non_compliant(namespace_report_object("tnf", "namespace is not labelled", False))


    def _skip(check, env):
        raise AssertionError("must not run")


    def register_checks(db):
        from certctl.checks import skip_if_empty

        group = db.group("demo")
        db.add(group, "demo-pass", _pass)
        db.add(group, "demo-fail", _fail)
        db.add(group, "demo-skip", _skip, skip_checks=[skip_if_empty("pods")])
    '''
)


def write_suite_module(root: Path, name: str = "demo_suite") -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{name}.py").write_text(SUITE_MODULE, encoding="utf-8")
    return root

"""Run configuration: CLI flag, then environment, then config file, then default."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from .core.durations import parse_duration
from .core.logging import LEVELS
from .core.yaml_utils import load_yaml
from .errors import ConfigError

DEFAULT_LABELS = "none"
DEFAULT_TIMEOUT = "24h"
DEFAULT_OUTPUT_DIR = "certctl-results"
DEFAULT_LOG_LEVEL = "info"

ENV_PREFIX = "CERTCTL_"


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def make_run_id(now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    return f"certctl-{stamp}"


def load_config_file(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    payload = load_yaml(path)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"config file {str(path)!r}: root must be a mapping")
    return payload


def _pick(cli: Any, env_name: str | None, file_cfg: Mapping[str, Any], file_key: str, default: Any) -> Any:
    if cli is not None:
        return cli
    if env_name is not None:
        value = getenv(env_name)
        if value is not None and value.strip():
            return value.strip()
    if file_key in file_cfg and file_cfg[file_key] is not None:
        return file_cfg[file_key]
    return default


@dataclass(frozen=True)
class RunConfig:
    labels_filter: str = DEFAULT_LABELS
    timeout: str = DEFAULT_TIMEOUT
    timeout_seconds: float = 86400.0
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    suites: tuple[str, ...] = ()
    environment_file: Path | None = None
    enable_xml: bool = False
    log_json: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    run_id: str = field(default_factory=make_run_id)

    def __post_init__(self) -> None:
        labels = str(self.labels_filter).strip()
        if not labels:
            raise ConfigError("labels filter cannot be empty; use `none` to select nothing")
        object.__setattr__(self, "labels_filter", labels)
        level = str(self.log_level).strip().lower()
        if level not in LEVELS:
            raise ConfigError(f"invalid log level `{self.log_level}`: expected one of {sorted(LEVELS)}")
        object.__setattr__(self, "log_level", level)
        object.__setattr__(self, "suites", tuple(str(s).strip() for s in self.suites if str(s).strip()))

    @property
    def claim_path(self) -> Path:
        return self.output_dir / "claim.json"

    @property
    def log_path(self) -> Path:
        return self.output_dir / "certctl.log"

    @property
    def junit_path(self) -> Path:
        return self.output_dir / "junit.xml"

    def to_payload(self) -> dict[str, object]:
        return {
            "labelsFilter": self.labels_filter,
            "timeout": self.timeout,
            "outputDir": str(self.output_dir),
            "suites": list(self.suites),
            "environment": str(self.environment_file) if self.environment_file else "",
            "enableXmlCreation": self.enable_xml,
            "runId": self.run_id,
        }

    @classmethod
    def from_args(
        cls,
        *,
        labels_filter: str | None = None,
        timeout: str | None = None,
        output_dir: str | None = None,
        suites: list[str] | None = None,
        environment_file: str | None = None,
        enable_xml: bool | None = None,
        log_json: bool = False,
        log_level: str | None = None,
        run_id: str | None = None,
        config_file: str | None = None,
    ) -> RunConfig:
        file_cfg = load_config_file(Path(config_file) if config_file else None)
        raw_timeout = str(_pick(timeout, "TIMEOUT", file_cfg, "timeout", DEFAULT_TIMEOUT))
        raw_suites = _pick(suites or None, None, file_cfg, "suites", [])
        if isinstance(raw_suites, str):
            raw_suites = [raw_suites]
        if not isinstance(raw_suites, list):
            raise ConfigError("config key `suites` must be a list of module names")
        env_file = _pick(environment_file, "ENVIRONMENT", file_cfg, "environment", None)
        return cls(
            labels_filter=str(_pick(labels_filter, "LABELS_FILTER", file_cfg, "labelsFilter", DEFAULT_LABELS)),
            timeout=raw_timeout,
            timeout_seconds=parse_duration(raw_timeout),
            output_dir=Path(str(_pick(output_dir, "OUTPUT_DIR", file_cfg, "outputDir", DEFAULT_OUTPUT_DIR))),
            suites=tuple(str(s) for s in raw_suites),
            environment_file=Path(str(env_file)) if env_file else None,
            enable_xml=bool(_pick(enable_xml, None, file_cfg, "enableXmlCreation", False)),
            log_json=log_json,
            log_level=str(_pick(log_level, "LOG_LEVEL", file_cfg, "logLevel", DEFAULT_LOG_LEVEL)),
            run_id=str(_pick(run_id, "RUN_ID", file_cfg, "runId", None) or make_run_id()),
        )


__all__ = ["RunConfig", "getenv", "load_config_file", "make_run_id"]

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TextIO

from .clock import utc_now_iso

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def _level_value(level: str) -> int:
    try:
        return LEVELS[level]
    except KeyError:
        raise ValueError(f"unknown log level `{level}`: expected one of {sorted(LEVELS)}") from None


def format_text_line(payload: dict[str, object], message: str, fields: dict[str, object]) -> str:
    core = (
        f"ts={payload['ts']} level={payload['level']} run_id={payload['run_id']} "
        f"component={payload['component']} action={payload['action']}"
    )
    if message:
        core = f"{core} {message}"
    extras = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    return core if not extras else f"{core} {extras}"


class EventLog:
    """Structured run log.

    Events go to ``stream`` (stderr by default) either as sorted-key JSON or as
    ``key=value`` text, and always as text to the optional run log file, which
    is what ``certctl check results`` parses afterwards.
    """

    def __init__(
        self,
        run_id: str,
        *,
        log_json: bool = False,
        level: str = "info",
        stream: TextIO | None = None,
        quiet: bool = False,
    ) -> None:
        self.run_id = run_id
        self.log_json = log_json
        self.threshold = _level_value(level)
        self.stream = stream
        self.quiet = quiet
        self._file: TextIO | None = None
        self.path: Path | None = None

    def open_file(self, path: Path, *, append: bool = False) -> None:
        self.close()
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._file = path.open("a" if append else "w", encoding="utf-8")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> EventLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def enabled(self, level: str) -> bool:
        return _level_value(level) >= self.threshold

    def log_event(self, level: str, component: str, action: str, message: str = "", **fields: object) -> str:
        payload: dict[str, object] = {
            "ts": utc_now_iso(),
            "level": level,
            "run_id": self.run_id,
            "component": component,
            "action": action,
        }
        line = format_text_line(payload, message, fields)
        value = _level_value(level)
        if self._file is not None and value >= min(self.threshold, LEVELS["info"]):
            self._file.write(line + "\n")
            self._file.flush()
        if value < self.threshold:
            return line
        if not self.quiet:
            stream = self.stream or sys.stderr
            if self.log_json:
                stream.write(json.dumps({**payload, "message": message, **fields}, sort_keys=True, default=str) + "\n")
            else:
                stream.write(line + "\n")
        return line

    def debug(self, component: str, action: str, message: str = "", **fields: object) -> None:
        self.log_event("debug", component, action, message, **fields)

    def info(self, component: str, action: str, message: str = "", **fields: object) -> None:
        self.log_event("info", component, action, message, **fields)

    def warn(self, component: str, action: str, message: str = "", **fields: object) -> None:
        self.log_event("warn", component, action, message, **fields)

    def error(self, component: str, action: str, message: str = "", **fields: object) -> None:
        self.log_event("error", component, action, message, **fields)


def null_log() -> EventLog:
    return EventLog("-", quiet=True)


__all__ = ["EventLog", "LEVELS", "format_text_line", "null_log"]

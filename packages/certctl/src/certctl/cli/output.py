"""CLI payload output helpers."""

from __future__ import annotations

from .. import __version__
from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def build_base_payload(status: str = "ok", run_id: str = "") -> dict[str, object]:
    return {
        "schema_version": 1,
        "tool": "certctl",
        "version": __version__,
        "status": status,
        "run_id": run_id,
    }


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error") -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "certctl.error.v1",
                "schema_version": 1,
                "tool": "certctl",
                "status": "error",
                "errors": [{"code": code, "kind": kind, "message": message}],
            },
            pretty=False,
        )
    return message

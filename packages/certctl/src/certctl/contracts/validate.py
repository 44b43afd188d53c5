"""JSON schemas of the artifacts certctl writes and reads back.

Two artifacts cross the process boundary: the claim written by ``certctl
run`` and the expected-results template consumed by ``certctl check
results``. Each has a packaged Draft 2020-12 schema; a document that does not
match raises ``ReportValidationError`` listing every violation by location.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any

from ..errors import ReportValidationError

CLAIM_SCHEMA = "certctl.claim.v1"
EXPECTED_RESULTS_SCHEMA = "certctl.expected-results.v1"


@dataclass(frozen=True)
class ArtifactSchema:
    name: str
    artifact: str
    file: str


SCHEMAS: dict[str, ArtifactSchema] = {
    CLAIM_SCHEMA: ArtifactSchema(CLAIM_SCHEMA, "claim", "claim.schema.json"),
    EXPECTED_RESULTS_SCHEMA: ArtifactSchema(EXPECTED_RESULTS_SCHEMA, "expected results template", "expected-results.schema.json"),
}


def artifact_schema(schema_name: str) -> ArtifactSchema:
    try:
        return SCHEMAS[schema_name]
    except KeyError:
        raise ReportValidationError(f"unknown schema: {schema_name}") from None


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict[str, Any]:
    entry = artifact_schema(schema_name)
    text = resources.files(f"{__package__}.schemas").joinpath(entry.file).read_text(encoding="utf-8")
    return json.loads(text)


def schema_violations(schema_name: str, payload: Any) -> list[str]:
    """Return ``location: message`` for every violation, ordered by location."""
    import jsonschema

    validator = jsonschema.Draft202012Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(payload), key=lambda err: [str(p) for p in err.absolute_path])
    return [f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}" for err in errors]


def validate(schema_name: str, payload: Any) -> None:
    violations = schema_violations(schema_name, payload)
    if violations:
        entry = artifact_schema(schema_name)
        listed = "; ".join(violations)
        raise ReportValidationError(f"{entry.artifact} does not match {entry.name} ({len(violations)} violation(s)): {listed}")

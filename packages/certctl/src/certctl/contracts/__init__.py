"""Artifact schemas and validation."""

from .validate import CLAIM_SCHEMA, EXPECTED_RESULTS_SCHEMA, SCHEMAS, ArtifactSchema, load_schema, schema_violations, validate

__all__ = [
    "ArtifactSchema",
    "CLAIM_SCHEMA",
    "EXPECTED_RESULTS_SCHEMA",
    "SCHEMAS",
    "load_schema",
    "schema_violations",
    "validate",
]

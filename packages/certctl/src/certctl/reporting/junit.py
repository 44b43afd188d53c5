from __future__ import annotations

from pathlib import Path
from typing import Any
from xml.etree.ElementTree import Element, SubElement, tostring

SUITE_NAME = "certctl"


def build_junit(claim: dict[str, Any]) -> Element:
    """JUnit ``testsuites`` document with one ``testcase`` per claim result."""
    body = claim["claim"]
    results: dict[str, dict[str, Any]] = body["results"]
    states = [row["state"] for row in results.values()]
    metadata = body["metadata"]
    duration = sum(float(row["duration"]) for row in results.values())
    counts = {
        "tests": str(len(states)),
        "failures": str(states.count("failed")),
        "errors": str(states.count("error")),
        "skipped": str(states.count("skipped")),
    }
    root = Element("testsuites", name=SUITE_NAME, time=f"{duration:.3f}", **counts)
    suite = SubElement(root, "testsuite", name=SUITE_NAME, timestamp=metadata["startTime"], time=f"{duration:.3f}", **counts)
    props = SubElement(suite, "properties")
    for key in ("runId", "labelsFilter", "timeout"):
        SubElement(props, "property", name=key, value=str(metadata.get(key, "")))
    for check_id, row in results.items():
        case = SubElement(
            suite,
            "testcase",
            name=check_id,
            classname=row["testID"]["suite"],
            status=row["state"],
            time=f"{float(row['duration']):.3f}",
        )
        if row["state"] == "skipped":
            skipped = SubElement(case, "skipped", message=row["skipReason"])
            skipped.text = row["skipReason"]
        elif row["state"] == "failed":
            failure = SubElement(case, "failure", message=row["failureReason"] or "check failed")
            failure.text = _details(row)
        elif row["state"] == "error":
            error = SubElement(case, "error", message=row["failureReason"] or "check error")
            error.text = _details(row)
        if row["capturedTestOutput"]:
            out = SubElement(case, "system-out")
            out.text = row["capturedTestOutput"]
    return root


def _details(row: dict[str, Any]) -> str:
    lines = []
    for obj in row["checkDetails"]["NonCompliantObjectsOut"]:
        fields = ", ".join(f"{k}: {v}" for k, v in zip(obj["ObjectFieldsKeys"], obj["ObjectFieldsValues"]))
        lines.append(f"{obj['ObjectType']}: {fields}")
    return "\n".join(lines)


def write_junit(path: Path, claim: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    xml = tostring(build_junit(claim), encoding="unicode")
    path.write_text('<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n", encoding="utf-8")
    return path


__all__ = ["SUITE_NAME", "build_junit", "write_junit"]

"""Compliance evidence recorded by check bodies.

A ``ReportObject`` describes one resource and why it is, or is not,
compliant. Keys and values are kept as parallel, ordered lists so that the
serialized report diffs reproducibly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable

REASON_FOR_COMPLIANCE = "Reason For Compliance"
REASON_FOR_NON_COMPLIANCE = "Reason For Non Compliance"

NAMESPACE = "Namespace"
POD_NAME = "Pod Name"
CONTAINER_NAME = "Container Name"
NODE_NAME = "Node Name"
DEPLOYMENT_NAME = "Deployment Name"
STATEFULSET_NAME = "StatefulSet Name"
OPERATOR_NAME = "Operator Name"
SERVICE_NAME = "Service Name"
ERROR_FIELD = "Error"

CONTAINER_TYPE = "Container"
POD_TYPE = "Pod"
NAMESPACE_TYPE = "Namespace"
NODE_TYPE = "Node"
DEPLOYMENT_TYPE = "Deployment"
STATEFULSET_TYPE = "StatefulSet"
OPERATOR_TYPE = "Operator"
SERVICE_TYPE = "Service"
CHECK_ERROR_TYPE = "Check Error"


@dataclass
class ReportObject:
    object_type: str
    keys: list[str] = field(default_factory=list)
    values: list[str] = field(default_factory=list)
    compliant: bool = True

    def __post_init__(self) -> None:
        if len(self.keys) != len(self.values):
            raise ValueError(f"report object `{self.object_type}`: {len(self.keys)} keys for {len(self.values)} values")

    @classmethod
    def new(cls, reason: str, object_type: str, compliant: bool) -> ReportObject:
        obj = cls(object_type=object_type, compliant=compliant)
        obj.add_field(REASON_FOR_COMPLIANCE if compliant else REASON_FOR_NON_COMPLIANCE, reason)
        return obj

    def add_field(self, key: str, value: object) -> ReportObject:
        self.keys.append(str(key))
        self.values.append(str(value))
        return self

    def fields(self) -> list[tuple[str, str]]:
        return list(zip(self.keys, self.values))

    def get(self, key: str, default: str = "") -> str:
        for k, v in zip(self.keys, self.values):
            if k == key:
                return v
        return default

    @property
    def reason(self) -> str:
        return self.get(REASON_FOR_COMPLIANCE if self.compliant else REASON_FOR_NON_COMPLIANCE)

    def to_dict(self) -> dict[str, object]:
        return {
            "ObjectType": self.object_type,
            "ObjectFieldsKeys": list(self.keys),
            "ObjectFieldsValues": list(self.values),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object], *, compliant: bool) -> ReportObject:
        return cls(
            object_type=str(payload.get("ObjectType", "")),
            keys=[str(k) for k in payload.get("ObjectFieldsKeys", []) or []],
            values=[str(v) for v in payload.get("ObjectFieldsValues", []) or []],
            compliant=compliant,
        )


def namespace_report_object(namespace: str, reason: str, compliant: bool) -> ReportObject:
    return ReportObject.new(reason, NAMESPACE_TYPE, compliant).add_field(NAMESPACE, namespace)


def pod_report_object(namespace: str, pod: str, reason: str, compliant: bool) -> ReportObject:
    return ReportObject.new(reason, POD_TYPE, compliant).add_field(NAMESPACE, namespace).add_field(POD_NAME, pod)


def container_report_object(namespace: str, pod: str, container: str, reason: str, compliant: bool) -> ReportObject:
    return (
        ReportObject.new(reason, CONTAINER_TYPE, compliant)
        .add_field(NAMESPACE, namespace)
        .add_field(POD_NAME, pod)
        .add_field(CONTAINER_NAME, container)
    )


def node_report_object(node: str, reason: str, compliant: bool) -> ReportObject:
    return ReportObject.new(reason, NODE_TYPE, compliant).add_field(NODE_NAME, node)


def deployment_report_object(namespace: str, name: str, reason: str, compliant: bool) -> ReportObject:
    return (
        ReportObject.new(reason, DEPLOYMENT_TYPE, compliant).add_field(NAMESPACE, namespace).add_field(DEPLOYMENT_NAME, name)
    )


def statefulset_report_object(namespace: str, name: str, reason: str, compliant: bool) -> ReportObject:
    return (
        ReportObject.new(reason, STATEFULSET_TYPE, compliant)
        .add_field(NAMESPACE, namespace)
        .add_field(STATEFULSET_NAME, name)
    )


def operator_report_object(namespace: str, name: str, reason: str, compliant: bool) -> ReportObject:
    return ReportObject.new(reason, OPERATOR_TYPE, compliant).add_field(NAMESPACE, namespace).add_field(OPERATOR_NAME, name)


def service_report_object(namespace: str, name: str, reason: str, compliant: bool) -> ReportObject:
    return ReportObject.new(reason, SERVICE_TYPE, compliant).add_field(NAMESPACE, namespace).add_field(SERVICE_NAME, name)


def _expect(obj: ReportObject, compliant: bool) -> None:
    if bool(obj.compliant) != compliant:
        side = "compliant" if compliant else "non-compliant"
        raise ValueError(f"report object `{obj.object_type}` (reason {obj.reason!r}) cannot be recorded as {side}")


class Evidence:
    """Append-only evidence store of one check.

    Nothing is ever replaced: a check body that loops over sub-resources keeps
    every record it adds. Classification is read once, after the body returns.
    """

    def __init__(self) -> None:
        self._compliant: list[ReportObject] = []
        self._non_compliant: list[ReportObject] = []

    def add_compliant(self, *objects: ReportObject) -> None:
        for obj in objects:
            _expect(obj, True)
            self._compliant.append(obj)

    def add_non_compliant(self, *objects: ReportObject) -> None:
        for obj in objects:
            _expect(obj, False)
            self._non_compliant.append(obj)

    def add(self, *objects: ReportObject) -> None:
        for obj in objects:
            if obj.compliant:
                self._compliant.append(obj)
            else:
                self._non_compliant.append(obj)

    def extend(self, compliant: Iterable[ReportObject] = (), non_compliant: Iterable[ReportObject] = ()) -> None:
        self.add_compliant(*compliant)
        self.add_non_compliant(*non_compliant)

    @property
    def compliant(self) -> tuple[ReportObject, ...]:
        return tuple(self._compliant)

    @property
    def non_compliant(self) -> tuple[ReportObject, ...]:
        return tuple(self._non_compliant)

    @property
    def is_empty(self) -> bool:
        return not self._compliant and not self._non_compliant

    @property
    def has_failures(self) -> bool:
        return bool(self._non_compliant)

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            "CompliantObjectsOut": [obj.to_dict() for obj in self._compliant],
            "NonCompliantObjectsOut": [obj.to_dict() for obj in self._non_compliant],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> Evidence:
        evidence = cls()
        for row in payload.get("CompliantObjectsOut", []) or []:
            evidence._compliant.append(ReportObject.from_dict(row, compliant=True))
        for row in payload.get("NonCompliantObjectsOut", []) or []:
            evidence._non_compliant.append(ReportObject.from_dict(row, compliant=False))
        return evidence


__all__ = [
    "CHECK_ERROR_TYPE",
    "CONTAINER_TYPE",
    "Evidence",
    "NAMESPACE_TYPE",
    "NODE_TYPE",
    "POD_TYPE",
    "REASON_FOR_COMPLIANCE",
    "REASON_FOR_NON_COMPLIANCE",
    "ReportObject",
    "container_report_object",
    "deployment_report_object",
    "namespace_report_object",
    "node_report_object",
    "operator_report_object",
    "pod_report_object",
    "service_report_object",
    "statefulset_report_object",
]

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

TAG_COMMON = "common"
TAG_EXTENDED = "extended"
TAG_TELCO = "telco"
TAG_FAREDGE = "faredge"
TAG_PREFLIGHT = "preflight"

NO_DOCUMENTED_PROCESS = "No exceptions"
NO_REFERENCE = "No Reference Document Specified"

_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.\-]*$")


class Scenario(str, Enum):
    FAR_EDGE = "FarEdge"
    TELCO = "Telco"
    NON_TELCO = "NonTelco"
    EXTENDED = "Extended"


class Classification(str, Enum):
    MANDATORY = "Mandatory"
    OPTIONAL = "Optional"


@dataclass(frozen=True, order=True)
class CatalogKey:
    suite: str
    id: str

    def __str__(self) -> str:
        return f"{self.suite}/{self.id}"


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    suite: str
    description: str
    remediation: str
    exception_process: str = NO_DOCUMENTED_PROCESS
    best_practice_reference: str = NO_REFERENCE
    qe: bool = False
    classification: Mapping[Scenario, Classification] = field(default_factory=dict)
    tags: tuple[str, ...] = (TAG_COMMON,)

    def __post_init__(self) -> None:
        check_id = str(self.id).strip()
        if not _ID_PATTERN.fullmatch(check_id):
            raise ValueError(f"invalid check id `{check_id}`: expected lowercase kebab-case")
        suite = str(self.suite).strip()
        if not suite:
            raise ValueError(f"{check_id}: suite cannot be empty")
        object.__setattr__(self, "id", check_id)
        object.__setattr__(self, "suite", suite)
        object.__setattr__(self, "description", str(self.description).strip())
        object.__setattr__(self, "remediation", str(self.remediation).strip())
        object.__setattr__(self, "exception_process", str(self.exception_process).strip() or NO_DOCUMENTED_PROCESS)
        object.__setattr__(
            self, "best_practice_reference", str(self.best_practice_reference).strip() or NO_REFERENCE
        )
        object.__setattr__(self, "qe", bool(self.qe))
        classes = {
            Scenario(str(getattr(k, "value", k))): Classification(str(getattr(v, "value", v)))
            for k, v in dict(self.classification).items()
        }
        full = {scenario: classes.get(scenario, Classification.OPTIONAL) for scenario in Scenario}
        object.__setattr__(self, "classification", MappingProxyType(full))
        tags = tuple(dict.fromkeys(str(t).strip() for t in self.tags if str(t).strip()))
        object.__setattr__(self, "tags", tags or (TAG_COMMON,))

    @property
    def key(self) -> CatalogKey:
        return CatalogKey(self.suite, self.id)

    def to_payload(self) -> dict[str, object]:
        return {
            "identifier": self.id,
            "suite": self.suite,
            "description": self.description,
            "remediation": self.remediation,
            "exceptionProcess": self.exception_process,
            "bestPracticeReference": self.best_practice_reference,
            "qe": self.qe,
            "categoryClassification": {s.value: c.value for s, c in self.classification.items()},
            "tags": ",".join(self.tags),
        }


class Catalog(Mapping[str, CatalogEntry]):
    """Immutable registry of catalog entries in registration order."""

    def __init__(self, entries: tuple[CatalogEntry, ...]) -> None:
        self._entries = entries
        self._by_id = {entry.id: entry for entry in entries}

    def __getitem__(self, check_id: str) -> CatalogEntry:
        return self._by_id[check_id]

    def __iter__(self) -> Iterator[str]:
        return iter(entry.id for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def suites(self) -> list[str]:
        return list(dict.fromkeys(entry.suite for entry in self._entries))

    def entries_for_suite(self, suite: str) -> list[CatalogEntry]:
        return [entry for entry in self._entries if entry.suite == suite]

    def to_payload(self) -> list[dict[str, object]]:
        return [entry.to_payload() for entry in self._entries]


__all__ = [
    "Catalog",
    "CatalogEntry",
    "CatalogKey",
    "Classification",
    "NO_DOCUMENTED_PROCESS",
    "NO_REFERENCE",
    "Scenario",
    "TAG_COMMON",
    "TAG_EXTENDED",
    "TAG_FAREDGE",
    "TAG_PREFLIGHT",
    "TAG_TELCO",
]

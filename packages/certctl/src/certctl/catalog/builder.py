from __future__ import annotations

from typing import Mapping

from ..errors import CatalogError, DuplicateCheckError
from .model import Catalog, CatalogEntry, CatalogKey, Classification, Scenario


class CatalogBuilder:
    """Collects catalog entries once at process start and freezes them.

    Registering the same ``(suite, id)`` twice is a programming defect and
    raises ``DuplicateCheckError`` instead of silently replacing the entry.
    """

    def __init__(self) -> None:
        self._entries: dict[CatalogKey, CatalogEntry] = {}
        self._built = False

    def register(
        self,
        check_id: str,
        suite: str,
        description: str,
        remediation: str,
        exception_process: str = "",
        best_practice_reference: str = "",
        qe: bool = False,
        classification: Mapping[Scenario | str, Classification | str] | None = None,
        *tags: str,
    ) -> CatalogKey:
        if self._built:
            raise CatalogError(f"{check_id}: catalog already built; register entries before build()")
        entry = CatalogEntry(
            id=check_id,
            suite=suite,
            description=description,
            remediation=remediation,
            exception_process=exception_process,
            best_practice_reference=best_practice_reference,
            qe=qe,
            classification=dict(classification or {}),
            tags=tuple(tags),
        )
        if entry.key in self._entries:
            raise DuplicateCheckError(f"duplicate catalog entry `{entry.key}`")
        self._entries[entry.key] = entry
        return entry.key

    def add(self, entry: CatalogEntry) -> CatalogKey:
        if self._built:
            raise CatalogError(f"{entry.id}: catalog already built; register entries before build()")
        if entry.key in self._entries:
            raise DuplicateCheckError(f"duplicate catalog entry `{entry.key}`")
        self._entries[entry.key] = entry
        return entry.key

    def build(self) -> Catalog:
        ids: dict[str, CatalogKey] = {}
        for key in self._entries:
            if key.id in ids:
                raise DuplicateCheckError(f"check id `{key.id}` registered in suites `{ids[key.id].suite}` and `{key.suite}`")
            ids[key.id] = key
        self._built = True
        return Catalog(tuple(self._entries.values()))


__all__ = ["CatalogBuilder"]

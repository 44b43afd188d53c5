from __future__ import annotations

import importlib
from typing import Iterable, Iterator

from ..catalog import Catalog, CatalogBuilder
from ..errors import CatalogError, DuplicateCheckError, UnknownCheckError
from ..labels import LabelExpression, parse_label_expression
from .group import CheckGroup
from .model import Check, CheckFn, SkipMode, SkipPredicate


class ChecksDB:
    """Registration-ordered check groups bound to one immutable catalog.

    Every check id must have a catalog entry; a check's tags are the catalog
    tags plus its suite and id.
    """

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._groups: dict[str, CheckGroup] = {}
        self._owner: dict[str, str] = {}

    def __iter__(self) -> Iterator[CheckGroup]:
        return iter(self._groups.values())

    def __len__(self) -> int:
        return len(self._owner)

    def __contains__(self, check_id: object) -> bool:
        return check_id in self._owner

    @property
    def groups(self) -> list[CheckGroup]:
        return list(self._groups.values())

    def group(self, name: str, *, skip_mode: SkipMode = SkipMode.ANY) -> CheckGroup:
        existing = self._groups.get(name)
        if existing is not None:
            return existing
        created = CheckGroup(name, skip_mode=skip_mode)
        self._groups[created.name] = created
        return created

    def add(
        self,
        group: CheckGroup | str,
        check_id: str,
        fn: CheckFn,
        *,
        skip_checks: Iterable[SkipPredicate] = (),
        skip_mode: SkipMode | None = None,
    ) -> Check:
        target = self.group(group) if isinstance(group, str) else group
        if self._groups.get(target.name) is not target:
            raise CatalogError(f"{check_id}: group `{target.name}` does not belong to this checks db")
        if check_id not in self.catalog:
            raise UnknownCheckError(f"{check_id}: no catalog entry registered for check")
        if check_id in self._owner:
            raise DuplicateCheckError(f"{check_id}: check already registered in group `{self._owner[check_id]}`")
        entry = self.catalog[check_id]
        if entry.suite != target.name:
            raise CatalogError(f"{check_id}: catalog suite `{entry.suite}` does not match group `{target.name}`")
        check = Check(
            check_id,
            fn,
            suite=target.name,
            tags=entry.tags,
            skip_checks=skip_checks,
            skip_mode=skip_mode,
        )
        target.add(check)
        self._owner[check_id] = target.name
        return check

    def checks(self) -> list[Check]:
        return [check for group in self._groups.values() for check in group.checks]

    def get(self, check_id: str) -> Check | None:
        owner = self._owner.get(check_id)
        if owner is None:
            return None
        return next(check for check in self._groups[owner].checks if check.id == check_id)

    def filter_check_ids(self, expression: LabelExpression | str) -> list[str]:
        expr = parse_label_expression(expression) if isinstance(expression, str) else expression
        return [check.id for check in self.checks() if expr.matches(check.tags)]


def load_suites(module_names: Iterable[str]) -> ChecksDB:
    """Import suite modules, build their catalog, then register their checks.

    A suite module exposes ``register_catalog(builder)`` and
    ``register_checks(db)``.
    """
    modules = []
    for name in module_names:
        try:
            module = importlib.import_module(name)
        except ImportError as exc:
            raise CatalogError(f"could not import suite module `{name}`: {exc}") from exc
        for hook in ("register_catalog", "register_checks"):
            if not callable(getattr(module, hook, None)):
                raise CatalogError(f"suite module `{name}` does not define `{hook}()`")
        modules.append(module)
    builder = CatalogBuilder()
    for module in modules:
        module.register_catalog(builder)
    db = ChecksDB(builder.build())
    for module in modules:
        module.register_checks(db)
    return db


__all__ = ["ChecksDB", "load_suites"]

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterator

from .model import Check, SkipMode

if TYPE_CHECKING:
    from ..environment import Environment

GroupHook = Callable[["list[Check]", "Environment"], None]
CheckHook = Callable[[Check, "Environment"], None]


class CheckGroup:
    """Ordered checks of one suite plus the suite's setup hooks.

    ``before_all`` and ``after_all`` receive the checks selected for the run;
    ``before_each`` and ``after_each`` receive the check about to run or just
    finished. Checks run strictly in the order they were added.
    """

    def __init__(self, name: str, *, skip_mode: SkipMode = SkipMode.ANY) -> None:
        self.name = str(name).strip()
        if not self.name:
            raise ValueError("check group name cannot be empty")
        self.skip_mode = skip_mode
        self.checks: list[Check] = []
        self.before_all_fn: GroupHook | None = None
        self.before_each_fn: CheckHook | None = None
        self.after_each_fn: CheckHook | None = None
        self.after_all_fn: GroupHook | None = None

    def __repr__(self) -> str:
        return f"CheckGroup(name={self.name!r}, checks={len(self.checks)})"

    def __iter__(self) -> Iterator[Check]:
        return iter(self.checks)

    def __len__(self) -> int:
        return len(self.checks)

    def add(self, check: Check) -> Check:
        if self.name not in check.tags:
            check.tags = (*check.tags, self.name)
        if check.skip_mode is None:
            check.skip_mode = self.skip_mode
        self.checks.append(check)
        return check

    def with_before_all(self, fn: GroupHook) -> CheckGroup:
        self.before_all_fn = fn
        return self

    def with_before_each(self, fn: CheckHook) -> CheckGroup:
        self.before_each_fn = fn
        return self

    def with_after_each(self, fn: CheckHook) -> CheckGroup:
        self.after_each_fn = fn
        return self

    def with_after_all(self, fn: GroupHook) -> CheckGroup:
        self.after_all_fn = fn
        return self

    def refresh_environment_each(self) -> CheckGroup:
        """Refresh the shared snapshot before every check of this group."""

        def _refresh(_check: Check, env: Environment) -> None:
            env.refresh()

        return self.with_before_each(_refresh)


__all__ = ["CheckGroup", "CheckHook", "GroupHook"]

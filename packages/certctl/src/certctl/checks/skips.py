"""Skip predicates and the policy that combines them."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from .model import SkipMode, SkipPredicate

if TYPE_CHECKING:
    from ..environment import Environment


def _evaluate(predicate: SkipPredicate, env: Environment) -> tuple[bool, str]:
    try:
        skip, reason = predicate(env)
    except Exception as exc:  # noqa: BLE001
        return True, f"skip predicate raised {type(exc).__name__}: {exc}"
    return bool(skip), str(reason)


def should_skip(predicates: Sequence[SkipPredicate], mode: SkipMode | None, env: Environment) -> tuple[bool, str]:
    """Combine ``predicates`` under ``mode``.

    ANY skips on the first true predicate and keeps its reason. ALL skips
    only when every predicate is true and joins their reasons. No predicates
    means no skip under either mode.
    """
    if not predicates:
        return False, ""
    if mode is SkipMode.ALL:
        reasons: list[str] = []
        for predicate in predicates:
            skip, reason = _evaluate(predicate, env)
            if not skip:
                return False, ""
            reasons.append(reason)
        return True, ", ".join(r for r in reasons if r)
    for predicate in predicates:
        skip, reason = _evaluate(predicate, env)
        if skip:
            return True, reason
    return False, ""


def skip_if_empty(*kinds: str) -> SkipPredicate:
    """Skip when any of ``kinds`` has no resources in the snapshot."""

    def _predicate(env: Environment) -> tuple[bool, str]:
        for kind in kinds:
            if not env.resources(kind):
                return True, f"no {kind} to check found"
        return False, ""

    return _predicate


def skip_if_all_empty(*kinds: str) -> SkipPredicate:
    """Skip only when every one of ``kinds`` is absent from the snapshot."""

    def _predicate(env: Environment) -> tuple[bool, str]:
        if all(not env.resources(kind) for kind in kinds):
            return True, f"no {', '.join(kinds)} to check found"
        return False, ""

    return _predicate


__all__ = ["should_skip", "skip_if_all_empty", "skip_if_empty"]

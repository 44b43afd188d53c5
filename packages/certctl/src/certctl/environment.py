"""Read-mostly environment snapshot handed to every check.

Discovery of the target resources happens elsewhere; this module only holds
the resulting snapshot. A snapshot is refreshed through its loader, normally
from a group's ``before_each`` hook, so a check sees the data as of its
group's last refresh rather than as of its own invocation.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

from .core.yaml_utils import load_yaml
from .errors import ConfigError

Loader = Callable[[], Mapping[str, Any]]


class Environment(Mapping[str, Any]):
    def __init__(self, data: Mapping[str, Any] | None = None, *, loader: Loader | None = None) -> None:
        self._loader = loader
        self._data: dict[str, Any] = {}
        self.generation = 0
        self.refreshed_at: datetime | None = None
        if data is not None:
            self._data = dict(data)
            self.refreshed_at = datetime.now(timezone.utc)
        elif loader is not None:
            self.refresh()

    @classmethod
    def from_file(cls, path: Path) -> Environment:
        def _load() -> Mapping[str, Any]:
            if path.suffix == ".json":
                try:
                    payload = json.loads(path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as exc:
                    raise ConfigError(f"could not read environment snapshot {str(path)!r}: {exc}") from exc
            else:
                payload = load_yaml(path)
            if payload is None:
                return {}
            if not isinstance(payload, dict):
                raise ConfigError(f"environment snapshot {str(path)!r}: root must be a mapping")
            return payload

        return cls(loader=_load)

    def refresh(self) -> None:
        if self._loader is None:
            return
        self._data = dict(self._loader())
        self.generation += 1
        self.refreshed_at = datetime.now(timezone.utc)

    def resources(self, kind: str) -> list[Any]:
        value = self._data.get(kind)
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


__all__ = ["Environment", "Loader"]

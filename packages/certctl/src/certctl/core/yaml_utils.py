from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError


def load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"could not open file {str(path)!r}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"could not parse YAML file {str(path)!r}: {exc}") from exc


def dump_yaml(payload: Any) -> str:
    return yaml.safe_dump(payload, indent=2, sort_keys=False, default_flow_style=False)

from __future__ import annotations

import json
from pathlib import Path

import pytest

from certctl.environment import Environment
from certctl.errors import ConfigError


def test_yaml_and_json_snapshots(tmp_path: Path) -> None:
    yml = tmp_path / "env.yaml"
    yml.write_text("pods:\n  - a\n  - b\nnode: n1\n", encoding="utf-8")
    env = Environment.from_file(yml)
    assert env.resources("pods") == ["a", "b"]
    assert env.resources("node") == ["n1"]
    assert env.resources("services") == []
    assert env.generation == 1
    js = tmp_path / "env.json"
    js.write_text(json.dumps({"pods": []}), encoding="utf-8")
    assert Environment.from_file(js).resources("pods") == []


def test_refresh_rereads_loader(tmp_path: Path) -> None:
    path = tmp_path / "env.yaml"
    path.write_text("pods: [a]\n", encoding="utf-8")
    env = Environment.from_file(path)
    path.write_text("pods: [a, b]\n", encoding="utf-8")
    env.refresh()
    assert env.generation == 2
    assert len(env.resources("pods")) == 2
    assert env.refreshed_at is not None


def test_static_snapshot_refresh_is_noop() -> None:
    env = Environment({"pods": ["x"]})
    env.refresh()
    assert env.generation == 0
    assert dict(env) == {"pods": ["x"]}


@pytest.mark.parametrize("content", ["- a\n- b\n", "pods: [a\n"])
def test_bad_snapshot_is_config_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "env.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        Environment.from_file(path)

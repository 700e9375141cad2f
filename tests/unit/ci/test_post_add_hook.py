from __future__ import annotations

import json
from pathlib import Path

import pytest

from comptrack import ci
from comptrack.ci_worker import run_worker
from comptrack.config import CiConfig

CALLS: list[tuple[str, Path]] = []


def record_call(component_id: str, data_dir: Path) -> None:
    CALLS.append((component_id, data_dir))


def failing_call(component_id: str, data_dir: Path) -> None:
    raise RuntimeError(f"cannot build {component_id}")


def test_disabled_hook_does_nothing(tmp_path: Path) -> None:
    config = CiConfig(enabled=False, function=None, command=())

    assert ci.run_post_add_hook("src/foo", tmp_path, config) is False


def test_custom_function_is_called(tmp_path: Path) -> None:
    CALLS.clear()
    config = CiConfig(enabled=False, function=f"{__name__}:record_call", command=())

    assert ci.run_post_add_hook("src/foo", tmp_path, config) is True
    assert CALLS == [("src/foo", tmp_path)]


def test_hook_failures_are_not_propagated(tmp_path: Path) -> None:
    config = CiConfig(enabled=True, function=f"{__name__}:failing_call", command=())

    assert ci.run_post_add_hook("src/foo", tmp_path, config) is False


def test_enabled_hook_spawns_detached_worker(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    spawned: list[dict[str, object]] = []

    class FakePopen:
        def __init__(self, command: list[str], **kwargs: object) -> None:
            spawned.append({"command": command, **kwargs})

    monkeypatch.setattr(ci.subprocess, "Popen", FakePopen)
    config = CiConfig(enabled=True, function=None, command=())

    assert ci.run_post_add_hook("src/foo", tmp_path, config) is True
    assert spawned[0]["command"] == list(ci.default_worker_command())
    assert spawned[0]["start_new_session"] is True
    env = spawned[0]["env"]
    assert isinstance(env, dict)
    assert env[ci.ENV_COMPONENT_ID] == "src/foo"
    assert env[ci.ENV_DATA_DIR] == str(tmp_path)


@pytest.mark.parametrize("reference", ["no_colon", ":missing_module", "module:"])
def test_malformed_function_reference_is_rejected(reference: str) -> None:
    with pytest.raises(ValueError, match="module:callable"):
        ci.load_ci_function(reference)


def test_worker_records_component_snapshot(tmp_path: Path) -> None:
    (tmp_path / "index.json").write_text(
        json.dumps(
            {
                "schema_version": 1,
                "components": {
                    "src/foo": {
                        "origin": "authored",
                        "main_file": "src/foo.js",
                        "files": [
                            {"relative_path": "src/foo.js", "test": False, "name": "foo.js"}
                        ],
                    }
                },
            }
        ),
        encoding="utf-8",
    )

    assert run_worker("src/foo", tmp_path) == 0
    assert run_worker("src/missing", tmp_path) == 1

    lines = (tmp_path / "ci.jsonl").read_text(encoding="utf-8").strip().splitlines()
    first, second = (json.loads(line) for line in lines)
    assert first["ok"] is True
    assert first["metadata"] == {
        "component_id": "src/foo",
        "file_count": 1,
        "main_file": "src/foo.js",
    }
    assert second["error_code"] == "COMPONENT_NOT_FOUND"

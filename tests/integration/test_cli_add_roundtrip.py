from __future__ import annotations

import io
import json
from pathlib import Path

from comptrack.cli import main


def _run(argv: list[str]) -> tuple[int, dict[str, object]]:
    out = io.StringIO()
    code = main(argv, out_stream=out)
    return code, json.loads(out.getvalue())


def test_cli_add_success_envelope_and_audit(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "foo.js").write_text("module.exports = 1;\n", encoding="utf-8")

    code, response = _run(["--root", str(tmp_path), "add", "src/foo.js"])

    assert code == 0
    assert response["ok"] is True
    assert response["result"] == {
        "added_components": [
            {
                "id": "src/foo",
                "files": [{"relative_path": "src/foo.js", "test": False, "name": "foo.js"}],
            }
        ],
        "warnings": {},
    }

    lines = (tmp_path / ".comptrack" / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    event = json.loads(lines[-1])
    assert event["command"] == "add"
    assert event["ok"] is True
    assert event["metadata"]["added_count"] == 1
    assert event["metadata"]["paths_length"] == 1
    assert "src/foo.js" not in lines[-1]


def test_cli_add_error_envelope(tmp_path: Path) -> None:
    code, response = _run(["--root", str(tmp_path), "add", "missing.js"])

    assert code == 1
    assert response["ok"] is False
    assert response["error"]["code"] == "PATHS_NOT_EXIST"
    assert "missing.js" in response["error"]["message"]

    _, log_response = _run(["--root", str(tmp_path), "log", "--limit", "5"])
    entries = log_response["result"]["entries"]
    assert [entry["error_code"] for entry in entries] == ["PATHS_NOT_EXIST"]


def test_cli_invalid_id(tmp_path: Path) -> None:
    (tmp_path / "a.js").write_text("x\n", encoding="utf-8")

    code, response = _run(["--root", str(tmp_path), "add", "a.js", "--id", "a/b/c/d"])

    assert code == 1
    assert response["error"]["code"] == "INVALID_ID"


def test_cli_path_outside_workspace_is_blocked(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    root.mkdir()
    (tmp_path / "outside.js").write_text("x\n", encoding="utf-8")

    code, response = _run(["--root", str(root), "add", "../outside.js"])

    assert code == 1
    assert response["blocked"] is True
    assert response["error"]["code"] == "PATH_BLOCKED"


def test_cli_schema_mismatch(tmp_path: Path) -> None:
    (tmp_path / "a.js").write_text("x\n", encoding="utf-8")
    data_dir = tmp_path / ".comptrack"
    data_dir.mkdir()
    (data_dir / "index.json").write_text(
        json.dumps({"schema_version": 999, "components": {}}), encoding="utf-8"
    )

    code, response = _run(["--root", str(tmp_path), "add", "a.js"])

    assert code == 1
    assert response["error"]["code"] == "INDEX_SCHEMA_UNSUPPORTED"
    assert "999" in response["error"]["message"]


def test_cli_invalid_config(tmp_path: Path) -> None:
    (tmp_path / "comptrack.toml").write_text("[add]\nmax_workers = 0\n", encoding="utf-8")

    code, response = _run(["--root", str(tmp_path), "add", "a.js"])

    assert code == 1
    assert response["error"]["code"] == "INVALID_CONFIG"
    assert "add.max_workers" in response["error"]["message"]

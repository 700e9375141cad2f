from __future__ import annotations

from pathlib import Path

from comptrack.logging import AuditEvent, JsonlAuditLogger, get_logger, sanitize_arguments


def test_sanitize_keeps_ids_and_reduces_paths() -> None:
    sanitized = sanitize_arguments(
        {
            "id": "ui/button",
            "main": "src/secret/index.js",
            "paths": ["src/secret"],
            "override": False,
            "namespace": None,
        }
    )

    assert sanitized == {
        "id": "ui/button",
        "main_present": True,
        "main_length": len("src/secret/index.js"),
        "namespace": None,
        "override": False,
        "paths_type": "list",
        "paths_length": 1,
    }
    assert "secret" not in str(sanitized.values())


def test_read_filters_by_since_and_limit(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(tmp_path / "nested" / "audit.jsonl")
    for index, timestamp in enumerate(
        ["2026-01-01T00:00:00.000Z", "2026-01-02T00:00:00.000Z", "2026-01-03T00:00:00.000Z"]
    ):
        logger.append(
            AuditEvent(
                timestamp=timestamp,
                command="add",
                ok=True,
                error_code=None,
                metadata={"n": index},
            )
        )
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    assert len(logger.read()) == 3
    assert [entry["metadata"] for entry in logger.read(since="2026-01-02")] == [{"n": 1}, {"n": 2}]
    assert [entry["metadata"] for entry in logger.read(limit=1)] == [{"n": 2}]
    assert logger.read(limit=0) == []


def test_loggers_are_namespaced() -> None:
    assert get_logger("add").name == "comptrack.add"

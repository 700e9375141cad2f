from __future__ import annotations

import json
from pathlib import Path

import pytest

from comptrack.index import (
    INDEX_SCHEMA_VERSION,
    ComponentIndex,
    ComponentOrigin,
    FileEntry,
    IndexSchemaUnsupportedError,
)


def _write_index(data_dir: Path, components: dict[str, object], schema: int = 1) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "index.json").write_text(
        json.dumps({"schema_version": schema, "components": components}, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def test_missing_index_file_loads_empty(tmp_path: Path) -> None:
    index = ComponentIndex(tmp_path / ".comptrack").load()

    assert dict(index.snapshot()) == {}


def test_persist_then_load_keeps_records(tmp_path: Path) -> None:
    data_dir = tmp_path / ".comptrack"
    index = ComponentIndex(data_dir).load()
    index.upsert(
        component_id="src/foo",
        files=[FileEntry(relative_path="src/foo.js")],
        main_file="src/foo.js",
        root_dir=None,
        origin=ComponentOrigin.AUTHORED,
        override=False,
    )
    index.persist()

    payload = json.loads((data_dir / "index.json").read_text(encoding="utf-8"))
    assert payload["schema_version"] == INDEX_SCHEMA_VERSION
    assert payload["components"]["src/foo"]["files"] == [
        {"name": "foo.js", "relative_path": "src/foo.js", "test": False}
    ]
    assert not (data_dir / "index.json.tmp").exists()

    reloaded = ComponentIndex(data_dir).load()
    record = reloaded.get("src/foo")
    assert record is not None
    assert record.origin is ComponentOrigin.AUTHORED
    assert record.main_file == "src/foo.js"


def test_schema_version_mismatch_raises(tmp_path: Path) -> None:
    data_dir = tmp_path / ".comptrack"
    _write_index(data_dir, {}, schema=999)

    with pytest.raises(IndexSchemaUnsupportedError) as excinfo:
        ComponentIndex(data_dir).load()

    assert excinfo.value.found == 999
    assert excinfo.value.expected == INDEX_SCHEMA_VERSION


def test_upsert_merges_new_paths_and_replaces_same_path(tmp_path: Path) -> None:
    index = ComponentIndex(tmp_path / ".comptrack").load()
    for files in (
        [FileEntry(relative_path="a/x.js"), FileEntry(relative_path="a/y.js")],
        [FileEntry(relative_path="a/y.js", test=True), FileEntry(relative_path="a/z.js")],
    ):
        index.upsert("a/x", files, None, None, ComponentOrigin.AUTHORED, override=False)

    record = index.get("a/x")
    assert record is not None
    assert [(entry.relative_path, entry.test) for entry in record.files] == [
        ("a/x.js", False),
        ("a/y.js", True),
        ("a/z.js", False),
    ]


def test_upsert_with_override_replaces_file_set(tmp_path: Path) -> None:
    index = ComponentIndex(tmp_path / ".comptrack").load()
    index.upsert(
        "a/x",
        [FileEntry(relative_path="a/x.js"), FileEntry(relative_path="a/y.js")],
        None,
        None,
        ComponentOrigin.AUTHORED,
        override=False,
    )
    index.upsert(
        "a/x", [FileEntry(relative_path="a/z.js")], None, None, ComponentOrigin.AUTHORED, True
    )

    record = index.get("a/x")
    assert record is not None
    assert [entry.relative_path for entry in record.files] == ["a/z.js"]


def test_imported_records_keep_paths_relative_to_root_dir(tmp_path: Path) -> None:
    data_dir = tmp_path / ".comptrack"
    _write_index(
        data_dir,
        {
            "utils/is-string@0.0.1": {
                "origin": "imported",
                "root_dir": "components/utils/is-string",
                "main_file": "index.js",
                "files": [{"relative_path": "index.js", "test": False, "name": "index.js"}],
            }
        },
    )
    index = ComponentIndex(data_dir).load()

    assert index.owner_of_path("components/utils/is-string/index.js") == "utils/is-string@0.0.1"
    record = index.upsert(
        "utils/is-string@0.0.1",
        [FileEntry(relative_path="components/utils/is-string/extra.js")],
        None,
        "components/utils/is-string",
        ComponentOrigin.AUTHORED,
        override=False,
    )
    assert record.origin is ComponentOrigin.IMPORTED
    assert [entry.relative_path for entry in record.files] == ["index.js", "extra.js"]


def test_lenient_lookup_matches_namespace_and_name(tmp_path: Path) -> None:
    data_dir = tmp_path / ".comptrack"
    _write_index(
        data_dir,
        {"acme/utils/is-string@0.0.2": {"origin": "imported", "files": []}},
    )
    index = ComponentIndex(data_dir).load()

    assert index.get("utils/is-string") is None
    assert index.get("utils/is-string", lenient=True) is not None
    assert index.get("utils/other", lenient=True) is None


def test_imported_record_stores_outside_paths_climbing_out_of_root_dir(tmp_path: Path) -> None:
    data_dir = tmp_path / ".comptrack"
    _write_index(
        data_dir,
        {
            "bar/foo@0.0.1": {
                "origin": "imported",
                "root_dir": "components/foo",
                "main_file": "index.js",
                "files": [{"relative_path": "index.js", "test": False, "name": "index.js"}],
            }
        },
    )
    index = ComponentIndex(data_dir).load()

    record = index.upsert(
        "bar/foo@0.0.1",
        [FileEntry(relative_path="src/extra.js")],
        "src/extra.js",
        None,
        ComponentOrigin.AUTHORED,
        override=False,
    )

    assert [entry.relative_path for entry in record.files] == ["index.js", "../../src/extra.js"]
    assert record.main_file == "../../src/extra.js"
    assert record.workspace_paths() == ["components/foo/index.js", "src/extra.js"]
    assert index.owner_of_path("src/extra.js") == "bar/foo@0.0.1"
    assert index.owner_of_path("components/foo/src/extra.js") is None

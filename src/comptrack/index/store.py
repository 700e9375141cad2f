"""Persistent component index storage."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from comptrack.ids import ComponentId, InvalidIdError
from comptrack.index.models import (
    ComponentOrigin,
    ComponentRecord,
    FileEntry,
    join_posix,
    relative_posix,
)

INDEX_SCHEMA_VERSION = 1
INDEX_FILENAME = "index.json"


@dataclass(slots=True, frozen=True)
class IndexSchemaUnsupportedError(Exception):
    """Raised when stored index schema does not match supported version."""

    found: int
    expected: int


class ComponentIndex:
    """In-memory view of the on-disk component index.

    Loaded once, mutated in memory and written back with `persist()`.
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir.resolve()
        self._index_path = self._data_dir / INDEX_FILENAME
        self._components: dict[str, ComponentRecord] = {}

    @property
    def path(self) -> Path:
        """Return on-disk index path."""
        return self._index_path

    def load(self) -> ComponentIndex:
        """Read stored records; a missing file yields an empty index."""
        self._components = {}
        if not self._index_path.exists():
            return self
        with self._index_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            return self
        schema = payload.get("schema_version")
        if not isinstance(schema, int):
            raise IndexSchemaUnsupportedError(found=-1, expected=INDEX_SCHEMA_VERSION)
        if schema != INDEX_SCHEMA_VERSION:
            raise IndexSchemaUnsupportedError(found=schema, expected=INDEX_SCHEMA_VERSION)
        components = payload.get("components", {})
        if not isinstance(components, dict):
            return self
        for component_id, raw in sorted(components.items()):
            record = _record_from_dict(raw)
            if record is not None:
                self._components[component_id] = record
        return self

    def snapshot(self) -> Mapping[str, ComponentRecord]:
        """Return a read-only view of the current records."""
        return MappingProxyType(self._components)

    def get(self, component_id: str, lenient: bool = False) -> ComponentRecord | None:
        """Return a record by id, optionally matching by namespace+name only."""
        if not lenient:
            return self._components.get(component_id)
        existing = find_existing_id(component_id, self._components)
        if existing is None:
            return None
        return self._components[existing]

    def owner_of_path(self, relative_path: str) -> str | None:
        """Return the id of the component tracking a workspace-relative path."""
        wanted = join_posix(relative_path)
        for component_id, record in self._components.items():
            if wanted in record.workspace_paths():
                return component_id
        return None

    def records_of_origin(self, origin: ComponentOrigin) -> dict[str, ComponentRecord]:
        """Return all records with the given origin."""
        return {
            component_id: record
            for component_id, record in self._components.items()
            if record.origin is origin
        }

    def upsert(
        self,
        component_id: str,
        files: list[FileEntry],
        main_file: str | None,
        root_dir: str | None,
        origin: ComponentOrigin,
        override: bool,
    ) -> ComponentRecord:
        """Insert or update a record and return it as stored.

        An existing record keeps its origin. With `override` its file set is
        replaced; otherwise incoming entries replace same-path entries and
        new paths are appended.
        """
        record = self._components.get(component_id)
        if record is None:
            record = ComponentRecord(origin=origin, root_dir=_normalized_or_none(root_dir))
            self._components[component_id] = record
        elif root_dir and record.origin is ComponentOrigin.AUTHORED:
            record.root_dir = _normalized_or_none(root_dir)

        stored = [self._to_stored_entry(record, entry) for entry in files]
        if override:
            record.files = _unique_by_path(stored)
        else:
            record.files = _merge_entries(record.files, stored)
        if main_file:
            record.main_file = self._to_stored_path(record, main_file)
        return record

    def persist(self) -> None:
        """Write all records atomically."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "schema_version": INDEX_SCHEMA_VERSION,
            "components": {
                component_id: self._components[component_id].to_dict()
                for component_id in sorted(self._components)
            },
        }
        tmp = self._index_path.with_suffix(self._index_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, sort_keys=True, indent=2)
            handle.write("\n")
        tmp.replace(self._index_path)

    @staticmethod
    def _to_stored_path(record: ComponentRecord, relative_path: str) -> str:
        if record.files_relative_to_root_dir:
            return relative_posix(record.root_dir or "", relative_path)
        return join_posix(relative_path)

    def _to_stored_entry(self, record: ComponentRecord, entry: FileEntry) -> FileEntry:
        return FileEntry(
            relative_path=self._to_stored_path(record, entry.relative_path),
            test=entry.test,
            name=entry.name,
        )


def find_existing_id(candidate: str, components: Mapping[str, ComponentRecord]) -> str | None:
    """Return the stored id equal to `candidate` or sharing its namespace+name."""
    if candidate in components:
        return candidate
    try:
        wanted = ComponentId.parse(candidate).to_string_without_scope_and_version()
    except InvalidIdError:
        return None
    for stored in sorted(components):
        try:
            parsed = ComponentId.parse(stored)
        except InvalidIdError:
            continue
        if parsed.to_string_without_scope_and_version() == wanted:
            return stored
    return None


def _merge_entries(current: list[FileEntry], incoming: list[FileEntry]) -> list[FileEntry]:
    by_path = {entry.relative_path: entry for entry in incoming}
    merged: list[FileEntry] = []
    seen: set[str] = set()
    for entry in current:
        merged.append(by_path.get(entry.relative_path, entry))
        seen.add(entry.relative_path)
    for entry in incoming:
        if entry.relative_path in seen:
            continue
        merged.append(entry)
        seen.add(entry.relative_path)
    return merged


def _unique_by_path(entries: list[FileEntry]) -> list[FileEntry]:
    output: list[FileEntry] = []
    seen: set[str] = set()
    for entry in entries:
        if entry.relative_path in seen:
            continue
        seen.add(entry.relative_path)
        output.append(entry)
    return output


def _normalized_or_none(value: str | None) -> str | None:
    if not value:
        return None
    return join_posix(value) or None


def _record_from_dict(raw: object) -> ComponentRecord | None:
    if not isinstance(raw, dict):
        return None
    try:
        origin = ComponentOrigin(raw.get("origin"))
    except ValueError:
        return None
    files: list[FileEntry] = []
    raw_files = raw.get("files", [])
    if isinstance(raw_files, list):
        for item in raw_files:
            if not isinstance(item, dict):
                continue
            relative_path = item.get("relative_path")
            if not isinstance(relative_path, str):
                continue
            name = item.get("name")
            files.append(
                FileEntry(
                    relative_path=relative_path,
                    test=item.get("test") is True,
                    name=name if isinstance(name, str) else "",
                )
            )
    main_file = raw.get("main_file")
    root_dir = raw.get("root_dir")
    return ComponentRecord(
        origin=origin,
        files=files,
        main_file=main_file if isinstance(main_file, str) else None,
        root_dir=root_dir if isinstance(root_dir, str) else None,
    )

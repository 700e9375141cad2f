"""Typed models for the add operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from comptrack.ids import ComponentId
from comptrack.index import FileEntry

Warnings = dict[str, list[str]]


@dataclass(slots=True, frozen=True)
class AddRequest:
    """User input of one add invocation."""

    component_paths: tuple[str, ...]
    id: str | None = None
    main: str | None = None
    namespace: str | None = None
    tests: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    override: bool = False


@dataclass(slots=True)
class ResolvedComponent:
    """Files resolved for one component before reconciliation."""

    component_id: ComponentId
    files: list[FileEntry] = field(default_factory=list)
    main_file: str | None = None
    root_dir: str | None = None
    source_paths: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class AddResult:
    """Component added or updated by the operation, as stored."""

    id: str
    files: tuple[FileEntry, ...]

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "files": [entry.to_dict() for entry in self.files]}


@dataclass(slots=True, frozen=True)
class AddActionResults:
    """Outcome of one add invocation."""

    added_components: tuple[AddResult, ...]
    warnings: Warnings

    def to_dict(self) -> dict[str, object]:
        return {
            "added_components": [result.to_dict() for result in self.added_components],
            "warnings": {key: list(value) for key, value in sorted(self.warnings.items())},
        }


def merge_warnings(target: Warnings, incoming: Warnings) -> Warnings:
    """Append `incoming` paths into `target` per conflicting id and return it."""
    for component_id, paths in incoming.items():
        target.setdefault(component_id, []).extend(paths)
    return target

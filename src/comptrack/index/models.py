"""Typed models for tracked component state."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum


class ComponentOrigin(str, Enum):
    """Provenance of a tracked component."""

    AUTHORED = "authored"
    IMPORTED = "imported"
    NESTED = "nested"


@dataclass(slots=True)
class FileEntry:
    """Represents one file of a component; identity is `relative_path`."""

    relative_path: str
    test: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.relative_path.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, object]:
        return {"relative_path": self.relative_path, "test": self.test, "name": self.name}


@dataclass(slots=True)
class ComponentRecord:
    """Tracked component as stored in the index.

    Records of imported or nested origin keep file paths relative to
    `root_dir`; authored records keep workspace-relative paths.
    """

    origin: ComponentOrigin
    files: list[FileEntry] = field(default_factory=list)
    main_file: str | None = None
    root_dir: str | None = None

    @property
    def files_relative_to_root_dir(self) -> bool:
        return bool(self.root_dir) and self.origin is not ComponentOrigin.AUTHORED

    def workspace_path(self, entry: FileEntry) -> str:
        """Return the workspace-relative path of a stored entry."""
        if self.files_relative_to_root_dir:
            return join_posix(self.root_dir or "", entry.relative_path)
        return entry.relative_path

    def workspace_paths(self) -> list[str]:
        return [self.workspace_path(entry) for entry in self.files]

    def to_dict(self) -> dict[str, object]:
        return {
            "origin": self.origin.value,
            "files": [entry.to_dict() for entry in self.files],
            "main_file": self.main_file,
            "root_dir": self.root_dir,
        }


def join_posix(*parts: str) -> str:
    """Join forward-slash path chunks, skipping empty and `.` chunks and folding `..`."""
    chunks: list[str] = []
    for part in parts:
        for chunk in part.replace("\\", "/").split("/"):
            if chunk in ("", "."):
                continue
            if chunk == ".." and chunks and chunks[-1] != "..":
                chunks.pop()
                continue
            chunks.append(chunk)
    return "/".join(chunks)


def relative_posix(base: str, path: str) -> str:
    """Return `path` relative to `base`, climbing out with `..` when needed."""
    normalized_base = join_posix(base)
    normalized = join_posix(path)
    if not normalized_base:
        return normalized
    return posixpath.relpath(normalized, normalized_base)

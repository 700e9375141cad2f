"""Path validation, glob expansion and directory enumeration."""

from __future__ import annotations

import glob
import os
from dataclasses import dataclass
from pathlib import Path

from comptrack.errors import PathsNotExistError
from comptrack.workspace.ignore import IgnoreFilter
from comptrack.workspace.paths import (
    is_absolute_style,
    normalize_to_posix,
    resolve_workspace_path,
    to_workspace_relative,
)

AUTO_GENERATED_MARKER = "THIS IS AN AUTO-GENERATED FILE. EDIT AT YOUR OWN RISK"
_FIRST_LINE_SNIFF_BYTES = 512


@dataclass(slots=True, frozen=True)
class PathStat:
    """Kind of one validated input path."""

    is_dir: bool


def validate_paths(repo_root: Path, relative_paths: list[str]) -> dict[str, PathStat]:
    """Confirm every path exists and classify it; report all missing paths at once."""
    stats: dict[str, PathStat] = {}
    missing: list[str] = []
    for relative_path in relative_paths:
        full_path = resolve_workspace_path(repo_root, relative_path)
        if not full_path.exists():
            missing.append(relative_path)
            continue
        stats[relative_path] = PathStat(is_dir=full_path.is_dir())
    if missing:
        raise PathsNotExistError(missing)
    return stats


def expand_pattern(repo_root: Path, pattern: str) -> list[str]:
    """Expand one path or glob pattern into sorted workspace-relative paths."""
    root = repo_root.resolve()
    normalized = normalize_to_posix(pattern)
    if not normalized:
        return []
    if is_absolute_style(normalized):
        matches = glob.glob(normalized, recursive=True)
    else:
        matches = glob.glob(normalized, root_dir=root, recursive=True)
    return sorted(to_workspace_relative(root, match) for match in matches)


def expand_component_paths(repo_root: Path, patterns: list[str]) -> list[str]:
    """Expand user paths in input order, dropping duplicates."""
    output: list[str] = []
    seen: set[str] = set()
    for pattern in patterns:
        for match in expand_pattern(repo_root, pattern):
            if match in seen:
                continue
            seen.add(match)
            output.append(match)
    return output


def enumerate_directory_files(
    repo_root: Path, relative_dir: str, ignore: IgnoreFilter
) -> list[str]:
    """Walk a directory deterministically and return its non-ignored files."""
    root = repo_root.resolve()
    start = resolve_workspace_path(root, relative_dir)
    files: list[str] = []
    stack: list[Path] = [start]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError:
            continue
        for entry in reversed(ordered_entries):
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if ignore.is_ignored(relative, is_dir=True):
                    continue
                stack.append(full_path)
                continue
            if not entry.is_file():
                continue
            if ignore.is_ignored(relative):
                continue
            files.append(relative)
    files.sort()
    return files


def is_auto_generated_file(path: Path) -> bool:
    """Return True when the first line carries the auto-generated marker."""
    if not path.is_file():
        return False
    with path.open("rb") as handle:
        sample = handle.read(_FIRST_LINE_SNIFF_BYTES)
    first_line = sample.split(b"\n", 1)[0].decode("utf-8", errors="replace")
    return AUTO_GENERATED_MARKER in first_line

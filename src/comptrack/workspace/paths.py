"""Path normalization helpers for workspace-scoped access."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathOutsideWorkspaceError(Exception):
    """Raised when a requested path resolves outside the workspace root."""

    code = "PATH_OUTSIDE_WORKSPACE"

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def normalize_to_posix(candidate: str) -> str:
    """Convert separators to forward slashes and drop redundant chunks."""
    normalized = candidate.replace("\\", "/").strip()
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized


def is_absolute_style(candidate: str) -> bool:
    """Return True for POSIX or Windows absolute path strings."""
    normalized = candidate.replace("\\", "/")
    return normalized.startswith("/") or bool(WINDOWS_ABSOLUTE_PATTERN.match(normalized))


def resolve_workspace_path(repo_root: Path, candidate: str) -> Path:
    """Resolve a candidate path against the workspace root with containment check."""
    root = repo_root.resolve()
    normalized = normalize_to_posix(candidate)
    if not normalized:
        raise PathOutsideWorkspaceError(
            reason="Path is empty.",
            hint="Provide a workspace-relative path such as 'src/foo.js'.",
        )
    if is_absolute_style(normalized):
        resolved = Path(normalized).resolve(strict=False)
    else:
        resolved = (root / normalized).resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise PathOutsideWorkspaceError(
            reason="Resolved path escapes the workspace root.",
            hint="Use a path located under the workspace root.",
        )
    return resolved


def to_workspace_relative(repo_root: Path, candidate: str) -> str:
    """Return the forward-slash path of `candidate` relative to the workspace root."""
    resolved = resolve_workspace_path(repo_root, candidate)
    relative = resolved.relative_to(repo_root.resolve()).as_posix()
    return relative or "."

"""Workspace filesystem primitives: paths, ignore rules and discovery."""

from .discovery import (
    AUTO_GENERATED_MARKER,
    PathStat,
    enumerate_directory_files,
    expand_component_paths,
    expand_pattern,
    is_auto_generated_file,
    validate_paths,
)
from .ignore import IgnoreFilter, build_ignore_filter, build_ignore_list, retrieve_base_ignore_list
from .paths import (
    PathOutsideWorkspaceError,
    normalize_to_posix,
    resolve_workspace_path,
    to_workspace_relative,
)

__all__ = [
    "AUTO_GENERATED_MARKER",
    "IgnoreFilter",
    "PathOutsideWorkspaceError",
    "PathStat",
    "build_ignore_filter",
    "build_ignore_list",
    "enumerate_directory_files",
    "expand_component_paths",
    "expand_pattern",
    "is_auto_generated_file",
    "normalize_to_posix",
    "resolve_workspace_path",
    "retrieve_base_ignore_list",
    "to_workspace_relative",
    "validate_paths",
]

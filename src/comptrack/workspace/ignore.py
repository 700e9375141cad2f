"""Ignore rules applied to every file enumeration."""

from __future__ import annotations

from collections.abc import Container, Iterable

import pathspec

from comptrack.config import TrackerConfig
from comptrack.index import ComponentIndex, ComponentOrigin, join_posix

GITIGNORE_FILENAME = ".gitignore"


class IgnoreFilter:
    """Gitignore-style exclusion predicate over workspace-relative paths."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self._patterns = tuple(patterns)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self._patterns)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        """Return True when a path (or a directory holding it) is ignored."""
        normalized = join_posix(relative_path)
        if not normalized:
            return False
        if is_dir and self._spec.match_file(f"{normalized}/"):
            return True
        return self._spec.match_file(normalized)

    def filter(
        self, relative_paths: Iterable[str], directories: Container[str] = ()
    ) -> list[str]:
        """Return paths not matched by the ignore rules, order preserved.

        Paths listed in `directories` are also matched by directory-only patterns.
        """
        return [
            path
            for path in relative_paths
            if not self.is_ignored(path, is_dir=path in directories)
        ]

    def difference(
        self, relative_paths: Iterable[str], directories: Container[str] = ()
    ) -> list[str]:
        """Return paths removed by the ignore rules, order preserved."""
        return [
            path for path in relative_paths if self.is_ignored(path, is_dir=path in directories)
        ]


def retrieve_base_ignore_list(config: TrackerConfig) -> list[str]:
    """Collect configured globs, the data directory and root .gitignore lines."""
    patterns = list(config.index.ignore_globs)
    if config.data_dir.is_relative_to(config.repo_root) and config.data_dir != config.repo_root:
        patterns.append(f"/{config.data_dir.relative_to(config.repo_root).as_posix()}/")
    gitignore = config.repo_root / GITIGNORE_FILENAME
    if gitignore.is_file():
        for raw_line in gitignore.read_text(encoding="utf-8", errors="replace").splitlines():
            stripped = raw_line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            patterns.append(stripped)
    return patterns


def build_ignore_list(config: TrackerConfig, index: ComponentIndex) -> list[str]:
    """Base ignore list plus dist output of imported components.

    Dist directories are only ignored when no custom dist target is configured.
    """
    patterns = retrieve_base_ignore_list(config)
    if config.index.dist_target:
        return patterns
    imported = index.records_of_origin(ComponentOrigin.IMPORTED)
    for component_id in sorted(imported):
        root_dir = imported[component_id].root_dir or ""
        patterns.append(f"/{join_posix(root_dir, config.index.dist_dirname)}/**")
    return patterns


def build_ignore_filter(config: TrackerConfig, index: ComponentIndex) -> IgnoreFilter:
    """Build the single exclusion predicate for one add invocation."""
    return IgnoreFilter(build_ignore_list(config, index))

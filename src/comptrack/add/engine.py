"""Add orchestration: resolve paths into components and record them in the index."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from pathlib import Path

from comptrack.add.dsl import has_placeholders, match_patterns
from comptrack.add.models import (
    AddActionResults,
    AddRequest,
    AddResult,
    ResolvedComponent,
    Warnings,
    merge_warnings,
)
from comptrack.add.reconcile import reconcile_component
from comptrack.add.resolver import ResolutionContext, promote_to_existing, resolve_path
from comptrack.ci import run_post_add_hook
from comptrack.concurrency import run_indexed_tasks_fail_fast
from comptrack.config import TrackerConfig
from comptrack.errors import DuplicateIdsError, NoFilesError, PathsNotExistError
from comptrack.ids import ComponentId
from comptrack.index import ComponentIndex, ComponentRecord, FileEntry, join_posix
from comptrack.logging import get_logger
from comptrack.workspace import (
    IgnoreFilter,
    PathStat,
    build_ignore_filter,
    expand_component_paths,
    expand_pattern,
    validate_paths,
)

logger = get_logger("add")


class AddComponents:
    """One add invocation against a loaded component index.

    Resolution work is fanned out; every index read that decides an id and
    every index write happens afterwards, sequentially. The index is
    persisted once, at the end of a successful run.
    """

    def __init__(self, config: TrackerConfig, index: ComponentIndex, request: AddRequest) -> None:
        self._config = config
        self._repo_root = config.repo_root
        self._index = index
        self._request = request

    def add(self) -> AddActionResults:
        """Run the whole add operation and persist the index."""
        request = self._request
        ignore = build_ignore_filter(self._config, self._index)
        snapshot = self._index.snapshot()

        missing_tests = find_missing_test_files(self._repo_root, list(request.tests))
        if missing_tests:
            raise PathsNotExistError(missing_tests)

        path_stats = self._validated_path_stats(ignore)
        explicit_id = self._explicit_id(snapshot)
        context = ResolutionContext(
            repo_root=self._repo_root,
            ignore=ignore,
            tests=request.tests,
            main=request.main,
            namespace=request.namespace,
            explicit_id=explicit_id,
        )

        multiple = len(path_stats) > 1 and explicit_id is None
        if multiple:
            logger.debug("add: multiple components")
            components = self._resolve_each_path(context, path_stats)
        else:
            logger.debug("add: one component")
            components = [self._resolve_group(context, path_stats)]
        if explicit_id is None:
            for component in components:
                component.component_id = promote_to_existing(component.component_id, snapshot)
        if multiple:
            validate_no_duplicate_ids(components)

        warnings: Warnings = {}
        added: list[AddResult] = []

        for component in components:
            if not component.files:
                continue
            outcome = reconcile_component(
                self._index,
                component,
                repo_root=self._repo_root,
                explicit_id=request.id,
                override=request.override,
            )
            merge_warnings(warnings, outcome.warnings)
            if outcome.result is not None:
                added.append(outcome.result)

        self._index.persist()
        return AddActionResults(added_components=tuple(added), warnings=warnings)

    def _validated_path_stats(self, ignore: IgnoreFilter) -> dict[str, PathStat]:
        request = self._request
        matched = expand_component_paths(self._repo_root, list(request.component_paths))
        directories = {path for path in matched if (self._repo_root / path).is_dir()}
        kept = ignore.filter(matched, directories)
        ignored = ignore.difference(matched, directories)

        if request.tests and request.id and not matched:
            test_paths = expand_component_paths(self._repo_root, list(request.tests))
            if not test_paths:
                raise PathsNotExistError(list(request.component_paths))
            return validate_paths(self._repo_root, test_paths)
        if not matched:
            raise PathsNotExistError(list(request.component_paths))
        if not kept:
            raise NoFilesError(ignored)
        return validate_paths(self._repo_root, kept)

    def _explicit_id(self, snapshot: Mapping[str, ComponentRecord]) -> ComponentId | None:
        if not self._request.id:
            return None
        return promote_to_existing(ComponentId.parse(self._request.id), snapshot)

    def _resolve_each_path(
        self,
        context: ResolutionContext,
        path_stats: dict[str, PathStat],
    ) -> list[ResolvedComponent]:
        """One component per path; paths that are test files of other paths are skipped."""
        test_paths: list[str] = []
        if context.tests:
            test_paths = match_patterns(
                self._repo_root, list(path_stats), list(context.tests), context.ignore
            )
        remaining = {
            path: stat for path, stat in path_stats.items() if join_posix(path) not in test_paths
        }
        tasks = [
            partial(self._resolve_group, context, {path: stat}) for path, stat in remaining.items()
        ]
        return run_indexed_tasks_fail_fast(tasks, max_workers=self._config.add.max_workers)

    def _resolve_group(
        self,
        context: ResolutionContext,
        path_stats: dict[str, PathStat],
    ) -> ResolvedComponent:
        """Resolve all paths of a group as one component.

        The group takes the explicit id or the candidate id of its first path.
        """
        group_size = len(path_stats)
        tasks = [
            partial(resolve_path, context, path, stat, group_size)
            for path, stat in path_stats.items()
        ]
        resolved = run_indexed_tasks_fail_fast(tasks, max_workers=self._config.add.max_workers)

        component_id = resolved[0].component_id
        for component in resolved:
            component.component_id = component_id

        if self._request.exclude:
            remove_excluded_files(
                self._repo_root, resolved, list(self._request.exclude), context.ignore
            )
        non_empty = [component for component in resolved if component.files]
        if not non_empty:
            return ResolvedComponent(
                component_id=component_id, source_paths=tuple(path_stats)
            )
        if len(non_empty) == 1:
            return non_empty[0]
        return union_components(component_id, non_empty)


def find_missing_test_files(repo_root: Path, tests: list[str]) -> list[str]:
    """Return literal test paths that match nothing on disk."""
    return [
        test for test in tests if not has_placeholders(test) and not expand_pattern(repo_root, test)
    ]


def remove_excluded_files(
    repo_root: Path,
    components: list[ResolvedComponent],
    exclude: list[str],
    ignore: IgnoreFilter,
) -> None:
    """Strip excluded files; a component whose main file is excluded loses all files."""
    candidates = [entry.relative_path for component in components for entry in component.files]
    excluded = set(match_patterns(repo_root, candidates, exclude, ignore))
    for component in components:
        main_file = component.main_file.replace("\\", "/") if component.main_file else None
        if main_file is not None and main_file in excluded:
            component.files = []
            continue
        component.files = [
            entry for entry in component.files if entry.relative_path not in excluded
        ]


def union_components(
    component_id: ComponentId, components: list[ResolvedComponent]
) -> ResolvedComponent:
    """Union file sets by path in first-seen order; a path is a test if any group says so."""
    merged: dict[str, FileEntry] = {}
    for component in components:
        for entry in component.files:
            current = merged.get(entry.relative_path)
            if current is None:
                merged[entry.relative_path] = FileEntry(
                    relative_path=entry.relative_path, test=entry.test, name=entry.name
                )
                continue
            current.test = current.test or entry.test
    first = components[0]
    return ResolvedComponent(
        component_id=component_id,
        files=list(merged.values()),
        main_file=first.main_file,
        root_dir=first.root_dir,
        source_paths=tuple(path for component in components for path in component.source_paths),
    )


def validate_no_duplicate_ids(components: list[ResolvedComponent]) -> None:
    """Raise when two independently resolved paths share one id."""
    grouped: dict[str, list[str]] = {}
    for component in components:
        grouped.setdefault(component.component_id.to_string(), []).extend(component.source_paths)
    duplicates = {
        component_id: paths
        for component_id, paths in grouped.items()
        if len(paths) > 1
    }
    if duplicates:
        raise DuplicateIdsError(duplicates)


def add_components(
    config: TrackerConfig, request: AddRequest, index: ComponentIndex | None = None
) -> AddActionResults:
    """Load the index, run one add invocation, persist it and trigger the post-add hook."""
    loaded = index if index is not None else ComponentIndex(config.data_dir).load()
    results = AddComponents(config=config, index=loaded, request=request).add()
    for result in results.added_components:
        run_post_add_hook(result.id, config.data_dir, config.ci)
    return results

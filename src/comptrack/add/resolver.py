"""Resolve one input path into a candidate component."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from comptrack.add.dsl import has_placeholders, match_patterns, substitute
from comptrack.add.models import ResolvedComponent
from comptrack.errors import EmptyDirectoryError, NestedIdCollisionError
from comptrack.ids import ComponentId
from comptrack.index import ComponentOrigin, ComponentRecord, FileEntry, find_existing_id, join_posix
from comptrack.workspace import (
    IgnoreFilter,
    PathStat,
    enumerate_directory_files,
    resolve_workspace_path,
    to_workspace_relative,
)


@dataclass(slots=True, frozen=True)
class ResolutionContext:
    """Inputs shared by every path resolution of one invocation."""

    repo_root: Path
    ignore: IgnoreFilter
    tests: tuple[str, ...] = ()
    main: str | None = None
    namespace: str | None = None
    explicit_id: ComponentId | None = None


def promote_to_existing(
    candidate: ComponentId, snapshot: Mapping[str, ComponentRecord]
) -> ComponentId:
    """Adopt the stored form of `candidate` when the index already tracks it.

    The stored form may carry a scope or version the derived id lacks. Ids
    reserved by nested dependencies cannot be taken over by a direct add.
    """
    existing = find_existing_id(candidate.to_string(), snapshot)
    if existing is None:
        return candidate
    if snapshot[existing].origin is ComponentOrigin.NESTED:
        raise NestedIdCollisionError(existing)
    return ComponentId.parse(existing)


def resolve_path(
    context: ResolutionContext,
    relative_path: str,
    stat: PathStat,
    group_size: int,
) -> ResolvedComponent:
    """Resolve files, main file and candidate id for one validated path."""
    full_path = resolve_workspace_path(context.repo_root, relative_path)
    relative = PurePosixPath(to_workspace_relative(context.repo_root, relative_path))
    parent_name = relative.parent.name or full_path.parent.name
    if stat.is_dir:
        matches = enumerate_directory_files(context.repo_root, relative_path, context.ignore)
        if not matches:
            raise EmptyDirectoryError(relative_path)
        files = [FileEntry(relative_path=match) for match in matches]
        namespace = context.namespace or parent_name
        name = full_path.name
        root_dir = relative_path if group_size == 1 else None
    else:
        files = [FileEntry(relative_path=relative_path)]
        namespace = context.namespace or parent_name
        name = full_path.stem
        root_dir = None

    files = merge_test_files(context, files)
    main_file = resolve_main_file(context, files)
    component_id = context.explicit_id or ComponentId.from_path_segments(namespace, name)
    return ResolvedComponent(
        component_id=component_id,
        files=files,
        main_file=main_file,
        root_dir=root_dir,
        source_paths=(relative_path,),
    )


def merge_test_files(context: ResolutionContext, files: list[FileEntry]) -> list[FileEntry]:
    """Union test files found by the test patterns into `files`, keyed by path.

    Present entries keep their position and are flagged as tests when a
    pattern names them; newly found tests are appended.
    """
    if not context.tests:
        return files
    test_paths = match_patterns(
        context.repo_root,
        [entry.relative_path for entry in files],
        list(context.tests),
        context.ignore,
    )
    wanted = set(test_paths)
    merged: list[FileEntry] = []
    present: set[str] = set()
    for entry in files:
        if entry.relative_path in present:
            continue
        present.add(entry.relative_path)
        if entry.relative_path in wanted and not entry.test:
            entry = FileEntry(relative_path=entry.relative_path, test=True, name=entry.name)
        merged.append(entry)
    for test_path in test_paths:
        if test_path in present:
            continue
        present.add(test_path)
        merged.append(FileEntry(relative_path=test_path, test=True))
    return merged


def resolve_main_file(context: ResolutionContext, files: list[FileEntry]) -> str | None:
    """Resolve the main file, appending a pattern-discovered one to `files`.

    The first placeholder substitution naming a listed or existing file is
    adopted. A literal or unmatched value is returned relative to the
    workspace root whether or not it exists.
    """
    main = context.main
    if not main:
        return None
    if has_placeholders(main):
        adopted: str | None = None
        for entry in list(files):
            generated = join_posix(substitute(main, entry.relative_path))
            listed = any(item.relative_path == generated for item in files)
            if listed:
                adopted = adopted or generated
                continue
            if generated and (context.repo_root / generated).is_file():
                files.append(FileEntry(relative_path=generated))
                adopted = adopted or generated
        if adopted is not None:
            return adopted
    return to_workspace_relative(context.repo_root, main)

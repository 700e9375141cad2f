"""Merge resolved components into the persistent index."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from comptrack.add.models import AddResult, ResolvedComponent, Warnings
from comptrack.errors import (
    IncorrectIdForImportedComponentError,
    MissingComponentIdForImportedComponentError,
)
from comptrack.ids import ComponentId, InvalidIdError
from comptrack.index import ComponentIndex, ComponentOrigin, ComponentRecord, FileEntry
from comptrack.logging import get_logger
from comptrack.workspace import is_auto_generated_file

logger = get_logger("add.reconcile")


class OwnerRelation(str, Enum):
    """How the current owner of a file relates to the component being added."""

    NONE = "none"
    SAME = "same"
    DIFFERENT = "different"


class FileDecision(str, Enum):
    """Outcome for one candidate file."""

    KEEP = "keep"
    KEEP_EXISTING_ENTRY = "keep_existing_entry"
    DROP_CONFLICT = "drop_conflict"
    FAIL_MISSING_ID = "fail_missing_id"
    FAIL_INCORRECT_ID = "fail_incorrect_id"


# (imported, explicit id supplied, owner relation) -> decision
_DECISIONS: dict[tuple[bool, bool, OwnerRelation], FileDecision] = {
    (True, False, OwnerRelation.NONE): FileDecision.FAIL_MISSING_ID,
    (True, False, OwnerRelation.SAME): FileDecision.FAIL_MISSING_ID,
    (True, False, OwnerRelation.DIFFERENT): FileDecision.FAIL_MISSING_ID,
    (True, True, OwnerRelation.NONE): FileDecision.KEEP_EXISTING_ENTRY,
    (True, True, OwnerRelation.SAME): FileDecision.KEEP_EXISTING_ENTRY,
    (True, True, OwnerRelation.DIFFERENT): FileDecision.FAIL_INCORRECT_ID,
    (False, False, OwnerRelation.NONE): FileDecision.KEEP,
    (False, False, OwnerRelation.SAME): FileDecision.KEEP,
    (False, False, OwnerRelation.DIFFERENT): FileDecision.DROP_CONFLICT,
    (False, True, OwnerRelation.NONE): FileDecision.KEEP,
    (False, True, OwnerRelation.SAME): FileDecision.KEEP,
    (False, True, OwnerRelation.DIFFERENT): FileDecision.DROP_CONFLICT,
}


def decide(
    target_origin: ComponentOrigin | None,
    owner_origin: ComponentOrigin | None,
    has_explicit_id: bool,
    relation: OwnerRelation,
) -> FileDecision:
    """Classify one file from the origins of the target record and of its current owner."""
    imported = ComponentOrigin.IMPORTED in (target_origin, owner_origin)
    return _DECISIONS[(imported, has_explicit_id, relation)]


@dataclass(slots=True)
class ReconcileOutcome:
    """Stored result of one component (None when nothing was kept) and its warnings."""

    result: AddResult | None
    warnings: Warnings = field(default_factory=dict)


def reconcile_component(
    index: ComponentIndex,
    component: ResolvedComponent,
    repo_root: Path,
    explicit_id: str | None,
    override: bool,
) -> ReconcileOutcome:
    """Filter a component's files against current ownership and upsert it.

    Files owned by another non-imported component are dropped and reported
    as warnings keyed by the owner id.
    """
    component_id = component.component_id.to_string()
    target = index.get(component_id, lenient=True)
    target_origin = target.origin if target is not None else None
    warnings: Warnings = {}
    kept: list[FileEntry] = []

    for entry in component.files:
        if is_auto_generated_file(repo_root / entry.relative_path):
            logger.debug("skipping auto-generated file %s", entry.relative_path)
            continue
        owner_id = index.owner_of_path(entry.relative_path)
        owner = index.get(owner_id) if owner_id is not None else None
        if owner_id is None:
            relation = OwnerRelation.NONE
        elif owner_id == component_id:
            relation = OwnerRelation.SAME
        else:
            relation = OwnerRelation.DIFFERENT
        decision = decide(
            target_origin=target_origin,
            owner_origin=owner.origin if owner is not None else None,
            has_explicit_id=bool(explicit_id),
            relation=relation,
        )
        if decision is FileDecision.FAIL_MISSING_ID:
            raise MissingComponentIdForImportedComponentError(
                component.component_id.to_string_without_version()
            )
        if decision is FileDecision.FAIL_INCORRECT_ID:
            raise IncorrectIdForImportedComponentError(
                _without_version(owner_id or ""), explicit_id or component_id
            )
        if decision is FileDecision.DROP_CONFLICT:
            warnings.setdefault(owner_id or "", []).append(entry.relative_path)
            continue
        if decision is FileDecision.KEEP_EXISTING_ENTRY and target is not None:
            kept.append(_stored_entry_or(target, entry))
            continue
        kept.append(entry)

    if warnings:
        logger.debug("files already tracked by other components: %s", warnings)
    if not kept:
        return ReconcileOutcome(result=None, warnings=warnings)
    record = index.upsert(
        component_id=component_id,
        files=kept,
        main_file=component.main_file,
        root_dir=component.root_dir,
        origin=ComponentOrigin.AUTHORED,
        override=override,
    )
    return ReconcileOutcome(
        result=AddResult(id=component_id, files=tuple(record.files)),
        warnings=warnings,
    )


def _stored_entry_or(record: ComponentRecord, entry: FileEntry) -> FileEntry:
    """Return the stored entry for `entry`, re-anchored to the workspace, if any."""
    for stored in record.files:
        if record.workspace_path(stored) == entry.relative_path:
            return FileEntry(
                relative_path=record.workspace_path(stored),
                test=stored.test,
                name=stored.name,
            )
    return entry


def _without_version(component_id: str) -> str:
    try:
        return ComponentId.parse(component_id).to_string_without_version()
    except InvalidIdError:
        return component_id

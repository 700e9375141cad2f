"""Add operation: resolve paths into components and record them in the index."""

from .dsl import PLACEHOLDERS, file_placeholders, has_placeholders, match_patterns, substitute
from .engine import (
    AddComponents,
    add_components,
    find_missing_test_files,
    remove_excluded_files,
    union_components,
    validate_no_duplicate_ids,
)
from .models import AddActionResults, AddRequest, AddResult, ResolvedComponent, Warnings
from .reconcile import FileDecision, OwnerRelation, ReconcileOutcome, decide, reconcile_component
from .resolver import (
    ResolutionContext,
    merge_test_files,
    promote_to_existing,
    resolve_main_file,
    resolve_path,
)

__all__ = [
    "AddActionResults",
    "AddComponents",
    "AddRequest",
    "AddResult",
    "FileDecision",
    "OwnerRelation",
    "PLACEHOLDERS",
    "ReconcileOutcome",
    "ResolutionContext",
    "ResolvedComponent",
    "Warnings",
    "add_components",
    "decide",
    "file_placeholders",
    "find_missing_test_files",
    "has_placeholders",
    "match_patterns",
    "merge_test_files",
    "promote_to_existing",
    "reconcile_component",
    "remove_excluded_files",
    "resolve_main_file",
    "resolve_path",
    "substitute",
    "union_components",
    "validate_no_duplicate_ids",
]

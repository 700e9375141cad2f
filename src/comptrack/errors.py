"""Failures raised by the add operation."""

from __future__ import annotations


class AddError(Exception):
    """Base class for add failures carrying a stable error code."""

    code = "ADD_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PathsNotExistError(AddError):
    """One or more input paths are absent from disk."""

    code = "PATHS_NOT_EXIST"

    def __init__(self, paths: list[str]) -> None:
        super().__init__(f"error: file or directory \"{', '.join(paths)}\" was not found.")
        self.paths = list(paths)


class NoFilesError(AddError):
    """Every matched path was removed by the ignore rules."""

    code = "NO_FILES"

    def __init__(self, ignored: list[str]) -> None:
        message = "error: no files to add"
        if ignored:
            message += f", the following files were ignored: {', '.join(ignored)}"
        super().__init__(message)
        self.ignored = list(ignored)


class EmptyDirectoryError(AddError):
    """A directory enumerates to zero files after ignore filtering."""

    code = "EMPTY_DIRECTORY"

    def __init__(self, directory: str) -> None:
        super().__init__(f"error: directory \"{directory}\" is empty, no files to add.")
        self.directory = directory


class DuplicateIdsError(AddError):
    """Independently resolved paths collapse to the same component id."""

    code = "DUPLICATE_IDS"

    def __init__(self, duplicates: dict[str, list[str]]) -> None:
        details = "; ".join(
            f"{component_id}: {', '.join(paths)}" for component_id, paths in sorted(duplicates.items())
        )
        super().__init__(
            f"error: unable to add components with the same id ({details}). "
            "Use --id to add them as one component or add them separately."
        )
        self.duplicates = {key: list(value) for key, value in duplicates.items()}


class MissingComponentIdForImportedComponentError(AddError):
    """Files of an imported component were added without an explicit id."""

    code = "MISSING_ID_FOR_IMPORTED_COMPONENT"

    def __init__(self, component_id: str) -> None:
        super().__init__(
            f"error: unable to add new files to the component \"{component_id}\" "
            "without specifying the component id. Use --id."
        )
        self.component_id = component_id


class IncorrectIdForImportedComponentError(AddError):
    """The explicit id contradicts the id of the imported owner."""

    code = "INCORRECT_ID_FOR_IMPORTED_COMPONENT"

    def __init__(self, imported_id: str, new_id: str) -> None:
        super().__init__(
            f"error: trying to add a file to the component \"{new_id}\" "
            f"which is already tracked by the imported component \"{imported_id}\"."
        )
        self.imported_id = imported_id
        self.new_id = new_id


class NestedIdCollisionError(AddError):
    """A derived id is already reserved by a nested dependency."""

    code = "NESTED_ID_COLLISION"

    def __init__(self, existing_id: str) -> None:
        super().__init__(
            f"One of your dependencies ({existing_id}) has already the same namespace and name. "
            "If you're trying to add a new component, please choose a new namespace or name. "
            "If you're trying to update a dependency component, please re-import it individually."
        )
        self.existing_id = existing_id

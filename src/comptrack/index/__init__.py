"""Component index package."""

from .models import ComponentOrigin, ComponentRecord, FileEntry, join_posix, relative_posix
from .store import (
    INDEX_SCHEMA_VERSION,
    ComponentIndex,
    IndexSchemaUnsupportedError,
    find_existing_id,
)

__all__ = [
    "ComponentIndex",
    "ComponentOrigin",
    "ComponentRecord",
    "FileEntry",
    "INDEX_SCHEMA_VERSION",
    "IndexSchemaUnsupportedError",
    "find_existing_id",
    "join_posix",
    "relative_posix",
]

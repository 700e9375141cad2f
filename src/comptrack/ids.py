"""Component identifiers: parsing, derivation and rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_NAMESPACE = "global"
VERSION_DELIMITER = "@"

_INVALID_CHUNK_CHARS = re.compile(r"[^a-z0-9_\-]")
_VALID_CHUNK = re.compile(r"^[a-zA-Z0-9_\-.]+$")


class InvalidIdError(ValueError):
    """Raised when an identifier string cannot be parsed."""

    code = "INVALID_ID"

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid component id: '{raw}'.")
        self.raw = raw


@dataclass(slots=True, frozen=True)
class ComponentId:
    """Structured component identifier."""

    namespace: str
    name: str
    scope: str | None = None
    version: str | None = None

    @classmethod
    def parse(cls, raw: str) -> ComponentId:
        """Parse `[scope/]namespace/name[@version]`."""
        text = raw.strip()
        version: str | None = None
        if VERSION_DELIMITER in text:
            text, _, version = text.rpartition(VERSION_DELIMITER)
            if not version:
                raise InvalidIdError(raw)
        parts = text.split("/")
        if any(not part or not _VALID_CHUNK.match(part) for part in parts):
            raise InvalidIdError(raw)
        if len(parts) == 1:
            return cls(namespace=DEFAULT_NAMESPACE, name=parts[0], version=version)
        if len(parts) == 2:
            return cls(namespace=parts[0], name=parts[1], version=version)
        if len(parts) == 3:
            return cls(scope=parts[0], namespace=parts[1], name=parts[2], version=version)
        raise InvalidIdError(raw)

    @classmethod
    def from_path_segments(cls, namespace: str | None, name: str) -> ComponentId:
        """Derive a valid id from directory/file name segments."""
        valid_name = _valid_chunk(name)
        if not valid_name:
            raise InvalidIdError(name)
        valid_namespace = _valid_chunk(namespace) if namespace else ""
        return cls(namespace=valid_namespace or DEFAULT_NAMESPACE, name=valid_name)

    def to_string(self) -> str:
        rendered = self.to_string_without_version()
        if self.version:
            return f"{rendered}{VERSION_DELIMITER}{self.version}"
        return rendered

    def to_string_without_version(self) -> str:
        if self.scope:
            return f"{self.scope}/{self.namespace}/{self.name}"
        return self.to_string_without_scope_and_version()

    def to_string_without_scope_and_version(self) -> str:
        return f"{self.namespace}/{self.name}"

    def __str__(self) -> str:
        return self.to_string()


def _valid_chunk(chunk: str) -> str:
    return _INVALID_CHUNK_CHARS.sub("-", chunk.strip().lower())

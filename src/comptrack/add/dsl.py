"""Placeholder patterns resolved per file to find companion files.

A pattern is either a literal path/glob or a template containing one or more
of these placeholders, each computed from a workspace-relative file path:

- ``{PARENT}``: name of the immediate parent directory (empty at the root)
- ``{DIR}``: full parent directory path (``.`` at the root)
- ``{FILE_NAME}``: base name without its extension
- ``{EXT}``: extension without the leading dot (empty when there is none)
- ``{BASE_NAME}``: base name including the extension

For ``src/utils/is-string.js`` these are ``utils``, ``src/utils``,
``is-string``, ``js`` and ``is-string.js``. Any other ``{...}`` token is
left untouched.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from comptrack.workspace.discovery import expand_pattern
from comptrack.workspace.ignore import IgnoreFilter

PLACEHOLDERS = ("PARENT", "DIR", "FILE_NAME", "EXT", "BASE_NAME")
PLACEHOLDER_PATTERN = re.compile(r"\{(" + "|".join(PLACEHOLDERS) + r")\}")


def file_placeholders(relative_path: str) -> dict[str, str]:
    """Compute placeholder values for one workspace-relative path."""
    path = PurePosixPath(relative_path.replace("\\", "/"))
    parent = path.parent.as_posix()
    return {
        "PARENT": path.parent.name,
        "DIR": parent,
        "FILE_NAME": path.stem,
        "EXT": path.suffix[1:],
        "BASE_NAME": path.name,
    }


def has_placeholders(pattern: str) -> bool:
    return PLACEHOLDER_PATTERN.search(pattern) is not None


def substitute(pattern: str, relative_path: str) -> str:
    """Replace every known placeholder in `pattern` with values of `relative_path`."""
    values = file_placeholders(relative_path)
    return PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], pattern)


def match_patterns(
    repo_root: Path,
    relative_files: list[str],
    patterns: list[str],
    ignore: IgnoreFilter,
) -> list[str]:
    """Return existing, non-ignored files named by `patterns` for any of `relative_files`.

    Results are workspace-relative forward-slash paths without duplicates.
    """
    output: list[str] = []
    seen: set[str] = set()
    for pattern in patterns:
        generated: list[str] = []
        if has_placeholders(pattern):
            for relative_file in relative_files:
                generated.append(substitute(pattern, relative_file))
        else:
            generated.append(pattern)
        for candidate in dict.fromkeys(generated):
            for match in expand_pattern(repo_root, candidate):
                if match in seen or ignore.is_ignored(match):
                    continue
                if not (repo_root / match).is_file():
                    continue
                seen.add(match)
                output.append(match)
    return output

"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILENAME = "comptrack.toml"
DEFAULT_DATA_DIRNAME = ".comptrack"
DEFAULT_DIST_DIRNAME = "dist"
DEFAULT_IGNORE_GLOBS = (".git/", "node_modules/", "__pycache__/")
DEFAULT_MAX_WORKERS = 8
MAX_WORKERS_CAP = 64


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """File enumeration and ignore settings."""

    ignore_globs: tuple[str, ...]
    dist_target: str | None
    dist_dirname: str


@dataclass(slots=True, frozen=True)
class AddConfig:
    """Add operation tuning."""

    max_workers: int


@dataclass(slots=True, frozen=True)
class CiConfig:
    """Post-add hook settings."""

    enabled: bool
    function: str | None
    command: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class TrackerConfig:
    """Fully merged workspace configuration."""

    repo_root: Path
    data_dir: Path
    index: IndexConfig
    add: AddConfig
    ci: CiConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "repo_root": str(self.repo_root),
            "data_dir": str(self.data_dir),
            "index": {
                "ignore_globs": list(self.index.ignore_globs),
                "dist_target": self.index.dist_target,
                "dist_dirname": self.index.dist_dirname,
            },
            "add": {"max_workers": self.add.max_workers},
            "ci": {
                "enabled": self.ci.enabled,
                "function": self.ci.function,
                "command": list(self.ci.command),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    max_workers: int | None = None
    ci_enabled: bool | None = None


def default_config(repo_root: Path) -> TrackerConfig:
    """Build default config for a given workspace root."""
    resolved_root = repo_root.resolve()
    return TrackerConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIRNAME,
        index=IndexConfig(
            ignore_globs=DEFAULT_IGNORE_GLOBS,
            dist_target=None,
            dist_dirname=DEFAULT_DIST_DIRNAME,
        ),
        add=AddConfig(max_workers=DEFAULT_MAX_WORKERS),
        ci=CiConfig(enabled=False, function=None, command=()),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional comptrack.toml from the workspace root."""
    config_path = repo_root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILENAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_string(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value.strip()


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def merge_config(
    base: TrackerConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> TrackerConfig:
    """Merge defaults, repo config, then CLI overrides."""
    workspace_payload = _get_table(repo_payload, "workspace")
    index_payload = _get_table(repo_payload, "index")
    add_payload = _get_table(repo_payload, "add")
    ci_payload = _get_table(repo_payload, "ci")

    data_dir = base.data_dir
    raw_data_dir = _optional_string(workspace_payload.get("data_dir"), "workspace.data_dir", None)
    if raw_data_dir is not None:
        data_dir = base.repo_root / raw_data_dir

    ignore_globs = base.index.ignore_globs
    if "ignore" in index_payload:
        ignore_globs = _tuple_of_strings(index_payload["ignore"], "index", "ignore")
    dist_target = _optional_string(
        index_payload.get("dist_target"), "index.dist_target", base.index.dist_target
    )
    dist_dirname = _optional_string(
        index_payload.get("dist_dirname"), "index.dist_dirname", base.index.dist_dirname
    )

    max_workers = _optional_positive_int_with_cap(
        add_payload.get("max_workers"), "add.max_workers", base.add.max_workers, MAX_WORKERS_CAP
    )

    ci_command = base.ci.command
    if "command" in ci_payload:
        ci_command = _tuple_of_strings(ci_payload["command"], "ci", "command")

    merged = TrackerConfig(
        repo_root=base.repo_root,
        data_dir=data_dir,
        index=IndexConfig(
            ignore_globs=ignore_globs,
            dist_target=dist_target,
            dist_dirname=dist_dirname or DEFAULT_DIST_DIRNAME,
        ),
        add=AddConfig(max_workers=max_workers),
        ci=CiConfig(
            enabled=_optional_bool(ci_payload.get("enabled"), "ci.enabled", base.ci.enabled),
            function=_optional_string(ci_payload.get("function"), "ci.function", base.ci.function),
            command=ci_command,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: TrackerConfig, overrides: CliOverrides) -> TrackerConfig:
    """Apply startup overrides at highest precedence."""
    max_workers = _optional_positive_int_with_cap(
        overrides.max_workers,
        "overrides.max_workers",
        config.add.max_workers,
        MAX_WORKERS_CAP,
    )
    ci = CiConfig(
        enabled=overrides.ci_enabled if overrides.ci_enabled is not None else config.ci.enabled,
        function=config.ci.function,
        command=config.ci.command,
    )
    data_dir = overrides.data_dir or config.data_dir
    return TrackerConfig(
        repo_root=config.repo_root,
        data_dir=data_dir.resolve(),
        index=config.index,
        add=AddConfig(max_workers=max_workers),
        ci=ci,
    )


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> TrackerConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value

from __future__ import annotations

from pathlib import Path

import pytest

from comptrack.config import (
    DEFAULT_DATA_DIRNAME,
    DEFAULT_IGNORE_GLOBS,
    CliOverrides,
    default_config,
    load_effective_config,
)


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config == default_config(tmp_path)
    assert config.data_dir == tmp_path.resolve() / DEFAULT_DATA_DIRNAME
    assert config.index.ignore_globs == DEFAULT_IGNORE_GLOBS
    assert config.index.dist_target is None
    assert config.ci.enabled is False


def test_merge_order_defaults_then_repo_then_cli(tmp_path: Path) -> None:
    (tmp_path / "comptrack.toml").write_text(
        "\n".join(
            [
                "[workspace]",
                'data_dir = "state"',
                "",
                "[index]",
                'ignore = ["build/"]',
                'dist_dirname = "out"',
                "",
                "[add]",
                "max_workers = 3",
                "",
                "[ci]",
                "enabled = true",
                'command = ["true"]',
            ]
        ),
        encoding="utf-8",
    )
    config = load_effective_config(tmp_path, CliOverrides(max_workers=5, ci_enabled=False))

    assert config.data_dir == tmp_path.resolve() / "state"
    assert config.index.ignore_globs == ("build/",)
    assert config.index.dist_dirname == "out"
    assert config.add.max_workers == 5
    assert config.ci.enabled is False
    assert config.ci.command == ("true",)


def test_data_dir_override_has_highest_precedence(tmp_path: Path) -> None:
    custom = tmp_path / ".custom_data"
    config = load_effective_config(tmp_path, CliOverrides(data_dir=custom))

    assert config.to_public_dict()["data_dir"] == str(custom.resolve())


@pytest.mark.parametrize(
    ("lines", "message"),
    [
        (["[add]", "max_workers = 0"], "add.max_workers"),
        (["[add]", "max_workers = 1000"], "must be <= 64"),
        (["[index]", 'ignore = "build/"'], "index.ignore"),
        (["[ci]", 'enabled = "yes"'], "ci.enabled"),
        (["[workspace]", 'data_dir = ""'], "workspace.data_dir"),
        (["index = 3"], "Config section 'index' must be a table."),
    ],
)
def test_invalid_config_values_name_the_field(
    tmp_path: Path, lines: list[str], message: str
) -> None:
    (tmp_path / "comptrack.toml").write_text("\n".join(lines), encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_effective_config(tmp_path)


def test_invalid_cli_override_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_workers"):
        load_effective_config(tmp_path, CliOverrides(max_workers=-1))

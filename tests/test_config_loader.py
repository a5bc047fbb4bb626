from __future__ import annotations

from pathlib import Path

import pytest

from steam_command_runner.config import (
    ExecutionMode,
    GlobalConfig,
    load_game_config,
    load_global_config,
    write_game_config_template,
    write_global_config,
)
from steam_command_runner.errors import ConfigParseError
from steam_command_runner.utils.paths import get_config_path, get_game_config_path


def test_config_paths_follow_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, fake_home: Path) -> None:
    assert get_config_path() == fake_home / ".config" / "steam-command-runner" / "config.toml"

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert get_game_config_path(570) == tmp_path / "xdg" / "steam-command-runner" / "games" / "570.toml"


def test_missing_files(tmp_path: Path) -> None:
    assert load_global_config(tmp_path / "config.toml") == GlobalConfig()
    assert load_game_config(570, tmp_path) is None


def test_template_written_by_init_loads_back(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.toml"
    write_global_config(path, GlobalConfig.template())

    loaded = load_global_config(path)
    assert loaded.default_mode == ExecutionMode.AUTO
    assert loaded.gamescope.enabled is False
    assert loaded.gamescope.args == "-f"
    assert loaded.gamescope.skip_pre_command is True


def test_game_template_is_valid_and_not_overwritten(tmp_path: Path) -> None:
    path = write_game_config_template(570, tmp_path)
    assert path == tmp_path / "570.toml"
    assert "570" in path.read_text(encoding="utf-8")

    game = load_game_config(570, tmp_path)
    assert game is not None
    assert game.env == {}

    path.write_text('name = "Dota 2"\n', encoding="utf-8")
    write_game_config_template(570, tmp_path)
    assert path.read_text(encoding="utf-8") == 'name = "Dota 2"\n'


@pytest.mark.parametrize(
    "content",
    [
        "env = 5\n",
        "[env]\nA = true\n",
        "[hooks.pre_launch]\nwait = true\n",
        '[gamescope]\nenabled = "yes"\n',
        "default_mode = 3\n",
    ],
)
def test_invalid_global_values(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigParseError):
        load_global_config(path)

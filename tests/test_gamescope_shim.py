from __future__ import annotations

import os
from pathlib import Path

import pytest

from steam_command_runner.errors import ExecutionFailed, GamescopeNotFound
from steam_command_runner.launch.shim import (
    build_shim_command,
    find_real_gamescope,
    get_config_gamescope_args,
    install_shim,
    is_invoked_as_gamescope,
    parse_gamescope_args,
    uninstall_shim,
)


def make_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def test_is_invoked_as_gamescope() -> None:
    assert is_invoked_as_gamescope("/home/deck/.local/bin/gamescope") is True
    assert is_invoked_as_gamescope("steam-command-runner") is False


def test_parse_gamescope_args() -> None:
    assert parse_gamescope_args(["gamescope", "-w", "1920", "--", "/game", "arg1"]) == (
        ["-w", "1920"],
        ["/game", "arg1"],
    )
    assert parse_gamescope_args(["gamescope", "-f", "--fullscreen"]) == (["-f", "--fullscreen"], [])
    assert parse_gamescope_args(["gamescope"]) == ([], [])
    # Only the first separator splits
    assert parse_gamescope_args(["gamescope", "--", "env", "--", "x"]) == ([], ["env", "--", "x"])


def test_build_shim_command_puts_config_args_first() -> None:
    full = build_shim_command(Path("/usr/bin/gamescope"), ["gamescope", "-f", "--", "/game"], ["-W", "2560"])
    assert full == ["/usr/bin/gamescope", "-W", "2560", "-f", "--", "/game"]
    assert build_shim_command(Path("/usr/bin/gamescope"), ["gamescope"], []) == ["/usr/bin/gamescope"]


def test_config_gamescope_args(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('[gamescope]\nenabled = true\nargs = "-W 2560 -H 1440"\n', encoding="utf-8")
    games = tmp_path / "games"
    games.mkdir()
    (games / "10.toml").write_text("[gamescope]\nenabled = false\n", encoding="utf-8")

    assert get_config_gamescope_args(None, config, games, environ={}) == ["-W", "2560", "-H", "1440"]
    assert get_config_gamescope_args(None, config, games, environ={"SteamAppId": "10"}) == []


def test_config_gamescope_args_broken_config(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[gamescope\n", encoding="utf-8")
    assert get_config_gamescope_args(None, config, tmp_path, environ={}) == []


def test_find_real_gamescope_skips_self(tmp_path: Path) -> None:
    runner = make_executable(tmp_path / "venv" / "steam-command-runner")
    shim_dir = tmp_path / "shim"
    shim_dir.mkdir()
    (shim_dir / "gamescope").symlink_to(runner)
    real = make_executable(tmp_path / "usr" / "bin" / "gamescope")

    path_env = os.pathsep.join([str(shim_dir), str(tmp_path / "empty"), str(real.parent)])
    assert find_real_gamescope(runner, path_env) == real

    with pytest.raises(GamescopeNotFound):
        find_real_gamescope(runner, str(shim_dir))


def test_install_and_uninstall_shim(tmp_path: Path) -> None:
    runner = make_executable(tmp_path / "steam-command-runner")
    shim = tmp_path / "bin" / "gamescope"

    assert install_shim(shim, runner) == shim
    assert shim.is_symlink()
    assert shim.resolve() == runner.resolve()
    # Reinstalling over our own symlink is fine
    install_shim(shim, runner)

    assert uninstall_shim(shim) is True
    assert uninstall_shim(shim) is False


def test_install_shim_refuses_real_file(tmp_path: Path) -> None:
    runner = make_executable(tmp_path / "steam-command-runner")
    real = make_executable(tmp_path / "bin" / "gamescope")
    with pytest.raises(ExecutionFailed):
        install_shim(real, runner)
    assert not real.is_symlink()

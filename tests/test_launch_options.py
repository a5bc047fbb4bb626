from __future__ import annotations

from pathlib import Path

import pytest

from steam_command_runner import launch_options
from steam_command_runner.errors import SteamUserNotFound
from steam_command_runner.steam.localconfig import read_localconfig

DEFAULT = "gamescope -- %command%"


def localconfig_path(steam_root: Path) -> Path:
    return steam_root / "userdata" / "12345" / "config" / "localconfig.vdf"


def test_resolve_user_id(steam_root: Path) -> None:
    assert launch_options.resolve_user_id(None, steam_root) == 12345
    assert launch_options.resolve_user_id(999, steam_root) == 999

    (steam_root / "userdata" / "777").mkdir()
    with pytest.raises(SteamUserNotFound) as excinfo:
        launch_options.resolve_user_id(None, steam_root)
    assert "12345" in str(excinfo.value) and "777" in str(excinfo.value)


def test_set_all_dry_run_writes_nothing(steam_root: Path, localconfig_text: str) -> None:
    result = launch_options.set_all(dry_run=True, steam_root=steam_root)
    assert result['options'] == DEFAULT
    assert [g.app_id for g in result['games']] == [200, 100]
    assert localconfig_path(steam_root).read_text(encoding="utf-8") == localconfig_text
    assert not localconfig_path(steam_root).with_name("localconfig.vdf.backup").exists()


def test_set_all_with_backup(steam_root: Path, localconfig_text: str) -> None:
    result = launch_options.set_all(steam_root=steam_root)
    assert result['changed'] == 2
    assert result['backup_path'].read_text(encoding="utf-8") == localconfig_text

    config = read_localconfig(localconfig_path(steam_root))
    assert config.get_launch_options(100) == DEFAULT
    assert config.get_launch_options(200) == DEFAULT

    again = launch_options.set_all(backup=False, steam_root=steam_root)
    assert again['changed'] == 0


def test_set_single_custom_and_show(steam_root: Path) -> None:
    launch_options.set_single(300, options='mangohud "%command%"', steam_root=steam_root)

    shown = launch_options.show_single(300, steam_root=steam_root)
    assert shown == {'app_id': 300, 'options': 'mangohud "%command%"', 'ours': False}
    assert launch_options.show_single(555, steam_root=steam_root)['options'] is None


def test_clear_all_only_ours(steam_root: Path) -> None:
    launch_options.set_single(200, steam_root=steam_root)

    result = launch_options.clear_all(backup=False, steam_root=steam_root)
    assert result['cleared'] == 1
    assert result['skipped'] == 1

    config = read_localconfig(localconfig_path(steam_root))
    assert config.get_launch_options(200) is None
    assert config.get_launch_options(100) == "gamemoderun %command%"

    result = launch_options.clear_all(backup=False, only_ours=False, steam_root=steam_root)
    assert result['cleared'] == 1
    assert read_localconfig(localconfig_path(steam_root)).launch_options == {}


def test_list_all(steam_root: Path) -> None:
    result = launch_options.list_all(steam_root=steam_root)
    assert [entry['game'].app_id for entry in result['with_options']] == [100]
    assert result['with_options'][0]['ours'] is False
    assert [g.app_id for g in result['without_options']] == [200]

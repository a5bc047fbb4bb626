from __future__ import annotations

from pathlib import Path
import logging
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
# Importable packages live under py_modules
sys.path.insert(0, str(ROOT / "py_modules"))

ISOLATED_ENV_VARS = (
    "XDG_CONFIG_HOME",
    "XDG_DATA_HOME",
    "XDG_CURRENT_DESKTOP",
    "STEAM_COMPAT_TOOL_PATH",
    "STEAM_COMPAT_DATA_PATH",
    "STEAM_COMPAT_CLIENT_INSTALL_PATH",
    "LD_PRELOAD",
    "SteamAppId",
    "SteamGameId",
)


@pytest.fixture(autouse=True)
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point $HOME at an empty directory so no test sees the real Steam or config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ISOLATED_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop the handlers main() installs; they hold pytest's per-test stderr."""
    yield
    from steam_command_runner.utils import logging_setup

    root = logging.getLogger()
    while logging_setup._handlers:
        handler = logging_setup._handlers.pop()
        root.removeHandler(handler)
        handler.close()


def write_manifest(steamapps: Path, app_id: int, name: str, installdir: str = "") -> Path:
    steamapps.mkdir(parents=True, exist_ok=True)
    path = steamapps / f"appmanifest_{app_id}.acf"
    path.write_text(
        '"AppState"\n'
        "{\n"
        f'\t"appid"\t\t"{app_id}"\n'
        f'\t"name"\t\t"{name}"\n'
        f'\t"installdir"\t\t"{installdir or name}"\n'
        "}\n",
        encoding="utf-8",
    )
    return path


def make_proton(base: Path, name: str) -> Path:
    proton_dir = base / name
    proton_dir.mkdir(parents=True, exist_ok=True)
    (proton_dir / "proton").write_text("#!/bin/sh\n", encoding="utf-8")
    return proton_dir


LOCALCONFIG = (
    '"UserLocalConfigStore"\n'
    "{\n"
    '\t"Software"\n'
    "\t{\n"
    '\t\t"Valve"\n'
    "\t\t{\n"
    '\t\t\t"Steam"\n'
    "\t\t\t{\n"
    '\t\t\t\t"apps"\n'
    "\t\t\t\t{\n"
    '\t\t\t\t\t"100"\n'
    "\t\t\t\t\t{\n"
    '\t\t\t\t\t\t"LastPlayed"\t\t"1700000000"\n'
    '\t\t\t\t\t\t"LaunchOptions"\t\t"gamemoderun %command%"\n'
    "\t\t\t\t\t}\n"
    '\t\t\t\t\t"200"\n'
    "\t\t\t\t\t{\n"
    '\t\t\t\t\t\t"LastPlayed"\t\t"1600000000"\n'
    '\t\t\t\t\t\t"cloud"\n'
    "\t\t\t\t\t\t{\n"
    '\t\t\t\t\t\t\t"last_sync_state"\t\t"synchronized"\n'
    "\t\t\t\t\t\t}\n"
    "\t\t\t\t\t}\n"
    "\t\t\t\t}\n"
    "\t\t\t}\n"
    "\t\t}\n"
    "\t}\n"
    '\t"friends"\n'
    "\t{\n"
    '\t\t"123"\n'
    "\t\t{\n"
    '\t\t\t"LaunchOptions"\t\t"not-an-app"\n'
    "\t\t}\n"
    "\t}\n"
    "}\n"
)


@pytest.fixture
def localconfig_text() -> str:
    return LOCALCONFIG


@pytest.fixture
def steam_root(fake_home: Path) -> Path:
    """A minimal Steam install at ~/.local/share/Steam with one user and two games."""
    root = fake_home / ".local" / "share" / "Steam"
    steamapps = root / "steamapps"
    write_manifest(steamapps, 100, "Zeta Game")
    write_manifest(steamapps, 200, "alpha game")

    config_dir = root / "userdata" / "12345" / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "localconfig.vdf").write_text(LOCALCONFIG, encoding="utf-8")
    # User 0 is a meta-directory and must be ignored
    (root / "userdata" / "0").mkdir()
    return root

"""
Centralized path utilities for config files and Steam installation directories.

Everything is computed at call time from $HOME / $XDG_* so callers (and tests)
can point the whole tool at a different home directory.
"""
import os
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import SteamNotFound

logger = logging.getLogger(__name__)

APP_NAME = "steam-command-runner"
CONFIG_FILE_NAME = "config.toml"
GAMES_DIR_NAME = "games"


def get_config_dir() -> Path:
    """Get the configuration directory, honouring $XDG_CONFIG_HOME."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / APP_NAME


def get_config_path() -> Path:
    """Get the path of the global config.toml (may not exist)."""
    return get_config_dir() / CONFIG_FILE_NAME


def get_games_config_dir() -> Path:
    """Get the directory holding per-game <app_id>.toml files."""
    return get_config_dir() / GAMES_DIR_NAME


def get_game_config_path(app_id: int, games_dir: Optional[Union[str, Path]] = None) -> Path:
    """Get the path of a per-game config file (may not exist)."""
    base = Path(games_dir) if games_dir is not None else get_games_config_dir()
    return base / f"{app_id}.toml"


def get_debug_log_path() -> Path:
    """Append-only launch log, useful because Steam hides a compat tool's stderr."""
    return Path.home() / f".{APP_NAME}.log"


def get_steam_root_candidates() -> List[Path]:
    """Known Steam installation roots, in priority order."""
    home = Path.home()
    candidates = [
        home / ".steam" / "steam",
        home / ".local" / "share" / "Steam",
    ]
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        data_steam = Path(xdg_data) / "Steam"
        if data_steam not in candidates:
            candidates.append(data_steam)
    return candidates


def find_steam_root() -> Optional[Path]:
    """Find the Steam installation directory, or None."""
    for candidate in get_steam_root_candidates():
        if candidate.exists():
            logger.debug(f"Found Steam root at: {candidate}")
            return candidate
    return None


def require_steam_root(steam_root: Optional[Union[str, Path]] = None) -> Path:
    """Return steam_root if given, otherwise the detected Steam root.

    Raises:
        SteamNotFound: when no Steam installation exists
    """
    if steam_root is not None:
        return Path(steam_root)
    found = find_steam_root()
    if found is None:
        raise SteamNotFound(get_steam_root_candidates())
    return found


def get_compat_tool_dirs() -> List[Path]:
    """compatibilitytools.d directories for custom Proton builds (e.g. GE-Proton)."""
    home = Path.home()
    return [
        home / ".steam" / "root" / "compatibilitytools.d",
        home / ".local" / "share" / "Steam" / "compatibilitytools.d",
    ]


def get_default_shim_path() -> Path:
    """Default location of the gamescope shim symlink."""
    return Path.home() / ".local" / "bin" / "gamescope"

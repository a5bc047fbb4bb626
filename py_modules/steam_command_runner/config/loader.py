"""
TOML config file reading and writing.

Reading uses the standard library tomllib; `config init` writes with tomli_w.
A missing global file means built-in defaults, a missing game file means no
overrides. Any other I/O problem or malformed content is raised as
ConfigReadError / ConfigParseError carrying the path.
"""
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

import tomli_w

from ..errors import ConfigParseError, ConfigReadError
from ..utils.paths import get_config_path, get_game_config_path
from .models import GameConfig, GlobalConfig

logger = logging.getLogger(__name__)

GAME_CONFIG_TEMPLATE = """\
# Per-game configuration for Steam App ID {app_id}
# name = "Game Name"
# mode = "proton"  # native | proton | auto
# proton = "Proton 9.0"
# pre_command = "inherit mangohud"  # "inherit" expands to the global pre_command
# launch_args = ["-dx11"]

[env]
# MANGOHUD = "1"

# [gamescope]
# enabled = true
# args = "-W 2560 -H 1440 -f"
"""


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigParseError(path, e) from e
    except OSError as e:
        raise ConfigReadError(path, e) from e


def load_global_config(path: Optional[Union[str, Path]] = None) -> GlobalConfig:
    """Load the global config, or defaults when the file does not exist."""
    config_path = Path(path) if path is not None else get_config_path()
    if not config_path.exists():
        logger.debug("No global config found, using defaults")
        return GlobalConfig()

    logger.debug(f"Loading global config from: {config_path}")
    data = _read_toml(config_path)
    try:
        return GlobalConfig.from_dict(data)
    except ValueError as e:
        raise ConfigParseError(config_path, e) from e


def load_game_config(app_id: int, games_dir: Optional[Union[str, Path]] = None) -> Optional[GameConfig]:
    """Load games/<app_id>.toml, or None when there is no such file."""
    game_path = get_game_config_path(app_id, games_dir)
    if not game_path.exists():
        logger.debug(f"No game config found for app_id: {app_id}")
        return None

    logger.debug(f"Loading game config from: {game_path}")
    data = _read_toml(game_path)
    try:
        return GameConfig.from_dict(data)
    except ValueError as e:
        raise ConfigParseError(game_path, e) from e


def write_global_config(path: Union[str, Path], config: GlobalConfig) -> None:
    """Serialize a GlobalConfig to TOML, creating parent directories."""
    config_path = Path(path)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "wb") as f:
            tomli_w.dump(config.to_dict(), f)
    except OSError as e:
        raise ConfigReadError(config_path, e) from e


def write_game_config_template(app_id: int, games_dir: Optional[Union[str, Path]] = None) -> Path:
    """Create a commented games/<app_id>.toml if it does not exist yet."""
    game_path = get_game_config_path(app_id, games_dir)
    if game_path.exists():
        return game_path
    try:
        game_path.parent.mkdir(parents=True, exist_ok=True)
        game_path.write_text(GAME_CONFIG_TEMPLATE.format(app_id=app_id), encoding="utf-8")
    except OSError as e:
        raise ConfigReadError(game_path, e) from e
    return game_path

# Utils package
from .paths import (
    APP_NAME,
    get_config_dir,
    get_config_path,
    get_games_config_dir,
    get_game_config_path,
    get_debug_log_path,
    get_steam_root_candidates,
    find_steam_root,
    require_steam_root,
    get_compat_tool_dirs,
    get_default_shim_path,
)
from .logging_setup import setup_logging, setup_compat_logging

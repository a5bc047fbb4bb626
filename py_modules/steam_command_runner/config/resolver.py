"""
Merge global config, per-game config and session context into one policy.

Precedence is game > global > built-in default for scalars, key-wise union
(game wins) for env, and wholesale per-slot replacement for hooks. Whether we
are already inside a gamescope session is passed in by the caller so that
merge_configs stays pure.
"""
import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from .loader import load_game_config, load_global_config
from .models import EffectiveLaunchPolicy, GameConfig, GlobalConfig

logger = logging.getLogger(__name__)

INHERIT_KEYWORD = "inherit"


def is_gamescope_session(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check XDG_CURRENT_DESKTOP for a gamescope session (Steam Deck game mode)."""
    env = os.environ if environ is None else environ
    return env.get("XDG_CURRENT_DESKTOP", "").lower() == "gamescope"


def merge_pre_command(global_pre: Optional[str], game_pre: Optional[str]) -> Optional[str]:
    """Resolve a game pre_command against the global one.

    "inherit" anywhere in the game value is replaced by the global value, so
    "inherit mangohud" with a global "gamemoderun" becomes "gamemoderun mangohud".
    """
    if game_pre is None:
        return global_pre
    if INHERIT_KEYWORD in game_pre:
        return game_pre.replace(INHERIT_KEYWORD, global_pre or "").strip()
    return game_pre


def _pick(game_value, global_value, default=None):
    if game_value is not None:
        return game_value
    if global_value is not None:
        return global_value
    return default


def merge_configs(
    global_config: GlobalConfig,
    game_config: Optional[GameConfig],
    in_gamescope_session: bool,
    app_id: Optional[int] = None,
) -> EffectiveLaunchPolicy:
    """Merge the two config layers into an EffectiveLaunchPolicy."""
    game = game_config if game_config is not None else GameConfig()

    env = dict(global_config.env)
    env.update(game.env)

    gs_global = global_config.gamescope
    gs_game = game.gamescope

    return EffectiveLaunchPolicy(
        app_id=app_id,
        name=game.name,
        mode=_pick(game.mode, global_config.default_mode),
        proton=_pick(game.proton, global_config.default_proton),
        pre_command=merge_pre_command(global_config.pre_command, game.pre_command),
        env=env,
        launch_args=list(game.launch_args),
        pre_launch_hook=_pick(game.hooks.pre_launch, global_config.hooks.pre_launch),
        post_exit_hook=_pick(game.hooks.post_exit, global_config.hooks.post_exit),
        gamescope_enabled=_pick(gs_game.enabled, gs_global.enabled, False),
        gamescope_args=_pick(gs_game.args, gs_global.args),
        is_gamescope_session=in_gamescope_session,
        skip_pre_command_in_gamescope=_pick(gs_game.skip_pre_command, gs_global.skip_pre_command, True),
        gamescope_pre_command=_pick(gs_game.pre_command, gs_global.pre_command),
    )


def resolve(
    app_id: Optional[int],
    in_gamescope_session: bool,
    config_path: Optional[Union[str, Path]] = None,
    games_dir: Optional[Union[str, Path]] = None,
) -> EffectiveLaunchPolicy:
    """Load both config layers from disk and merge them.

    Raises:
        ConfigReadError: a config file exists but cannot be read
        ConfigParseError: a config file is not valid TOML or has bad values
    """
    global_config = load_global_config(config_path)
    game_config = load_game_config(app_id, games_dir) if app_id is not None else None

    policy = merge_configs(global_config, game_config, in_gamescope_session, app_id)
    logger.debug(f"Gamescope session: {in_gamescope_session}")
    logger.debug(f"Merged config: {policy}")
    return policy

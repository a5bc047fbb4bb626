"""
Bulk and single-game management of Steam launch options.

Every operation resolves the Steam user, loads localconfig.vdf once, patches
it in memory and writes it back once. Results are returned as dicts so the
CLI decides how to present them.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import SteamUserNotFound
from .steam.installed_games import find_installed_games
from .steam.localconfig import (
    create_backup,
    generate_default_launch_options,
    is_our_launch_options,
    read_localconfig,
    write_localconfig,
)
from .steam.userdata import find_user_ids, get_localconfig_path, get_user_names

logger = logging.getLogger(__name__)

PathLike = Optional[Union[str, Path]]


def resolve_user_id(user_id: Optional[int] = None, steam_root: PathLike = None) -> int:
    """
    The given user id, or the only Steam user on this machine.

    Raises:
        SteamUserNotFound: no users, or several and none was chosen
    """
    if user_id is not None:
        return user_id

    user_ids = find_user_ids(steam_root)
    if len(user_ids) == 1:
        logger.debug(f"Auto-detected Steam user: {user_ids[0]}")
        return user_ids[0]

    names = get_user_names(steam_root)
    listing = ", ".join(f"{uid} ({names[uid]})" if uid in names else str(uid) for uid in user_ids)
    raise SteamUserNotFound(f"Multiple users found: {listing}. Please specify --user-id")


def set_all(
    backup: bool = True,
    dry_run: bool = False,
    user_id: Optional[int] = None,
    options: Optional[str] = None,
    steam_root: PathLike = None,
) -> Dict[str, Any]:
    """Set launch options for every installed game."""
    user_id = resolve_user_id(user_id, steam_root)
    config_path = get_localconfig_path(user_id, steam_root)
    games = find_installed_games(steam_root)
    launch_options = options or generate_default_launch_options()

    result: Dict[str, Any] = {
        'config_path': config_path,
        'options': launch_options,
        'games': games,
        'changed': 0,
        'backup_path': None,
        'dry_run': dry_run,
    }

    if not games or dry_run:
        return result

    if backup:
        result['backup_path'] = create_backup(config_path)

    config = read_localconfig(config_path)
    for game in games:
        if config.set_launch_options(game.app_id, launch_options):
            result['changed'] += 1

    write_localconfig(config_path, config)
    logger.info(f"Set launch options for {len(games)} games ({result['changed']} changed) in {config_path}")
    return result


def set_single(
    app_id: int,
    options: Optional[str] = None,
    user_id: Optional[int] = None,
    steam_root: PathLike = None,
) -> Dict[str, Any]:
    """Set launch options for one game (default options when none given)."""
    user_id = resolve_user_id(user_id, steam_root)
    config_path = get_localconfig_path(user_id, steam_root)
    launch_options = options if options is not None else generate_default_launch_options()

    config = read_localconfig(config_path)
    changed = config.set_launch_options(app_id, launch_options)
    if changed:
        write_localconfig(config_path, config)
    logger.info(f"Set launch options for app {app_id}: {launch_options}")
    return {'app_id': app_id, 'options': launch_options, 'changed': changed, 'config_path': config_path}


def clear_all(
    backup: bool = True,
    only_ours: bool = True,
    user_id: Optional[int] = None,
    steam_root: PathLike = None,
) -> Dict[str, Any]:
    """
    Remove launch options from every installed game.

    With only_ours, options not written by steam-command-runner are left alone.
    """
    user_id = resolve_user_id(user_id, steam_root)
    config_path = get_localconfig_path(user_id, steam_root)
    games = find_installed_games(steam_root)

    backup_path = create_backup(config_path) if backup else None
    config = read_localconfig(config_path)

    cleared = 0
    skipped = 0
    for game in games:
        current = config.get_launch_options(game.app_id)
        if current is None:
            continue
        if only_ours and not is_our_launch_options(current):
            logger.debug(f"Skipping {game.name} ({game.app_id}) - not set by us")
            skipped += 1
            continue
        config.set_launch_options(game.app_id, None)
        logger.debug(f"Cleared launch options for {game.name} ({game.app_id})")
        cleared += 1

    if cleared:
        write_localconfig(config_path, config)
    return {'cleared': cleared, 'skipped': skipped, 'backup_path': backup_path, 'config_path': config_path}


def show_single(app_id: int, user_id: Optional[int] = None, steam_root: PathLike = None) -> Dict[str, Any]:
    user_id = resolve_user_id(user_id, steam_root)
    config = read_localconfig(get_localconfig_path(user_id, steam_root))
    options = config.get_launch_options(app_id)
    return {
        'app_id': app_id,
        'options': options,
        'ours': options is not None and is_our_launch_options(options),
    }


def list_all(user_id: Optional[int] = None, steam_root: PathLike = None) -> Dict[str, List[Any]]:
    """Installed games split into those with and without launch options."""
    user_id = resolve_user_id(user_id, steam_root)
    config = read_localconfig(get_localconfig_path(user_id, steam_root))

    with_options = []
    without_options = []
    for game in find_installed_games(steam_root):
        options = config.get_launch_options(game.app_id)
        if options is None:
            without_options.append(game)
        else:
            with_options.append({'game': game, 'options': options, 'ours': is_our_launch_options(options)})
    return {'with_options': with_options, 'without_options': without_options}

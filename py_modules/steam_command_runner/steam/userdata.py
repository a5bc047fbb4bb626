"""
Steam user detection utilities.

Users are the numeric directories under <steam>/userdata. Display names come
from config/loginusers.vdf, which is keyed by SteamID64.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import vdf

from ..errors import SteamUserNotFound
from ..utils.paths import require_steam_root

logger = logging.getLogger(__name__)

# SteamID64 of account id 0
STEAM_ID64_BASE = 76561197960265728


def steam64_to_account_id(steam64_id: int) -> int:
    return steam64_id - STEAM_ID64_BASE


def find_user_ids(steam_root: Optional[Union[str, Path]] = None) -> List[int]:
    """
    Account ids (userdata folder names) that exist locally.

    User 0 is a meta-directory Steam creates and is never returned.

    Raises:
        SteamNotFound: no Steam installation (when steam_root is not given)
        SteamUserNotFound: no userdata directory or no user in it
    """
    root = require_steam_root(steam_root)
    userdata = root / "userdata"
    if not userdata.is_dir():
        raise SteamUserNotFound(f"userdata directory not found at {userdata}")

    user_ids = []
    for entry in sorted(userdata.iterdir()):
        if not entry.is_dir() or not entry.name.isdecimal():
            continue
        user_id = int(entry.name)
        if user_id == 0:
            logger.debug("Skipping user 0 (meta-directory)")
            continue
        user_ids.append(user_id)

    if not user_ids:
        raise SteamUserNotFound("No Steam users found in userdata directory")
    return user_ids


def get_user_names(steam_root: Optional[Union[str, Path]] = None) -> Dict[int, str]:
    """
    Map account id -> display name from loginusers.vdf.

    Best effort: returns an empty dict when the file is missing or unreadable.
    PersonaName is preferred, AccountName is the fallback.
    """
    root = require_steam_root(steam_root)
    loginusers_path = root / "config" / "loginusers.vdf"
    if not loginusers_path.exists():
        logger.debug(f"loginusers.vdf not found at {loginusers_path}")
        return {}

    try:
        with open(loginusers_path, "r", encoding="utf-8", errors="ignore") as f:
            data = vdf.load(f)
    except (OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Error reading loginusers.vdf: {e}")
        return {}

    names: Dict[int, str] = {}
    for steam64_id_str, user_info in data.get("users", {}).items():
        try:
            account_id = steam64_to_account_id(int(steam64_id_str))
        except ValueError:
            logger.warning(f"Invalid Steam64ID: {steam64_id_str}")
            continue
        if not isinstance(user_info, dict):
            continue
        name = user_info.get("PersonaName") or user_info.get("AccountName")
        if name:
            names[account_id] = name
    return names


def get_localconfig_path(user_id: int, steam_root: Optional[Union[str, Path]] = None) -> Path:
    """
    Path to userdata/<user_id>/config/localconfig.vdf.

    Raises:
        SteamUserNotFound: the file does not exist for this user
    """
    root = require_steam_root(steam_root)
    path = root / "userdata" / str(user_id) / "config" / "localconfig.vdf"
    if not path.exists():
        raise SteamUserNotFound(f"localconfig.vdf not found for user {user_id}")
    return path

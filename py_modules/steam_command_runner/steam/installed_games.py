"""
Installed game discovery from appmanifest_*.acf files.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..utils.paths import require_steam_root
from .library import get_library_folders, parse_vdf_key_value

logger = logging.getLogger(__name__)


@dataclass
class InstalledGame:
    app_id: int
    name: str
    install_dir: str


def parse_appmanifest(path: Path) -> Optional[InstalledGame]:
    """Parse one appmanifest_<appid>.acf.

    Returns None when the file is unreadable or lacks appid/name.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.warning(f"Failed to read {path}: {e}")
        return None

    fields: Dict[str, str] = {}
    for line in content.splitlines():
        pair = parse_vdf_key_value(line)
        if pair is None:
            continue
        key = pair[0].lower()
        # First occurrence wins; nested blocks repeat some keys
        if key in ("appid", "name", "installdir") and key not in fields:
            fields[key] = pair[1]

    try:
        app_id = int(fields["appid"])
        name = fields["name"]
    except (KeyError, ValueError):
        logger.debug(f"Skipping incomplete manifest: {path}")
        return None

    return InstalledGame(app_id=app_id, name=name, install_dir=fields.get("installdir", ""))


def find_installed_games(steam_root: Optional[Union[str, Path]] = None) -> List[InstalledGame]:
    """All installed games across library folders, sorted by name.

    Raises:
        SteamNotFound: no Steam installation (when steam_root is not given)
        LibraryNotFound: no library folder exists
    """
    root = require_steam_root(steam_root)
    games: List[InstalledGame] = []
    seen = set()

    for steamapps in get_library_folders(root):
        for manifest in sorted(steamapps.glob("appmanifest_*.acf")):
            game = parse_appmanifest(manifest)
            if game is None or game.app_id in seen:
                continue
            seen.add(game.app_id)
            logger.debug(f"Found installed game: {game.app_id} - {game.name}")
            games.append(game)

    games.sort(key=lambda g: g.name.lower())
    logger.info(f"Found {len(games)} installed games")
    return games

"""
Steam library folder discovery.

libraryfolders.vdf and appmanifest_*.acf are read with a line scan for
"key"  "value" pairs; we only ever need a handful of flat fields from them.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..errors import LibraryNotFound

logger = logging.getLogger(__name__)

LIBRARY_FOLDERS_FILE = Path("steamapps") / "libraryfolders.vdf"


def parse_vdf_key_value(line: str) -> Optional[Tuple[str, str]]:
    """Parse a '"key"\t\t"value"' line into (key, value).

    Returns None for anything that does not start with two quoted strings.
    Escapes are not interpreted; manifest fields never contain quotes.
    """
    line = line.strip()
    if not line.startswith('"'):
        return None
    parts = line.split('"')
    # ['', key, whitespace, value, ...]
    if len(parts) < 5:
        return None
    return parts[1], parts[3]


def read_library_roots(steam_root: Path) -> List[Path]:
    """Library root directories listed in <steam_root>/steamapps/libraryfolders.vdf.

    Best effort: a missing or unreadable file yields an empty list.
    """
    vdf_path = steam_root / LIBRARY_FOLDERS_FILE
    if not vdf_path.exists():
        return []
    try:
        content = vdf_path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.warning(f"Could not read {vdf_path}: {e}")
        return []

    roots = []
    for line in content.splitlines():
        pair = parse_vdf_key_value(line)
        if pair and pair[0].lower() == "path":
            # VDF escapes backslashes; paths on Linux rarely have any
            roots.append(Path(pair[1].replace("\\\\", "\\")))
    return roots


def get_library_folders(steam_root: Path) -> List[Path]:
    """All existing steamapps directories, main library first.

    Raises:
        LibraryNotFound: no library folder exists at all
    """
    main_steamapps = steam_root / "steamapps"
    folders: List[Path] = []

    for root in read_library_roots(steam_root):
        steamapps = root / "steamapps"
        if steamapps.is_dir():
            logger.debug(f"Found library folder: {steamapps}")
            folders.append(steamapps)
        else:
            logger.debug(f"Library folder does not exist: {steamapps}")

    if main_steamapps.is_dir() and not _contains_same(folders, main_steamapps):
        folders.insert(0, main_steamapps)

    if not folders:
        raise LibraryNotFound(steam_root)
    return folders


def _contains_same(paths: Iterable[Path], target: Path) -> bool:
    """Membership test that treats symlinked aliases (~/.steam/steam) as equal."""
    for p in paths:
        try:
            if p == target or p.resolve() == target.resolve():
                return True
        except OSError:
            continue
    return False

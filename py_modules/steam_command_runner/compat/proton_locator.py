"""
Proton Installation Locator

Finds a Proton build to run Windows games with.

Search order:
  1. ~/.steam/root/compatibilitytools.d and ~/.local/share/Steam/compatibilitytools.d
     (custom builds such as GE-Proton)
  2. steamapps/common of both canonical Steam roots (official Proton)
  3. steamapps/common of every extra library listed in libraryfolders.vdf

A directory counts as a Proton installation when it contains the `proton`
launcher script.
"""
import functools
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from ..errors import ProtonNotFound
from ..steam.library import read_library_roots
from ..utils.paths import get_compat_tool_dirs

logger = logging.getLogger(__name__)

PROTON_LAUNCHER = "proton"
PROTON_FAMILY_TOKEN = "proton"
COMPAT_TOOL_PATH_ENV = "STEAM_COMPAT_TOOL_PATH"

_VERSION_PART_RE = re.compile(r"\d+|\D+")


@dataclass(frozen=True)
class ProtonInstall:
    """A Proton directory as shown to the user."""
    name: str
    path: Path

    @property
    def launcher(self) -> Path:
        return self.path / PROTON_LAUNCHER


def is_valid_proton(path: Path) -> bool:
    """Check if a path contains a valid Proton installation."""
    return path.is_dir() and (path / PROTON_LAUNCHER).exists()


def get_steam_library_paths() -> List[Path]:
    """Default Steam roots plus every library root from their libraryfolders.vdf."""
    home = Path.home()
    defaults = [home / ".steam" / "steam", home / ".local" / "share" / "Steam"]
    paths = list(defaults)

    for base in defaults:
        for lib_path in read_library_roots(base):
            if lib_path.exists() and lib_path not in paths:
                paths.append(lib_path)
    return paths


def get_search_paths() -> List[Path]:
    """All directories that may hold Proton installations, in priority order."""
    paths = get_compat_tool_dirs()
    for steam_path in get_steam_library_paths():
        paths.append(steam_path / "steamapps" / "common")
    return paths


def _list_dir(base_path: Path) -> List[Path]:
    try:
        return sorted(base_path.iterdir())
    except OSError:
        return []


def locate_proton(
    requested_version: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    search_paths: Optional[List[Path]] = None,
) -> Path:
    """Locate a Proton installation directory.

    Args:
        requested_version: Directory name (or part of it) to look for, e.g.
            "GE-Proton9-20" or "Proton 9.0". None picks the best available.
        environ: Environment to read STEAM_COMPAT_TOOL_PATH from (default os.environ)
        search_paths: Override of get_search_paths(), mainly for tests

    Returns:
        Path of the Proton directory (the launcher is <path>/proton)

    Raises:
        ProtonNotFound: nothing matched
    """
    env = os.environ if environ is None else environ
    paths = get_search_paths() if search_paths is None else search_paths
    logger.debug(f"Searching for Proton in: {[str(p) for p in paths]}")

    if requested_version:
        logger.info(f"Looking for Proton version: {requested_version}")
        wanted = requested_version.lower()

        for base_path in paths:
            exact_path = base_path / requested_version
            if is_valid_proton(exact_path):
                return exact_path

            for entry in _list_dir(base_path):
                if wanted in entry.name.lower() and is_valid_proton(entry):
                    return entry

        raise ProtonNotFound(requested_version)

    tool_path = env.get(COMPAT_TOOL_PATH_ENV)
    if tool_path:
        path = Path(tool_path)
        if is_valid_proton(path):
            logger.debug(f"Using {COMPAT_TOOL_PATH_ENV}: {path}")
            return path
        logger.debug(f"{COMPAT_TOOL_PATH_ENV} is not a Proton installation: {path}")

    candidates = []
    for base_path in paths:
        for entry in _list_dir(base_path):
            if PROTON_FAMILY_TOKEN in entry.name.lower() and is_valid_proton(entry):
                candidates.append(entry)

    if not candidates:
        raise ProtonNotFound("any")

    # Plain name order: later names are usually newer releases
    candidates.sort(key=lambda p: p.name, reverse=True)
    return candidates[0]


def list_proton_versions(search_paths: Optional[List[Path]] = None) -> List[ProtonInstall]:
    """All valid Proton installations, deduplicated by name, in natural version order."""
    paths = get_search_paths() if search_paths is None else search_paths
    versions: List[ProtonInstall] = []
    seen_names = set()

    for base_path in paths:
        for entry in _list_dir(base_path):
            if not is_valid_proton(entry):
                continue
            # First occurrence wins, search paths are in priority order
            if entry.name in seen_names:
                continue
            seen_names.add(entry.name)
            versions.append(ProtonInstall(entry.name, entry))

    versions.sort(key=lambda v: natural_sort_key(v.name))
    return versions


def split_version_parts(name: str) -> List[str]:
    """Split "GE-Proton9-10" into ["GE-Proton", "9", "-", "10"]."""
    return _VERSION_PART_RE.findall(name)


def _compare_parts(a: str, b: str) -> int:
    if a.isdecimal() and b.isdecimal():
        a_key, b_key = int(a), int(b)
    else:
        a_key, b_key = a.lower(), b.lower()
    return (a_key > b_key) - (a_key < b_key)


def compare_version_names(a: str, b: str) -> int:
    """Natural ordering for version names, e.g. GE-Proton9-1 < GE-Proton9-10 < GE-Proton10-1.

    Returns a negative number, zero or a positive number like a cmp function.
    """
    a_parts = split_version_parts(a)
    b_parts = split_version_parts(b)

    for a_part, b_part in zip(a_parts, b_parts):
        order = _compare_parts(a_part, b_part)
        if order:
            return order

    # Equal so far: the shorter name sorts first
    return (len(a_parts) > len(b_parts)) - (len(a_parts) < len(b_parts))


natural_sort_key = functools.cmp_to_key(compare_version_names)

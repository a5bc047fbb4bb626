"""
Steam overlay environment.

The Steam overlay is a Vulkan layer plus a preloaded gameoverlayrenderer.so.
When a game is started by us instead of directly by Steam, both have to be
re-enabled explicitly for the overlay and Steam Input to attach.
"""
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

OVERLAY_LIBRARY = "gameoverlayrenderer.so"

OVERLAY_ENV_FLAGS: Dict[str, str] = {
    "ENABLE_VK_LAYER_VALVE_steam_overlay_1": "1",
    "ENABLE_GAMESCOPE_WSI": "1",
}


def get_overlay_steam_root() -> Path:
    return Path.home() / ".local" / "share" / "Steam"


def get_steam_overlay_paths(steam_root: Optional[Path] = None) -> Optional[str]:
    """
    Overlay libraries for LD_PRELOAD, 64-bit first, joined with ':'.

    Returns None when the 64-bit library is missing; the 32-bit one is optional.
    """
    root = steam_root if steam_root is not None else get_overlay_steam_root()
    overlay_64 = root / "ubuntu12_64" / OVERLAY_LIBRARY
    overlay_32 = root / "ubuntu12_32" / OVERLAY_LIBRARY

    logger.debug("Checking for Steam overlay libraries:")
    logger.debug(f"  64-bit: {overlay_64} (exists: {overlay_64.exists()})")
    logger.debug(f"  32-bit: {overlay_32} (exists: {overlay_32.exists()})")

    if not overlay_64.exists():
        logger.debug("Steam overlay 64-bit library not found")
        return None

    paths: List[str] = [str(overlay_64)]
    if overlay_32.exists():
        paths.append(str(overlay_32))
    return ":".join(paths)


def build_ld_preload_with_overlay(
    environ: Optional[Mapping[str, str]] = None, steam_root: Optional[Path] = None
) -> Optional[str]:
    """
    LD_PRELOAD value with the Steam overlay added.

    An existing value that already loads the overlay is kept as-is; otherwise
    the overlay paths are prepended to it. None when no overlay is installed.
    """
    overlay_paths = get_steam_overlay_paths(steam_root)
    if overlay_paths is None:
        return None

    env = os.environ if environ is None else environ
    existing = env.get("LD_PRELOAD")
    logger.debug(f"Existing LD_PRELOAD: {existing}")

    if not existing:
        return overlay_paths
    if OVERLAY_LIBRARY in existing:
        logger.debug(f"LD_PRELOAD already contains {OVERLAY_LIBRARY}, keeping as-is")
        return existing
    return f"{overlay_paths}:{existing}"


def get_overlay_env(
    environ: Optional[Mapping[str, str]] = None, steam_root: Optional[Path] = None
) -> Dict[str, str]:
    """Overlay flags plus LD_PRELOAD (when resolvable), in the order they are applied."""
    env = dict(OVERLAY_ENV_FLAGS)
    ld_preload = build_ld_preload_with_overlay(environ, steam_root)
    if ld_preload is not None:
        env["LD_PRELOAD"] = ld_preload
    return env

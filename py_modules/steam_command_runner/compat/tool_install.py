"""
Install / uninstall steam-command-runner as a Steam compatibility tool.

Creates compatibilitytools.d/<name>/ containing a symlink to the runner plus
the compatibilitytool.vdf and toolmanifest.vdf descriptors Steam reads to list
the tool under "Force the use of a specific Steam Play compatibility tool".
"""
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import vdf

from ..errors import ExecutionFailed, SteamNotFound
from ..utils.paths import APP_NAME, get_compat_tool_dirs

logger = logging.getLogger(__name__)

DEFAULT_TOOL_NAME = APP_NAME
RUNNER_LINK_NAME = APP_NAME

# Official Proton AppID mapping, matched as lower-case substrings.
# GE-Proton has no AppID; a name that is all digits is taken as an AppID.
OFFICIAL_PROTON_MAP = [
    ("proton experimental", "1493710"),
    ("proton hotfix", "2180100"),
    ("proton 10", "3658110"),
    ("proton 9", "2805730"),
    ("proton 8", "2348590"),
    ("proton 7", "1887720"),
    ("proton-ge", None),
    ("ge-proton", None),
]


def proton_name_to_appid(name: str) -> Optional[str]:
    """Convert a Proton display name to its Steam AppID, if it has one."""
    name_lower = name.lower()
    for pattern, appid in OFFICIAL_PROTON_MAP:
        if pattern in name_lower:
            return appid
    if name.isdecimal():
        return name
    return None


def generate_compatibilitytool_vdf(name: str, display_name: str) -> str:
    """Content of compatibilitytool.vdf."""
    data = {
        "compatibilitytools": {
            "compat_tools": {
                name: {
                    "install_path": ".",
                    "display_name": display_name,
                    "from_oslist": "windows",
                    "to_oslist": "linux",
                }
            }
        }
    }
    return vdf.dumps(data, pretty=True)


def generate_toolmanifest_vdf(require_proton_appid: Optional[str] = None) -> str:
    """Content of toolmanifest.vdf; Steam runs `commandline` with %verb% filled in."""
    manifest: Dict[str, str] = {
        "version": "2",
        "commandline": f"/{RUNNER_LINK_NAME} compat %verb%",
    }
    if require_proton_appid:
        manifest["require_tool_appid"] = require_proton_appid
    manifest["use_sessions"] = "1"
    return vdf.dumps({"manifest": manifest}, pretty=True)


def get_compat_tools_dir(steam_path: Optional[Union[str, Path]] = None) -> Path:
    """compatibilitytools.d of the given or detected Steam installation.

    Raises:
        SteamNotFound: no candidate's Steam directory exists
    """
    if steam_path is not None:
        return Path(steam_path) / "compatibilitytools.d"

    candidates: List[Path] = get_compat_tool_dirs()
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        candidates.append(Path(xdg_data) / "Steam" / "compatibilitytools.d")

    for candidate in candidates:
        if candidate.parent.exists():
            logger.debug(f"Found Steam at: {candidate.parent}")
            return candidate

    raise SteamNotFound(candidates)


def get_self_path() -> Path:
    """Path of the running steam-command-runner executable."""
    argv0 = Path(sys.argv[0])
    if argv0.name == RUNNER_LINK_NAME and argv0.exists():
        return argv0.resolve()
    found = shutil.which(RUNNER_LINK_NAME)
    if found:
        return Path(found).resolve()
    raise ExecutionFailed(f"could not find the {RUNNER_LINK_NAME} executable on PATH")


def install_compat_tool(
    name: str = DEFAULT_TOOL_NAME,
    steam_path: Optional[Union[str, Path]] = None,
    require_proton: Optional[str] = None,
    executable: Optional[Union[str, Path]] = None,
) -> Path:
    """Install the compatibility tool and return its directory."""
    tool_dir = get_compat_tools_dir(steam_path) / name
    logger.info(f"Installing to: {tool_dir}")
    tool_dir.mkdir(parents=True, exist_ok=True)

    self_path = Path(executable) if executable is not None else get_self_path()
    target_exe = tool_dir / RUNNER_LINK_NAME
    if target_exe.is_symlink() or target_exe.exists():
        target_exe.unlink()
    logger.debug(f"Creating symlink: {target_exe} -> {self_path}")
    target_exe.symlink_to(self_path)

    display_name = f"Steam Command Runner ({name})"
    compat_vdf_path = tool_dir / "compatibilitytool.vdf"
    logger.debug(f"Writing: {compat_vdf_path}")
    compat_vdf_path.write_text(generate_compatibilitytool_vdf(name, display_name), encoding="utf-8")

    proton_appid = proton_name_to_appid(require_proton) if require_proton else None
    manifest_path = tool_dir / "toolmanifest.vdf"
    logger.debug(f"Writing: {manifest_path}")
    manifest_path.write_text(generate_toolmanifest_vdf(proton_appid), encoding="utf-8")

    logger.info("Installation complete")
    return tool_dir


def uninstall_compat_tool(
    name: str = DEFAULT_TOOL_NAME, steam_path: Optional[Union[str, Path]] = None
) -> bool:
    """Remove the compatibility tool directory. Returns False if it was not installed."""
    tool_dir = get_compat_tools_dir(steam_path) / name
    if not tool_dir.exists():
        logger.info(f"Tool not installed at: {tool_dir}")
        return False

    logger.info(f"Removing: {tool_dir}")
    shutil.rmtree(tool_dir)
    return True

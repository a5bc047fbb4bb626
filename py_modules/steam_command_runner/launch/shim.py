"""
Gamescope shim.

A `gamescope` symlink to steam-command-runner placed early on PATH lets plain
launch options like `gamescope -- %command%` pick up per-game gamescope args
from our config. When invoked under that name we prepend the configured args
to the ones on the command line and exec the real gamescope.
"""
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Mapping, Optional, Tuple, Union

from ..compat.context import parse_app_id
from ..compat.tool_install import get_self_path
from ..config.resolver import is_gamescope_session, resolve
from ..errors import ArgSplitError, ConfigError, ExecutionFailed, GamescopeNotFound
from ..utils.paths import get_default_shim_path
from .composer import GAMESCOPE_BINARY, split_words

logger = logging.getLogger(__name__)


def is_invoked_as_gamescope(argv0: Optional[str] = None) -> bool:
    """Check if we were started through a symlink named gamescope."""
    arg0 = sys.argv[0] if argv0 is None else argv0
    return Path(arg0).name == GAMESCOPE_BINARY


def parse_gamescope_args(args: List[str]) -> Tuple[List[str], List[str]]:
    """Split argv (argv[0] included) at the first "--" into (gamescope args, command)."""
    rest = list(args[1:])
    if "--" not in rest:
        return rest, []
    sep = rest.index("--")
    return rest[:sep], rest[sep + 1:]


def get_config_gamescope_args(
    app_id: Optional[int] = None,
    config_path: Optional[Union[str, Path]] = None,
    games_dir: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Configured gamescope args for the app (SteamAppId when app_id is None).

    Best effort: a broken config or disabled gamescope gives no args, so the
    real gamescope still starts with whatever the command line says.
    """
    env = os.environ if environ is None else environ
    if app_id is None:
        app_id = parse_app_id(env.get("SteamAppId"))

    try:
        policy = resolve(app_id, is_gamescope_session(env), config_path, games_dir)
    except ConfigError as e:
        logger.warning(f"Ignoring config for gamescope shim: {e}")
        return []

    if not policy.gamescope_enabled or not policy.gamescope_args:
        return []
    try:
        return split_words(policy.gamescope_args, "gamescope arguments")
    except ArgSplitError as e:
        logger.warning(f"Ignoring gamescope args: {e}")
        return []


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def find_real_gamescope(
    self_path: Optional[Path] = None, path_env: Optional[str] = None
) -> Path:
    """
    First gamescope on PATH that is not this program.

    Raises:
        GamescopeNotFound: only our own shim (or nothing) is on PATH
    """
    if self_path is None:
        self_path = Path(sys.argv[0]).resolve()
    search = os.environ.get("PATH", "") if path_env is None else path_env

    for directory in search.split(os.pathsep):
        if not directory:
            continue
        candidate = Path(directory) / GAMESCOPE_BINARY
        if not candidate.exists():
            continue
        # Symlinks are followed so our own shim is skipped
        if _same_file(candidate, self_path):
            logger.debug(f"Skipping shim: {candidate}")
            continue
        return candidate

    raise GamescopeNotFound()


def build_shim_command(real_gamescope: Path, argv: List[str], config_args: List[str]) -> List[str]:
    """Config args first, then command-line args, then "--" and the command if any."""
    cli_args, command = parse_gamescope_args(argv)
    full = [str(real_gamescope)] + config_args + cli_args
    if command:
        full.append("--")
        full.extend(command)
    return full


def handle_gamescope_shim(argv: Optional[List[str]] = None) -> int:
    """Entry point when invoked as gamescope. Returns only on failure."""
    args = sys.argv if argv is None else argv
    try:
        real_gamescope = find_real_gamescope()
    except GamescopeNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Make sure gamescope is installed and the steam-command-runner symlink", file=sys.stderr)
        print("is not shadowing the real gamescope binary.", file=sys.stderr)
        return 1

    full = build_shim_command(real_gamescope, args, get_config_gamescope_args())
    logger.debug(f"Exec'ing real gamescope: {full}")
    try:
        os.execv(full[0], full)
    except OSError as e:
        print(f"Error: Failed to exec gamescope: {e}", file=sys.stderr)
    return 1


def install_shim(
    shim_path: Optional[Union[str, Path]] = None, executable: Optional[Union[str, Path]] = None
) -> Path:
    """
    Create the gamescope -> steam-command-runner symlink.

    Raises:
        ExecutionFailed: a non-symlink file already exists at shim_path
    """
    target = Path(shim_path) if shim_path is not None else get_default_shim_path()
    self_path = Path(executable) if executable is not None else get_self_path()

    if target.is_symlink():
        target.unlink()
    elif target.exists():
        raise ExecutionFailed(f"{target} exists and is not a symlink, refusing to replace it")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.symlink_to(self_path)
    logger.info(f"Installed gamescope shim: {target} -> {self_path}")

    first_on_path = shutil.which(GAMESCOPE_BINARY)
    if first_on_path is None or not _same_file(Path(first_on_path), target):
        logger.warning(f"Make sure {target.parent} comes before the real gamescope on PATH")
    return target


def uninstall_shim(shim_path: Optional[Union[str, Path]] = None) -> bool:
    """Remove the shim symlink. Returns False if there was none."""
    target = Path(shim_path) if shim_path is not None else get_default_shim_path()
    if not target.is_symlink():
        logger.info(f"No gamescope shim at: {target}")
        return False
    target.unlink()
    logger.info(f"Removed gamescope shim: {target}")
    return True

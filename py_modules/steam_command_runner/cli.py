#!/usr/bin/env python3
"""
steam-command-runner command line interface.

Examples:
    steam-command-runner run /path/to/game
    steam-command-runner launch-options set-all --dry-run
    steam-command-runner search "Half-Life"

Steam also runs us as a compatibility tool (`steam-command-runner compat
<verb> ...`) and, through a symlink, as `gamescope`.
"""
import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from . import launch_options
from .compat.context import CompatToolContext, parse_app_id
from .compat.proton_locator import list_proton_versions
from .compat.tool_install import DEFAULT_TOOL_NAME, install_compat_tool, uninstall_compat_tool
from .compat.verbs import Verb
from .config.loader import write_game_config_template, write_global_config
from .config.models import GlobalConfig
from .config.resolver import is_gamescope_session, resolve
from .errors import ExecutionFailed, NoCommand, SteamCommandRunnerError, StoreSearchError
from .launch.runner import run_game
from .launch.shim import handle_gamescope_shim, install_shim, is_invoked_as_gamescope, uninstall_shim
from .steam.store_search import search_store
from .utils.logging_setup import setup_compat_logging, setup_logging
from .utils.paths import get_config_path, get_game_config_path

logger = logging.getLogger(__name__)

RESTART_NOTE = "Note: Restart Steam for changes to take effect."
SUBCOMMANDS = (
    "run", "compat", "config", "proton", "gamescope", "launch-options",
    "search", "install", "uninstall",
)


def _app_id_from_env() -> Optional[int]:
    return parse_app_id(os.environ.get("SteamAppId"))


def _config_path(args) -> Path:
    return Path(args.config) if args.config else get_config_path()


# --- run / compat ---

def cmd_run(args) -> int:
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        raise NoCommand()

    app_id = args.app_id if args.app_id is not None else _app_id_from_env()
    logger.info(f"Running command with app_id: {app_id}")
    logger.debug(f"Command: {command}")

    policy = resolve(app_id, is_gamescope_session(), config_path=args.config)
    return run_game(policy, command)


def cmd_compat(args) -> int:
    ctx = CompatToolContext.from_env_and_args(args.verb, list(args.args))
    logger.info(f"Compatibility tool invoked: verb={ctx.verb.value}, app_id={ctx.steam_app_id}")
    logger.debug(f"Game path: {ctx.game_path}")
    logger.debug(f"Game args: {ctx.game_args}")

    if not ctx.verb.should_execute():
        # Path queries: getcompatpath / getnativepath
        path = ctx.compat_data_path if ctx.verb == Verb.GET_COMPAT_PATH else ctx.game_path
        if path is not None:
            print(path)
        return 0

    policy = resolve(ctx.steam_app_id, is_gamescope_session(), config_path=args.config)
    return run_game(policy, ctx.command())


# --- config ---

def _target_config_path(args) -> Path:
    if args.app_id is not None:
        return get_game_config_path(args.app_id)
    return _config_path(args)


def cmd_config_show(args) -> int:
    path = _target_config_path(args)
    if path.exists():
        print(f"# {path}\n")
        print(path.read_text(encoding="utf-8"))
    else:
        print(f"Config file does not exist: {path}")
        print("\nRun 'steam-command-runner config init' to create default config.")
    return 0


def cmd_config_init(args) -> int:
    path = _config_path(args)
    if path.exists():
        print(f"Config file already exists: {path}")
        return 0
    write_global_config(path, GlobalConfig.template())
    logger.info(f"Created default config at: {path}")
    print(f"Created default config at: {path}")
    return 0


def cmd_config_edit(args) -> int:
    app_id = args.app_id
    if args.name:
        results = search_store(args.name, limit=1)
        if not results:
            raise StoreSearchError(f"no game found matching '{args.name}'")
        app_id = results[0].app_id
        print(f"Editing config for {results[0].name} ({app_id})")

    if app_id is not None:
        path = write_game_config_template(app_id)
    else:
        path = _config_path(args)
        if not path.exists():
            write_global_config(path, GlobalConfig.template())

    editor = os.environ.get("EDITOR", "nano")
    try:
        completed = subprocess.run([editor, str(path)])
    except OSError as e:
        raise ExecutionFailed(f"could not start editor '{editor}': {e}") from e
    if completed.returncode != 0:
        raise ExecutionFailed(f"editor '{editor}' exited with status {completed.returncode}")
    return 0


def cmd_config_path(args) -> int:
    print(_target_config_path(args))
    return 0


# --- proton ---

def cmd_proton_list(args) -> int:
    versions = list_proton_versions()
    if not versions:
        print("No Proton versions found.")
        return 0
    for version in versions:
        print(f"{version.name}\t{version.path}" if args.paths else version.name)
    return 0


# --- gamescope ---

def cmd_gamescope_args(args) -> int:
    app_id = args.app_id if args.app_id is not None else _app_id_from_env()
    policy = resolve(app_id, is_gamescope_session(), config_path=args.config)
    # No newline, for $(steam-command-runner gamescope args) substitution
    if policy.gamescope_enabled and policy.gamescope_args:
        sys.stdout.write(policy.gamescope_args)
    return 0


def cmd_gamescope_enabled(args) -> int:
    app_id = args.app_id if args.app_id is not None else _app_id_from_env()
    policy = resolve(app_id, is_gamescope_session(), config_path=args.config)
    print("true" if policy.gamescope_enabled and policy.gamescope_args else "false")
    return 0


def cmd_gamescope_install_shim(args) -> int:
    path = install_shim(args.path)
    print(f"Installed gamescope shim at: {path}")
    return 0


def cmd_gamescope_uninstall_shim(args) -> int:
    if uninstall_shim(args.path):
        print("Removed gamescope shim.")
    else:
        print("Gamescope shim is not installed.")
    return 0


# --- launch-options ---

def cmd_lo_set_all(args) -> int:
    result = launch_options.set_all(
        backup=args.backup, dry_run=args.dry_run, user_id=args.user_id, options=args.options
    )
    games = result['games']
    if not games:
        print("No installed games found.")
        return 0

    if result['dry_run']:
        print(f"Dry run - would set launch options for {len(games)} games:")
        print(f"Launch options: {result['options']}")
        print()
        for game in games:
            print(f"  {game.name} ({game.app_id})")
        return 0

    print(f"Set launch options for {len(games)} games in {result['config_path']}")
    print(f"Launch options: {result['options']}")
    print()
    print(RESTART_NOTE)
    return 0


def cmd_lo_set(args) -> int:
    result = launch_options.set_single(args.app_id, options=args.options, user_id=args.user_id)
    print(f"Set launch options for app {result['app_id']}:")
    print(f"  {result['options']}")
    print()
    print(RESTART_NOTE)
    return 0


def cmd_lo_clear_all(args) -> int:
    result = launch_options.clear_all(backup=args.backup, only_ours=args.only_ours, user_id=args.user_id)
    print(f"Cleared launch options for {result['cleared']} games.")
    if result['skipped']:
        print(f"Skipped {result['skipped']} games (not set by steam-command-runner).")
    print()
    print(RESTART_NOTE)
    return 0


def cmd_lo_show(args) -> int:
    result = launch_options.show_single(args.app_id, user_id=args.user_id)
    if result['options'] is None:
        print(f"No launch options set for app {args.app_id}.")
        return 0
    print(f"Launch options for app {args.app_id}:")
    print(f"  {result['options']}")
    if result['ours']:
        print("  (set by steam-command-runner)")
    return 0


def cmd_lo_list(args) -> int:
    result = launch_options.list_all(user_id=args.user_id)
    if result['with_options']:
        print("Games with launch options:")
        for entry in result['with_options']:
            marker = " [ours]" if entry['ours'] else ""
            print(f"  {entry['game'].name} ({entry['game'].app_id}){marker}")
            print(f"    {entry['options']}")
        print()
    print(
        f"Games without launch options: {len(result['without_options'])} "
        f"(use 'launch-options set-all' to set)"
    )
    return 0


# --- search / install ---

def cmd_search(args) -> int:
    results = search_store(args.query, limit=args.limit)
    if not results:
        print(f"No results found for '{args.query}'")
        return 0
    print(f"{'App ID':>10}  Name")
    for result in results:
        print(f"{result.app_id:>10}  {result.name}")
    return 0


def cmd_install(args) -> int:
    tool_dir = install_compat_tool(args.name, args.steam_path, args.require_proton)
    print(f"Installed compatibility tool to: {tool_dir}")
    print("Restart Steam, then pick it under Properties > Compatibility.")
    return 0


def cmd_uninstall(args) -> int:
    if uninstall_compat_tool(args.name, args.steam_path):
        print("Compatibility tool removed. Restart Steam to apply.")
    else:
        print("Compatibility tool is not installed.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="steam-command-runner",
        description="Command wrapper for Linux gaming with gamescope integration",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-c", "--config", help="Config file path override")
    sub = parser.add_subparsers(dest="subcommand")

    p = sub.add_parser("run", help="Run a command with configured wrappers")
    p.add_argument("-a", "--app-id", type=int, help="Steam App ID (for per-game config)")
    p.add_argument("command", nargs=argparse.REMAINDER, help="Command and arguments to run")
    p.set_defaults(func=cmd_run)

    p = sub.add_parser("compat", help="Entry point used by Steam when installed as a compatibility tool")
    p.add_argument("verb")
    p.add_argument("args", nargs=argparse.REMAINDER)
    p.set_defaults(func=cmd_compat, compat=True)

    config = sub.add_parser("config", help="Configuration management")
    config_sub = config.add_subparsers(dest="action", required=True)
    p = config_sub.add_parser("show", help="Show current configuration")
    p.add_argument("-a", "--app-id", type=int)
    p.set_defaults(func=cmd_config_show)
    p = config_sub.add_parser("init", help="Initialize configuration with defaults")
    p.set_defaults(func=cmd_config_init)
    p = config_sub.add_parser("edit", help="Edit configuration in $EDITOR")
    group = p.add_mutually_exclusive_group()
    group.add_argument("-a", "--app-id", type=int)
    group.add_argument("-n", "--name", help="Game name to search for (resolves to App ID)")
    p.set_defaults(func=cmd_config_edit)
    p = config_sub.add_parser("path", help="Show configuration file path")
    p.add_argument("-a", "--app-id", type=int)
    p.set_defaults(func=cmd_config_path)

    proton = sub.add_parser("proton", help="Proton version management")
    proton_sub = proton.add_subparsers(dest="action", required=True)
    p = proton_sub.add_parser("list", help="List available Proton versions")
    p.add_argument("-p", "--paths", action="store_true", help="Show full paths")
    p.set_defaults(func=cmd_proton_list)

    gamescope = sub.add_parser("gamescope", help="Gamescope argument management")
    gamescope_sub = gamescope.add_subparsers(dest="action", required=True)
    p = gamescope_sub.add_parser("args", help="Print gamescope arguments for launch options")
    p.add_argument("-a", "--app-id", type=int)
    p.set_defaults(func=cmd_gamescope_args)
    p = gamescope_sub.add_parser("enabled", help="Print true/false")
    p.add_argument("-a", "--app-id", type=int)
    p.set_defaults(func=cmd_gamescope_enabled)
    p = gamescope_sub.add_parser("install-shim", help="Install the gamescope shim symlink")
    p.add_argument("-p", "--path", help="Symlink path (default: ~/.local/bin/gamescope)")
    p.set_defaults(func=cmd_gamescope_install_shim)
    p = gamescope_sub.add_parser("uninstall-shim", help="Remove the gamescope shim symlink")
    p.add_argument("-p", "--path", help="Symlink path (default: ~/.local/bin/gamescope)")
    p.set_defaults(func=cmd_gamescope_uninstall_shim)

    lo = sub.add_parser("launch-options", help="Manage Steam launch options for games")
    lo_sub = lo.add_subparsers(dest="action", required=True)
    p = lo_sub.add_parser("set-all", help="Set launch options for all installed games")
    p.add_argument("--no-backup", dest="backup", action="store_false", help="Skip localconfig.vdf backup")
    p.add_argument("-d", "--dry-run", action="store_true", help="Show what would change")
    p.add_argument("-o", "--options", help="Launch options (default: gamescope -- %%command%%)")
    p.add_argument("-u", "--user-id", type=int)
    p.set_defaults(func=cmd_lo_set_all)
    p = lo_sub.add_parser("set", help="Set launch options for one game")
    p.add_argument("-a", "--app-id", type=int, required=True)
    p.add_argument("-o", "--options")
    p.add_argument("-u", "--user-id", type=int)
    p.set_defaults(func=cmd_lo_set)
    p = lo_sub.add_parser("clear-all", help="Clear launch options for all games")
    p.add_argument("--no-backup", dest="backup", action="store_false")
    p.add_argument("--all", dest="only_ours", action="store_false",
                   help="Also clear launch options not set by steam-command-runner")
    p.add_argument("-u", "--user-id", type=int)
    p.set_defaults(func=cmd_lo_clear_all)
    p = lo_sub.add_parser("show", help="Show launch options for one game")
    p.add_argument("-a", "--app-id", type=int, required=True)
    p.add_argument("-u", "--user-id", type=int)
    p.set_defaults(func=cmd_lo_show)
    p = lo_sub.add_parser("list", help="List games with their launch options")
    p.add_argument("-u", "--user-id", type=int)
    p.set_defaults(func=cmd_lo_list)

    p = sub.add_parser("search", help="Search for a game's Steam App ID")
    p.add_argument("query")
    p.add_argument("-l", "--limit", type=int, default=10)
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("install", help="Install as a Steam compatibility tool")
    p.add_argument("-n", "--name", default=DEFAULT_TOOL_NAME)
    p.add_argument("-s", "--steam-path")
    p.add_argument("-r", "--require-proton", help="Proton the tool runs on top of, e.g. 'Proton 9'")
    p.set_defaults(func=cmd_install)

    p = sub.add_parser("uninstall", help="Remove the compatibility tool")
    p.add_argument("-n", "--name", default=DEFAULT_TOOL_NAME)
    p.add_argument("-s", "--steam-path")
    p.set_defaults(func=cmd_uninstall)

    return parser


def normalize_argv(argv: List[str]) -> List[str]:
    """
    Rewrite legacy `steam-command-runner CMD...` into `run CMD...`.

    Global options before the command are kept in front.
    """
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in ("-c", "--config"):
            i += 2
        elif arg.startswith("-"):
            if arg == "--":
                return argv[:i] + ["run"] + argv[i + 1:]
            i += 1
        else:
            break
    if i >= len(argv) or argv[i] in SUBCOMMANDS:
        return argv
    return argv[:i] + ["run"] + argv[i:]


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        if is_invoked_as_gamescope():
            setup_logging()
            return handle_gamescope_shim()
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(normalize_argv(list(argv)))

    if getattr(args, "compat", False):
        setup_compat_logging(args.verbose)
    else:
        setup_logging(args.verbose)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (SteamCommandRunnerError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

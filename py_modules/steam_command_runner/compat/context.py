"""
Context handed to us by Steam when running as a compatibility tool.

Steam runs `<tool> compat <verb> <game path> [game args...]` with the
SteamAppId, SteamGameId and STEAM_COMPAT_* variables set.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .verbs import Verb

logger = logging.getLogger(__name__)


def parse_app_id(value: Optional[str]) -> Optional[int]:
    """Parse a SteamAppId value; None for missing or non-numeric values."""
    if not value:
        return None
    try:
        app_id = int(value)
    except ValueError:
        return None
    return app_id if app_id >= 0 else None


@dataclass
class CompatToolContext:
    verb: Verb
    game_path: Optional[Path] = None
    game_args: List[str] = field(default_factory=list)
    steam_app_id: Optional[int] = None
    steam_game_id: Optional[str] = None
    compat_data_path: Optional[Path] = None
    client_install_path: Optional[Path] = None

    @classmethod
    def from_env_and_args(
        cls, verb: str, args: List[str], environ: Optional[Mapping[str, str]] = None
    ) -> "CompatToolContext":
        """Build the context from the verb, its arguments and the environment.

        Raises:
            UnknownVerb: verb is not one Steam defines
        """
        env = os.environ if environ is None else environ
        parsed_verb = Verb.parse(verb)

        game_path = Path(args[0]) if args else None
        compat_data = env.get("STEAM_COMPAT_DATA_PATH")
        client_install = env.get("STEAM_COMPAT_CLIENT_INSTALL_PATH")

        ctx = cls(
            verb=parsed_verb,
            game_path=game_path,
            game_args=list(args[1:]),
            steam_app_id=parse_app_id(env.get("SteamAppId")),
            steam_game_id=env.get("SteamGameId"),
            compat_data_path=Path(compat_data) if compat_data else None,
            client_install_path=Path(client_install) if client_install else None,
        )
        logger.debug("Steam environment:")
        logger.debug(f"  SteamAppId: {ctx.steam_app_id}")
        logger.debug(f"  SteamGameId: {ctx.steam_game_id}")
        logger.debug(f"  STEAM_COMPAT_DATA_PATH: {ctx.compat_data_path}")
        logger.debug(f"  STEAM_COMPAT_CLIENT_INSTALL_PATH: {ctx.client_install_path}")
        return ctx

    def command(self) -> List[str]:
        """The game command line: executable followed by its arguments."""
        if self.game_path is None:
            return []
        return [str(self.game_path)] + self.game_args

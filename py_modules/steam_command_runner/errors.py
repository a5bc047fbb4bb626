"""
Error types raised by steam-command-runner.

Every error derives from SteamCommandRunnerError so the CLI can report any of
them uniformly. Resolver, locator and Steam-file errors propagate unchanged to
the caller; HookFailed is always caught and logged where hooks are run.
"""
from pathlib import Path
from typing import Iterable, Optional, Union


class SteamCommandRunnerError(Exception):
    """Base class for all steam-command-runner errors."""


class ConfigError(SteamCommandRunnerError):
    """A configuration source could not be used."""

    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None):
        self.path = Path(path)
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"{self.path}: {self.cause}"


class ConfigReadError(ConfigError):
    def _describe(self) -> str:
        return f"Could not read config file {self.path}: {self.cause}"


class ConfigParseError(ConfigError):
    def _describe(self) -> str:
        return f"Failed to parse config file {self.path}: {self.cause}"


class ProtonNotFound(SteamCommandRunnerError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Proton version '{name}' not found")


class NoCommand(SteamCommandRunnerError):
    def __init__(self):
        super().__init__("No command specified. Did you forget to include the command to run?")


class ArgSplitError(SteamCommandRunnerError):
    """A configured pre-command or gamescope argument string has unbalanced quoting."""

    def __init__(self, value: str, what: str = "arguments"):
        self.value = value
        self.what = what
        super().__init__(f"Could not parse {what}: {value}")


class ExecutionFailed(SteamCommandRunnerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to execute command: {reason}")


class HookFailed(SteamCommandRunnerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Hook execution failed: {reason}")


class SteamNotFound(SteamCommandRunnerError):
    def __init__(self, candidates: Iterable[Union[str, Path]] = ()):
        self.candidates = [Path(c) for c in candidates]
        checked = ", ".join(str(c) for c in self.candidates) or "(none)"
        super().__init__(f"Steam installation not found. Checked: {checked}")


class SteamUserNotFound(SteamCommandRunnerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Steam user not found: {reason}")


class LibraryNotFound(SteamCommandRunnerError):
    def __init__(self, steam_root: Union[str, Path]):
        self.steam_root = Path(steam_root)
        super().__init__(f"No Steam library folders found under {self.steam_root}")


class UnknownVerb(SteamCommandRunnerError):
    def __init__(self, verb: str):
        self.verb = verb
        super().__init__(
            f"Unknown verb '{verb}'. Expected: waitforexitandrun, run, getcompatpath, getnativepath"
        )


class GamescopeNotFound(SteamCommandRunnerError):
    def __init__(self):
        super().__init__("Real gamescope binary not found in PATH")


class StoreSearchError(SteamCommandRunnerError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Steam store search failed: {reason}")

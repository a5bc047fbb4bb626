"""
Configuration data model.

GlobalConfig mirrors ~/.config/steam-command-runner/config.toml, GameConfig a
per-game games/<app_id>.toml. The from_dict constructors validate the parsed
TOML tables and raise ValueError with the offending key; the loader turns that
into ConfigParseError with the file path.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ExecutionMode(str, Enum):
    """How the game executable is run."""
    NATIVE = "native"   # run as a Linux binary
    PROTON = "proton"   # always run through Proton
    AUTO = "auto"       # pick by executable suffix

    @classmethod
    def parse(cls, value: Any, where: str = "mode") -> "ExecutionMode":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"'{where}' must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"'{where}' must be one of {choices}, got '{value}'") from None


def _table(data: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"'{where}{key}' must be a table")
    return value


def _opt_str(data: Dict[str, Any], key: str, where: str = "") -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{where}{key}' must be a string, got {type(value).__name__}")
    return value


def _opt_bool(data: Dict[str, Any], key: str, where: str = "") -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"'{where}{key}' must be true or false")
    return value


def _str_map(data: Dict[str, Any], key: str) -> Dict[str, str]:
    result = {}
    for name, value in _table(data, key, "").items():
        # TOML lets people write MANGOHUD = 1; the environment only holds strings
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"'{key}.{name}' must be a string")
        result[str(name)] = str(value)
    return result


def _str_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return list(value)


@dataclass
class HookConfig:
    """A command run before launch or after exit."""
    command: str
    wait: bool = True
    working_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str) -> "HookConfig":
        command = _opt_str(data, "command", where)
        if not command:
            raise ValueError(f"'{where}command' is required")
        wait = _opt_bool(data, "wait", where)
        return cls(
            command=command,
            wait=True if wait is None else wait,
            working_dir=_opt_str(data, "working_dir", where),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"command": self.command, "wait": self.wait}
        if self.working_dir is not None:
            data["working_dir"] = self.working_dir
        return data


@dataclass
class HooksConfig:
    pre_launch: Optional[HookConfig] = None
    post_exit: Optional[HookConfig] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HooksConfig":
        hooks = _table(data, "hooks", "")
        result = cls()
        for slot in ("pre_launch", "post_exit"):
            if slot in hooks:
                table = _table(hooks, slot, "hooks.")
                setattr(result, slot, HookConfig.from_dict(table, f"hooks.{slot}."))
        return result

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.pre_launch is not None:
            data["pre_launch"] = self.pre_launch.to_dict()
        if self.post_exit is not None:
            data["post_exit"] = self.post_exit.to_dict()
        return data


@dataclass
class GamescopeConfig:
    """[gamescope] table. None means "not set here" so game files can defer to global."""
    enabled: Optional[bool] = None
    args: Optional[str] = None
    skip_pre_command: Optional[bool] = None
    pre_command: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GamescopeConfig":
        table = _table(data, "gamescope", "")
        return cls(
            enabled=_opt_bool(table, "enabled", "gamescope."),
            args=_opt_str(table, "args", "gamescope."),
            skip_pre_command=_opt_bool(table, "skip_pre_command", "gamescope."),
            pre_command=_opt_str(table, "pre_command", "gamescope."),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class GlobalConfig:
    """Settings applied to every game."""
    pre_command: Optional[str] = None
    default_proton: Optional[str] = None
    default_mode: ExecutionMode = ExecutionMode.AUTO
    env: Dict[str, str] = field(default_factory=dict)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    gamescope: GamescopeConfig = field(default_factory=GamescopeConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlobalConfig":
        mode = data.get("default_mode")
        return cls(
            pre_command=_opt_str(data, "pre_command"),
            default_proton=_opt_str(data, "default_proton"),
            default_mode=ExecutionMode.AUTO if mode is None else ExecutionMode.parse(mode, "default_mode"),
            env=_str_map(data, "env"),
            hooks=HooksConfig.from_dict(data),
            gamescope=GamescopeConfig.from_dict(data),
        )

    @classmethod
    def template(cls) -> "GlobalConfig":
        """The config written by `config init`."""
        return cls(gamescope=GamescopeConfig(enabled=False, args="-f", skip_pre_command=True))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.pre_command is not None:
            data["pre_command"] = self.pre_command
        if self.default_proton is not None:
            data["default_proton"] = self.default_proton
        data["default_mode"] = self.default_mode.value
        data["env"] = dict(self.env)
        hooks = self.hooks.to_dict()
        if hooks:
            data["hooks"] = hooks
        gamescope = self.gamescope.to_dict()
        if gamescope:
            data["gamescope"] = gamescope
        return data


@dataclass
class GameConfig:
    """Per-game overrides; every scalar left as None defers to GlobalConfig."""
    name: Optional[str] = None
    mode: Optional[ExecutionMode] = None
    proton: Optional[str] = None
    # May contain the word "inherit" to splice in the global pre_command
    pre_command: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    launch_args: List[str] = field(default_factory=list)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    gamescope: GamescopeConfig = field(default_factory=GamescopeConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        mode = data.get("mode")
        return cls(
            name=_opt_str(data, "name"),
            mode=None if mode is None else ExecutionMode.parse(mode),
            proton=_opt_str(data, "proton"),
            pre_command=_opt_str(data, "pre_command"),
            env=_str_map(data, "env"),
            launch_args=_str_list(data, "launch_args"),
            hooks=HooksConfig.from_dict(data),
            gamescope=GamescopeConfig.from_dict(data),
        )


@dataclass
class EffectiveLaunchPolicy:
    """Result of merging global config, game config and session context."""
    app_id: Optional[int] = None
    name: Optional[str] = None
    mode: ExecutionMode = ExecutionMode.AUTO
    proton: Optional[str] = None
    pre_command: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    launch_args: List[str] = field(default_factory=list)
    pre_launch_hook: Optional[HookConfig] = None
    post_exit_hook: Optional[HookConfig] = None
    gamescope_enabled: bool = False
    gamescope_args: Optional[str] = None
    is_gamescope_session: bool = False
    skip_pre_command_in_gamescope: bool = True
    gamescope_pre_command: Optional[str] = None

    def effective_pre_command(self) -> Optional[str]:
        """The single pre-command to use for this session.

        Inside a gamescope session with skip_pre_command set, the
        gamescope-specific pre-command (possibly None) replaces the general one.
        """
        if self.is_gamescope_session and self.skip_pre_command_in_gamescope:
            return self.gamescope_pre_command
        return self.pre_command

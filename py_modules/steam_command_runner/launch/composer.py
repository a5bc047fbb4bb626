"""
Launch composition: turn an EffectiveLaunchPolicy plus the game command into
the final argv and environment.

The argv is built outermost wrapper first:

    gamescope <args> -- env <overlay flags> [LD_PRELOAD=...]   (compositor)
    <pre-command words>                                        (e.g. gamemoderun)
    <proton dir>/proton waitforexitandrun                      (Proton mode)
    <game command> <launch_args>

Gamescope is a capability-enabled binary, so environment variables set on its
own process can be dropped; the overlay variables are therefore carried into
the wrapped command through `env` instead.
"""
import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from ..compat.proton_locator import PROTON_LAUNCHER, locate_proton
from ..config.models import EffectiveLaunchPolicy, ExecutionMode
from ..errors import ArgSplitError, NoCommand
from .executor import Executor, default_executor
from .overlay import OVERLAY_ENV_FLAGS, build_ld_preload_with_overlay, get_overlay_env

logger = logging.getLogger(__name__)

GAMESCOPE_BINARY = "gamescope"
PROTON_VERB = "waitforexitandrun"
WINDOWS_EXTENSIONS = (".exe", ".msi", ".bat")
PROTON_PASSTHROUGH_VARS = ("STEAM_COMPAT_DATA_PATH", "STEAM_COMPAT_CLIENT_INSTALL_PATH")


@dataclass
class LaunchPlan:
    argv: List[str]
    # Overrides applied on top of the inherited environment
    env: Dict[str, str] = field(default_factory=dict)
    mode: ExecutionMode = ExecutionMode.NATIVE
    using_gamescope: bool = False


def detect_execution_mode(path: str) -> ExecutionMode:
    """Proton for Windows executables, native for everything else."""
    if path.lower().endswith(WINDOWS_EXTENSIONS):
        logger.debug("Detected Windows executable, using Proton mode")
        return ExecutionMode.PROTON
    logger.debug("Detected native executable, using Native mode")
    return ExecutionMode.NATIVE


def split_words(value: str, what: str) -> List[str]:
    """shlex.split that raises ArgSplitError for unbalanced quoting."""
    try:
        return shlex.split(value)
    except ValueError as e:
        raise ArgSplitError(value, what) from e


class LaunchComposer:
    """
    Builds LaunchPlans and hands them to an executor.

    Args:
        locator: Callable mapping a requested Proton version (or None) to a
            Proton directory; raises ProtonNotFound
        environ: Environment read for passthrough variables and LD_PRELOAD
        overlay_root: Steam root holding ubuntu12_{32,64}/gameoverlayrenderer.so
        gamescope_binary: Compositor executable placed at argv[0] when wrapping
        executor: Backend used by execute()
    """

    def __init__(
        self,
        locator: Callable[[Optional[str]], Path] = locate_proton,
        environ: Optional[Mapping[str, str]] = None,
        overlay_root: Optional[Path] = None,
        gamescope_binary: str = GAMESCOPE_BINARY,
        executor: Optional[Executor] = None,
    ):
        self.locator = locator
        self.environ = os.environ if environ is None else environ
        self.overlay_root = overlay_root
        self.gamescope_binary = gamescope_binary
        self.executor = executor if executor is not None else default_executor()

    def compose(self, policy: EffectiveLaunchPolicy, command: List[str]) -> LaunchPlan:
        """
        Build the argv and environment overrides for one launch.

        Raises:
            NoCommand: command is empty
            ArgSplitError: gamescope args or pre-command have unbalanced quotes
            ProtonNotFound: Proton mode and no matching installation
        """
        if not command:
            raise NoCommand()

        mode = policy.mode
        if mode == ExecutionMode.AUTO:
            mode = detect_execution_mode(command[0])
        logger.info(f"Execution mode: {mode.value}")

        argv: List[str] = []
        using_gamescope = False

        if policy.gamescope_enabled:
            if policy.is_gamescope_session:
                logger.debug("Already in gamescope session, skipping gamescope wrapper")
            else:
                argv.extend(self._gamescope_prefix(policy.gamescope_args))
                using_gamescope = True

        pre_command = policy.effective_pre_command()
        if pre_command:
            pre_args = split_words(pre_command, "pre-command")
            logger.debug(f"Prepending pre-command: {pre_args}")
            argv.extend(pre_args)

        if mode == ExecutionMode.PROTON:
            proton_path = self.locator(policy.proton)
            logger.info(f"Using Proton at: {proton_path}")
            argv.extend([str(proton_path / PROTON_LAUNCHER), PROTON_VERB])

        argv.extend(command)
        if policy.launch_args:
            logger.debug(f"Adding launch args: {policy.launch_args}")
            argv.extend(policy.launch_args)

        env = self._compose_env(policy, mode, using_gamescope)
        logger.info(f"Composed command: {argv}")
        return LaunchPlan(argv=argv, env=env, mode=mode, using_gamescope=using_gamescope)

    def _gamescope_prefix(self, gamescope_args: Optional[str]) -> List[str]:
        gs_args = split_words(gamescope_args, "gamescope arguments") if gamescope_args else []
        logger.debug(f"Wrapping with gamescope: {gs_args}")

        prefix = [self.gamescope_binary] + gs_args + ["--", "env"]
        prefix.extend(f"{key}={value}" for key, value in OVERLAY_ENV_FLAGS.items())
        ld_preload = build_ld_preload_with_overlay(self.environ, self.overlay_root)
        if ld_preload is not None:
            logger.debug(f"Also adding LD_PRELOAD: {ld_preload}")
            prefix.append(f"LD_PRELOAD={ld_preload}")
        return prefix

    def _compose_env(
        self, policy: EffectiveLaunchPolicy, mode: ExecutionMode, using_gamescope: bool
    ) -> Dict[str, str]:
        env: Dict[str, str] = {}

        if mode == ExecutionMode.PROTON:
            for var in PROTON_PASSTHROUGH_VARS:
                value = self.environ.get(var)
                if value is not None:
                    logger.debug(f"{var}={value}")
                    env[var] = value

        for key, value in policy.env.items():
            logger.debug(f"Setting env: {key}={value}")
            env[key] = value

        # Inside a gamescope session nothing else re-enables the overlay
        if not using_gamescope and policy.is_gamescope_session:
            overlay_env = get_overlay_env(self.environ, self.overlay_root)
            logger.debug(f"In gamescope session, setting overlay env: {overlay_env}")
            env.update(overlay_env)

        return env

    def execute(self, plan: LaunchPlan) -> int:
        """Run the plan; with the exec backend this only returns by raising.

        Raises:
            ExecutionFailed: the command could not be executed
        """
        return self.executor.execute(plan.argv, plan.env)

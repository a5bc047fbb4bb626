"""
Process execution backends.

Games are normally started by replacing our process image (exec), so the
game keeps the PID Steam started and Steam Input stays attached to it. The
spawn backend exists for platforms without exec and for tests.
"""
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..errors import ExecutionFailed

logger = logging.getLogger(__name__)


def build_process_env(overrides: Dict[str, str], base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """The inherited environment with overrides applied on top."""
    env = dict(os.environ if base is None else base)
    env.update(overrides)
    return env


class Executor(ABC):
    @abstractmethod
    def execute(self, argv: List[str], env: Dict[str, str]) -> int:
        """Run argv with env overrides.

        Returns the exit status for backends that wait; exec backends never return.

        Raises:
            ExecutionFailed: the command could not be started
        """


class ExecExecutor(Executor):
    """Replace the current process with the command."""

    def execute(self, argv: List[str], env: Dict[str, str]) -> int:
        if not argv:
            raise ExecutionFailed("empty argument vector")
        logger.info("=== About to exec (this process will be replaced) ===")
        logger.info(f"Command: {argv[0]} {argv[1:]}")
        # Pending log records would be lost with the old process image
        for handler in logging.getLogger().handlers:
            try:
                handler.flush()
            except (OSError, ValueError):
                # Closed log sink; exec anyway
                pass
        try:
            os.execvpe(argv[0], argv, build_process_env(env))
        except OSError as e:
            raise ExecutionFailed(f"exec failed: {e}") from e
        return 0  # unreachable


class SpawnExecutor(Executor):
    """Run the command as a child process and wait for it."""

    def execute(self, argv: List[str], env: Dict[str, str]) -> int:
        if not argv:
            raise ExecutionFailed("empty argument vector")
        logger.info(f"Spawning: {argv[0]} {argv[1:]}")
        try:
            completed = subprocess.run(argv, env=build_process_env(env))
        except OSError as e:
            raise ExecutionFailed(f"spawn failed: {e}") from e
        logger.info(f"Process exited with status {completed.returncode}")
        return completed.returncode


def default_executor() -> Executor:
    if hasattr(os, "execvpe"):
        return ExecExecutor()
    return SpawnExecutor()

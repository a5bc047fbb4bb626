"""Pre-launch / post-exit hook execution."""
import logging
import shlex
import subprocess
from typing import Optional

from ..config.models import HookConfig
from ..errors import HookFailed

logger = logging.getLogger(__name__)


def execute_hook(hook: HookConfig) -> None:
    """
    Run a hook command.

    With wait set, blocks until the command exits and fails on a non-zero
    status; otherwise the command is started in the background.

    Raises:
        HookFailed: the command could not be parsed, started, or exited non-zero
    """
    logger.info(f"Executing hook: {hook.command}")
    try:
        args = shlex.split(hook.command)
    except ValueError as e:
        raise HookFailed(f"Failed to parse hook command: {hook.command}") from e
    if not args:
        raise HookFailed("Empty hook command")

    try:
        if hook.wait:
            logger.debug("Waiting for hook to complete")
            completed = subprocess.run(args, cwd=hook.working_dir)
            if completed.returncode != 0:
                logger.warning(f"Hook exited with non-zero status: {completed.returncode}")
                raise HookFailed(f"Hook '{hook.command}' exited with status {completed.returncode}")
        else:
            logger.debug("Running hook in background (no wait)")
            subprocess.Popen(args, cwd=hook.working_dir)
    except OSError as e:
        raise HookFailed(f"Hook '{hook.command}' could not be started: {e}") from e


def run_hook_safely(hook: Optional[HookConfig], label: str) -> bool:
    """Run a hook if configured; failures are logged and never propagate.

    Returns True when the hook ran successfully (or there was none).
    """
    if hook is None:
        return True
    try:
        execute_hook(hook)
    except HookFailed as e:
        logger.warning(f"{label} hook failed: {e}")
        return False
    return True

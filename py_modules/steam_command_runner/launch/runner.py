"""
One game launch: pre-launch hook, compose, execute, post-exit hook.
"""
import logging
from typing import List, Optional

from ..config.models import EffectiveLaunchPolicy
from .composer import LaunchComposer
from .hooks import run_hook_safely

logger = logging.getLogger(__name__)


def run_game(
    policy: EffectiveLaunchPolicy,
    command: List[str],
    composer: Optional[LaunchComposer] = None,
) -> int:
    """
    Launch a game under the given policy.

    With the exec backend this never returns on success, so the post-exit
    hook only runs when the executor waits for the game (spawn backend).

    Returns:
        The game's exit status

    Raises:
        NoCommand, ArgSplitError, ProtonNotFound, ExecutionFailed
    """
    composer = composer if composer is not None else LaunchComposer()

    if policy.pre_launch_hook is not None:
        logger.info("Executing pre-launch hook")
        run_hook_safely(policy.pre_launch_hook, "Pre-launch")

    plan = composer.compose(policy, command)
    exit_code = composer.execute(plan)

    if policy.post_exit_hook is not None:
        logger.info("Executing post-exit hook")
        run_hook_safely(policy.post_exit_hook, "Post-exit")

    return exit_code

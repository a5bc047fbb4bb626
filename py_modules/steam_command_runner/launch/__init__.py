# Launch package
from .composer import LaunchComposer, LaunchPlan, detect_execution_mode, split_words
from .executor import Executor, ExecExecutor, SpawnExecutor, default_executor
from .hooks import execute_hook, run_hook_safely
from .overlay import build_ld_preload_with_overlay, get_steam_overlay_paths, get_overlay_env
from .runner import run_game

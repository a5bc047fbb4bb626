# Config package
from .models import (
    ExecutionMode,
    HookConfig,
    HooksConfig,
    GamescopeConfig,
    GlobalConfig,
    GameConfig,
    EffectiveLaunchPolicy,
)
from .loader import (
    load_global_config,
    load_game_config,
    write_global_config,
    write_game_config_template,
)
from .resolver import (
    is_gamescope_session,
    merge_pre_command,
    merge_configs,
    resolve,
)

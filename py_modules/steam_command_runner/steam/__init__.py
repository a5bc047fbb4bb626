# Steam package
from .localconfig import (
    LocalConfig,
    read_localconfig,
    write_localconfig,
    create_backup,
    get_launch_options,
    set_launch_options,
    escape_vdf_string,
    generate_default_launch_options,
    is_our_launch_options,
)
from .installed_games import InstalledGame, find_installed_games
from .userdata import find_user_ids, get_user_names, get_localconfig_path
from .library import get_library_folders, read_library_roots
from .store_search import StoreSearchResult, search_store

# Compat package
from .proton_locator import (
    ProtonInstall,
    is_valid_proton,
    get_search_paths,
    locate_proton,
    list_proton_versions,
    compare_version_names,
    natural_sort_key,
)
from .verbs import Verb
from .context import CompatToolContext, parse_app_id
from .tool_install import (
    install_compat_tool,
    uninstall_compat_tool,
    generate_compatibilitytool_vdf,
    generate_toolmanifest_vdf,
    proton_name_to_appid,
)

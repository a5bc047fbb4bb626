"""
localconfig.vdf launch options reader/patcher.

Steam keeps per-user launch options in
userdata/<id>/config/localconfig.vdf:

    "UserLocalConfigStore"
    {
        "Software" { "Valve" { "Steam" {
            "apps"
            {
                "1850570"
                {
                    "LastPlayed"        "1700000000"
                    "LaunchOptions"     "gamemoderun %command%"
                }
                ...

The file holds far more than we model (cloud state, friends, controller
settings), so it is never re-serialized. We track brace depth line by line,
find the one app block we care about and rewrite only that block. Every byte
outside it, line endings included, is kept exactly as read.
"""
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

APPS_SECTION = "apps"
LAUNCH_OPTIONS_KEY = "LaunchOptions"
NEW_APP_INDENT = "\t" * 5
DEFAULT_LAUNCH_OPTIONS = "gamescope -- %command%"

# Walker events
APPS_OPEN = "apps_open"
APP_KEY = "app_key"
APP_FIELD = "app_field"
APP_CLOSE = "app_close"


@dataclass
class _LineEvent:
    kind: Optional[str] = None
    app_id: Optional[int] = None
    key: Optional[str] = None
    value: Optional[str] = None


def parse_quoted_key(line: str) -> Optional[str]:
    """Parse a standalone key such as '"1850570"' or '"apps" {'.

    Key/value lines ('"key" "value"') are not standalone keys and give None.
    """
    line = line.strip()
    if not line.startswith('"'):
        return None
    end = line.find('"', 1)
    if end < 0:
        return None
    after = line[end + 1:].strip()
    if after in ("", "{"):
        return line[1:end]
    return None


def parse_key_value(line: str) -> Optional[Tuple[str, str]]:
    """Parse '"key"\t\t"value"' into (key, value), unescaping \\" and \\\\ in the value."""
    line = line.strip()
    if not line.startswith('"'):
        return None
    key_end = line.find('"', 1)
    if key_end < 0:
        return None
    key = line[1:key_end]

    rest = line[key_end + 1:].lstrip()
    if not rest.startswith('"'):
        return None

    value = []
    i = 1
    while i < len(rest):
        c = rest[i]
        if c == "\\" and i + 1 < len(rest) and rest[i + 1] in ('"', "\\"):
            value.append(rest[i + 1])
            i += 2
            continue
        if c == '"':
            break
        value.append(c)
        i += 1
    return key, "".join(value)


def escape_vdf_string(value: str) -> str:
    """Escape a string for a quoted VDF value."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _ending_of(line: str) -> str:
    stripped = line.rstrip("\r\n")
    return line[len(stripped):]


def _detect_newline(content: str) -> str:
    for line in content.splitlines(keepends=True):
        ending = _ending_of(line)
        if ending:
            return ending
    return "\n"


def _walk(lines: List[str]) -> Iterator[_LineEvent]:
    """Yield exactly one _LineEvent per input line.

    Depth only changes on lines that are a bare "{" or "}" (or a key followed
    by "{"), which is how Steam writes text VDF.
    """
    depth = 0
    apps_depth: Optional[int] = None
    pending_apps = False
    pending_app: Optional[int] = None
    current_app: Optional[int] = None
    app_depth = 0

    for line in lines:
        stripped = line.strip()
        event = _LineEvent()

        if stripped == "}":
            if current_app is not None and depth == app_depth:
                event = _LineEvent(APP_CLOSE, current_app)
                current_app = None
            depth -= 1
            if apps_depth is not None and depth < apps_depth:
                apps_depth = None
            pending_apps, pending_app = False, None
            yield event
            continue

        key = None if stripped == "{" else parse_quoted_key(stripped)
        opens = stripped == "{" or (key is not None and stripped.endswith("{"))

        if key is not None:
            pending_apps, pending_app = False, None
            if apps_depth is None:
                if key.lower() == APPS_SECTION:
                    pending_apps = True
            elif current_app is None and depth == apps_depth and key.isdecimal():
                pending_app = int(key)
                event = _LineEvent(APP_KEY, pending_app)
        elif stripped != "{":
            pending_apps, pending_app = False, None
            if current_app is not None and depth == app_depth:
                pair = parse_key_value(stripped)
                if pair and pair[0].lower() == LAUNCH_OPTIONS_KEY.lower():
                    event = _LineEvent(APP_FIELD, current_app, pair[0], pair[1])

        if opens:
            depth += 1
            if pending_apps:
                apps_depth = depth
                if event.kind is None:
                    event = _LineEvent(APPS_OPEN)
            elif pending_app is not None:
                current_app = pending_app
                app_depth = depth
            pending_apps, pending_app = False, None

        yield event


def _build_index(content: str) -> Dict[int, str]:
    launch_options: Dict[int, str] = {}
    lines = content.splitlines(keepends=True)
    for event in _walk(lines):
        if event.kind == APP_FIELD:
            logger.debug(f"Found launch options for app {event.app_id}: {event.value}")
            launch_options[event.app_id] = event.value
    return launch_options


class LocalConfig:
    """The raw localconfig.vdf text plus an app_id -> LaunchOptions index.

    The raw text is the source of truth; the index is rebuilt from it after
    every change so the two never disagree.
    """

    def __init__(self, content: str):
        self._content = content
        self._launch_options = _build_index(content)

    @classmethod
    def parse(cls, content: str) -> "LocalConfig":
        return cls(content)

    @property
    def content(self) -> str:
        return self._content

    @property
    def launch_options(self) -> Dict[int, str]:
        return dict(self._launch_options)

    def get_launch_options(self, app_id: int) -> Optional[str]:
        return self._launch_options.get(app_id)

    def set_launch_options(self, app_id: int, options: Optional[str]) -> bool:
        """Set, replace or (with None / "") remove an app's LaunchOptions.

        Returns True if the document text changed.
        """
        new_content = self._patch(app_id, options or None)
        if new_content == self._content:
            return False
        new_index = _build_index(new_content)
        self._content, self._launch_options = new_content, new_index
        return True

    def _patch(self, app_id: int, options: Optional[str]) -> str:
        lines = self._content.splitlines(keepends=True)
        newline = _detect_newline(self._content)
        out: List[str] = []
        apps_insert_pos: Optional[int] = None
        found_app = False
        written = False

        for line, event in zip(lines, _walk(lines)):
            if event.kind == APPS_OPEN and apps_insert_pos is None:
                out.append(line)
                apps_insert_pos = len(out)
                continue

            if event.app_id == app_id:
                if event.kind == APP_KEY:
                    found_app = True
                    written = False
                elif event.kind == APP_FIELD:
                    # Replace the first LaunchOptions line, drop any duplicates
                    if options is not None and not written:
                        out.append(
                            f'{_indent_of(line)}"{event.key}"\t\t"{escape_vdf_string(options)}"'
                            f"{_ending_of(line)}"
                        )
                    written = True
                    continue
                elif event.kind == APP_CLOSE:
                    if options is not None and not written:
                        out.append(
                            f'{_indent_of(line)}\t"{LAUNCH_OPTIONS_KEY}"\t\t"{escape_vdf_string(options)}"'
                            f"{newline}"
                        )
                    written = True

            out.append(line)

        if not found_app and options is not None:
            if apps_insert_pos is None:
                logger.warning(f"No \"{APPS_SECTION}\" section found, cannot add launch options for {app_id}")
                return self._content
            block = [
                f'{NEW_APP_INDENT}"{app_id}"{newline}',
                f"{NEW_APP_INDENT}{{{newline}",
                f'{NEW_APP_INDENT}\t"{LAUNCH_OPTIONS_KEY}"\t\t"{escape_vdf_string(options)}"{newline}',
                f"{NEW_APP_INDENT}}}{newline}",
            ]
            out[apps_insert_pos:apps_insert_pos] = block

        return "".join(out)


def read_localconfig(path: Union[str, Path]) -> LocalConfig:
    """Read and index localconfig.vdf.

    newline="" and surrogateescape keep the text byte-for-byte identical to
    the file so write_localconfig can reproduce untouched parts exactly.
    """
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        content = f.read()
    logger.debug(f"Read localconfig.vdf ({len(content)} bytes)")
    return LocalConfig.parse(content)


def write_localconfig(path: Union[str, Path], config: LocalConfig) -> None:
    """Write the document back verbatim, atomically (temp file + rename)."""
    target = Path(path)
    tmp_path = target.with_name(target.name + ".tmp")
    logger.debug(f"Writing localconfig.vdf ({len(config.content)} bytes)")
    try:
        with open(tmp_path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(config.content)
            f.flush()
            os.fsync(f.fileno())
        if target.exists():
            shutil.copymode(target, tmp_path)
        os.replace(tmp_path, target)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def create_backup(path: Union[str, Path]) -> Path:
    """Copy localconfig.vdf to localconfig.vdf.backup next to it."""
    source = Path(path)
    backup_path = source.with_name(source.name + ".backup")
    logger.debug(f"Creating backup: {backup_path}")
    shutil.copy2(source, backup_path)
    logger.info(f"Created backup: {backup_path}")
    return backup_path


def get_launch_options(config: LocalConfig, app_id: int) -> Optional[str]:
    return config.get_launch_options(app_id)


def set_launch_options(config: LocalConfig, app_id: int, options: Optional[str]) -> LocalConfig:
    config.set_launch_options(app_id, options)
    return config


def generate_default_launch_options() -> str:
    """Launch options we write by default.

    The gamescope shim reads our config for the gamescope arguments and, when
    installed as the compatibility tool, %command% already goes through us.
    """
    return DEFAULT_LAUNCH_OPTIONS


def is_our_launch_options(options: str) -> bool:
    """Check if launch options look like they were set by steam-command-runner."""
    trimmed = options.strip()
    if trimmed == DEFAULT_LAUNCH_OPTIONS:
        return True
    # Older format: gamescope $(steam-command-runner gamescope args) -- ...
    return trimmed.startswith("gamescope") and "steam-command-runner" in trimmed

"""Logging configuration for the command line entry points."""
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .paths import get_debug_log_path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(message)s"

# Handlers added by setup_logging, replaced on the next call
_handlers: List[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure the root logger.

    Console output goes to stderr so it never mixes with values printed for
    shell substitution (e.g. `gamescope args`). When log_file is given, every
    record at DEBUG and above is also appended there.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    while _handlers:
        handler = _handlers.pop()
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)
    _handlers.append(console)

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not open log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(file_handler)
            _handlers.append(file_handler)


def setup_compat_logging(verbose: bool = False) -> None:
    """Logging for launches started by Steam, which swallows our stderr."""
    setup_logging(verbose, log_file=get_debug_log_path())

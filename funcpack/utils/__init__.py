"""funcpack utilities package."""

from .constants import (
    ARCHIVE_FORMAT_NONE,
    ARCHIVE_FORMAT_ZIP,
    ARCHIVE_FORMATS,
    DEFAULT_PARALLEL_LIMIT,
    ERROR_LOG_FILE,
    FIXED_ZIP_DATE_TIME,
    PLUGINS_MODULES_DIR,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .helpers import compute_file_hash, find_up, load_json_file, to_posix_path
from .logging import logger

__all__ = [
    "ARCHIVE_FORMAT_NONE",
    "ARCHIVE_FORMAT_ZIP",
    "ARCHIVE_FORMATS",
    "DEFAULT_PARALLEL_LIMIT",
    "ERROR_LOG_FILE",
    "FIXED_ZIP_DATE_TIME",
    "PLUGINS_MODULES_DIR",
    "STATE_DIR",
    "handle_exceptions",
    "ExitCodes",
    "compute_file_hash",
    "find_up",
    "load_json_file",
    "to_posix_path",
    "logger",
]

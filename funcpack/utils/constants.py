"""Centralized constants for funcpack utils package.

This module provides a single source of truth for paths, directories,
and configuration values used across utility modules.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Working directory for funcpack state (config, logs)
STATE_DIR = Path("./.funcpack")

# Log files
ERROR_LOG_FILE = STATE_DIR / "error.log"

# Auto-installed plugin modules, searched upward from a function's source dir
PLUGINS_MODULES_DIR = Path(".funcpack") / "plugins" / "node_modules"

# ============================================================================
# ARCHIVE FORMAT
# ============================================================================

ARCHIVE_FORMAT_ZIP = "zip"
ARCHIVE_FORMAT_NONE = "none"
ARCHIVE_FORMATS = (ARCHIVE_FORMAT_ZIP, ARCHIVE_FORMAT_NONE)

# Earliest timestamp a ZIP (DOS) header can hold
FIXED_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# Sub-directory for user files when they collide with the entry stub
DEFAULT_USER_NAMESPACE = "src"

# ============================================================================
# LIMITS
# ============================================================================

DEFAULT_PARALLEL_LIMIT = 5

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_FLAG_PREFIX = "FUNCPACK_FLAG_"

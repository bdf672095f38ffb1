"""Helper utility functions for funcpack.

IMPORTANT UTILITIES:
- to_posix_path(): Use this for ANY path written into an archive entry name.
  Archive entries always use forward slashes, whatever the host separator is.
"""

import hashlib
import json
import os
from pathlib import Path
from typing import Any

from .logging import logger


def to_posix_path(file_path: str) -> str:
    """Convert a host path to forward-slash form.

    Examples:
        >>> to_posix_path("node_modules\\\\left-pad\\\\index.js")
        'node_modules/left-pad/index.js'
        >>> to_posix_path("src/auth.js")
        'src/auth.js'
    """
    return file_path.replace(os.sep, "/").replace("\\", "/")


def compute_file_hash(file_path: Path | str) -> str:
    """
    Compute SHA256 hash of a file.

    Args:
        file_path: Path to the file

    Returns:
        Hex digest of SHA256 hash
    """
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def load_json_file(file_path: str | Path) -> Any:
    """
    Load and parse a JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON document

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"JSON file not found: {file_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise


def find_up(name: str | Path, start: str, want_dir: bool = False) -> str | None:
    """Search `start` and its ancestors for `name`.

    Returns the first existing match as an absolute path (symlinks untouched),
    or None once the filesystem root has been checked.
    """
    current = os.path.abspath(start)

    while True:
        candidate = os.path.join(current, name)
        if os.path.isdir(candidate) if want_dir else os.path.isfile(candidate):
            return candidate

        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent

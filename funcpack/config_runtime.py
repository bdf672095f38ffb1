"""Runtime configuration for funcpack - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from funcpack.utils.constants import DEFAULT_PARALLEL_LIMIT
from funcpack.utils.logging import logger

DEFAULTS = {
    "paths": {
        "state_dir": "./.funcpack",
        "plugins_modules_dir": ".funcpack/plugins/node_modules",
    },
    "limits": {
        "parallel_limit": DEFAULT_PARALLEL_LIMIT,
    },
    "archive": {
        "format": "zip",
        "compress_level": 9,
    },
    "resolve": {
        "extensions": [".js", ".json", ".node", ".mjs", ".cjs"],
    },
    "tree_shake": {
        "trigger_basenames": ["renderNextPage"],
        "allowed_prefixes": ["next/dist/"],
    },
}

SECTIONS = tuple(DEFAULTS)


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .funcpack/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (FUNCPACK_<SECTION>_<KEY>)
    2. .funcpack/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / ".funcpack" / "config.json"
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in SECTIONS:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"FUNCPACK_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    default_value = cfg[section][key]
                    if isinstance(default_value, int):
                        cfg[section][key] = int(value)
                    elif isinstance(default_value, float):
                        cfg[section][key] = float(value)
                    elif isinstance(default_value, list):
                        cfg[section][key] = [v.strip() for v in value.split(",") if v.strip()]
                    else:
                        cfg[section][key] = value
                except ValueError as e:
                    logger.warning(f"Invalid value for environment variable {env_var}: '{value}' - {e}")
                    logger.info(f"Using default value: {cfg[section][key]}")

    return cfg

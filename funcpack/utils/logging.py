"""Centralized logging configuration using Loguru with NDJSON output.

Usage:
    from funcpack.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if FUNCPACK_LOG_LEVEL=DEBUG

Environment Variables:
    FUNCPACK_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    FUNCPACK_LOG_JSON: 0|1 (default: 0, human-readable)
    FUNCPACK_LOG_FILE: path to log file (optional)
    FUNCPACK_REQUEST_ID: correlation ID shared by every record of one run
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

# Remove default handler
logger.remove()

# Numeric levels used in the NDJSON records
NUMERIC_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 35,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("FUNCPACK_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("FUNCPACK_LOG_JSON", "0") == "1"
_log_file = os.environ.get("FUNCPACK_LOG_FILE")
_request_id = os.environ.get("FUNCPACK_REQUEST_ID") or str(uuid.uuid4())


def _to_ndjson(record) -> str:
    """Render a loguru record as a single NDJSON line."""
    entry = {
        "level": NUMERIC_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            entry[key] = value

    if record["exception"]:
        entry["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return json.dumps(entry, default=str)


def ndjson_sink(message):
    """Write NDJSON records to stdout.

    Never call logger.* inside a sink, it recurses.
    """
    sys.stdout.write(_to_ndjson(message.record) + "\n")
    sys.stdout.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

if _json_mode:
    logger.add(
        ndjson_sink,
        level=_log_level,
        colorize=False,
    )
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )

if _log_file:

    def _file_ndjson_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_to_ndjson(message.record) + "\n")

    logger.add(
        _file_ndjson_sink,
        level="DEBUG",
    )


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add rotating file handler for persistent logs.

    Args:
        log_dir: Directory for log files (e.g., Path(".funcpack"))
        level: Minimum log level for file output

    Returns:
        The loguru handler id, so callers can remove it again.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "funcpack.log"

    return logger.add(
        log_file,
        rotation="10 MB",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


def get_request_id() -> str:
    """Get the current request ID for correlation."""
    return _request_id


__all__ = [
    "logger",
    "configure_file_logging",
    "get_request_id",
]

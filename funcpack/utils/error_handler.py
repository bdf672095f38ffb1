"""Failure reporting for the funcpack commands.

Errors raised by funcpack itself (a missing module, an unparsable
package.json) are shown as their message alone. Anything else is treated as a
bug: the traceback is appended to `.funcpack/error.log` next to the function
directories being packaged, and the user is pointed there.
"""

import sys
import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from funcpack import __version__
from funcpack.errors import FuncpackError
from funcpack.utils.logging import logger

from .constants import ERROR_LOG_FILE, STATE_DIR


def _command_path(func: Callable[..., Any]) -> str:
    ctx = click.get_current_context(silent=True)
    return ctx.command_path if ctx is not None else func.__name__


def _append_error_log(command: str, error: Exception) -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)

    with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write(f"--- {datetime.now().isoformat()} funcpack {__version__}: {command}\n")
        f.write(f"argv: {' '.join(sys.argv[1:])}\n")
        f.write("".join(traceback.format_exception(error)))
        f.write("\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a funcpack command so failures exit with status 1 and a short message."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit):
            raise
        except FuncpackError as e:
            logger.opt(exception=True).debug("{cmd} failed: {err}", cmd=_command_path(func), err=e)
            raise click.ClickException(str(e)) from e
        except Exception as e:
            command = _command_path(func)
            logger.opt(exception=True).error("Unexpected failure in {cmd}: {err}", cmd=command, err=e)
            _append_error_log(command, e)

            raise click.ClickException(
                f"{type(e).__name__}: {e}\n\nThis is a funcpack bug. See {ERROR_LOG_FILE} for the traceback."
            ) from e

    return wrapper

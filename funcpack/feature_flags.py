"""Feature flags consulted while listing and zipping functions."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from funcpack.utils.constants import ENV_FLAG_PREFIX

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class FeatureFlags:
    """Boolean switches with their defaults."""

    # Always write the entry stub, even when the main file sits at its path
    unique_entry_file: bool = False
    # Keep symlinks matched by included-file globs as links
    preserve_included_symlinks: bool = True
    # Report non-literal require()/import() expressions
    parse_dynamic_imports: bool = True

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


def parse_flag_value(raw: str) -> bool:
    """Parse a textual boolean such as the value of FUNCPACK_FLAG_* variables."""
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"Invalid boolean flag value: {raw!r}")


def get_flags(overrides: Mapping[str, bool] | None = None, environ: Mapping[str, str] | None = None) -> FeatureFlags:
    """Build the flags for a run.

    Environment variables override the defaults, explicit overrides win over both.
    Unknown names are ignored.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, bool] = {}

    for name in FeatureFlags.names():
        env_var = f"{ENV_FLAG_PREFIX}{name.upper()}"
        if env_var in environ:
            values[name] = parse_flag_value(environ[env_var])

    for name, value in (overrides or {}).items():
        if name in FeatureFlags.names():
            values[name] = bool(value)

    return replace(FeatureFlags(), **values)

"""Per-function configuration and included-file globs."""

import fnmatch
import glob
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from funcpack.utils.logging import logger

MODULE_FORMAT_CJS = "cjs"
MODULE_FORMAT_ESM = "esm"


@dataclass
class FunctionConfig:
    """Options a user can set for a function, usually through a glob in the config file."""

    external_node_modules: list[str] = field(default_factory=list)
    ignored_node_modules: list[str] = field(default_factory=list)
    included_files: list[str] = field(default_factory=list)
    included_files_base_path: str | None = None
    node_module_format: str | None = None
    name: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FunctionConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown function config keys: {sorted(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})


def _merge_values(current: Any, incoming: Any) -> Any:
    if isinstance(current, list) and isinstance(incoming, list):
        merged = list(current)
        merged.extend(item for item in incoming if item not in merged)
        return merged
    return incoming


def get_config_for_function(config: Mapping[str, Mapping[str, Any]] | None, function_name: str) -> FunctionConfig:
    """Merge every config block whose glob matches `function_name`.

    Blocks are applied in declaration order: lists are concatenated without
    duplicates, scalar values are overwritten by later blocks.
    """
    merged: dict[str, Any] = {}

    for pattern, block in (config or {}).items():
        if not fnmatch.fnmatchcase(function_name, pattern):
            continue
        for key, value in block.items():
            merged[key] = _merge_values(merged[key], value) if key in merged else value

    return FunctionConfig.from_dict(merged)


@dataclass
class IncludedFiles:
    """Expanded `included_files` globs."""

    paths: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)


def get_paths_of_included_files(
    included_files: Iterable[str],
    base_path: str | None,
    preserve_symlinks: bool = True,
) -> IncludedFiles:
    """Expand include globs relative to `base_path`.

    Patterns starting with `!` are not expanded; they become absolute
    exclusion patterns applied to the final file list.
    """
    if base_path is None:
        return IncludedFiles()

    include: list[str] = []
    exclude_patterns: list[str] = []

    for pattern in included_files:
        if pattern.startswith("!"):
            exclude_patterns.append(os.path.normpath(os.path.join(base_path, pattern[1:])))
        else:
            include.append(pattern)

    paths: set[str] = set()
    for pattern in include:
        for match in glob.glob(pattern, root_dir=base_path, recursive=True, include_hidden=True):
            path = os.path.normpath(os.path.join(base_path, match))
            if os.path.islink(path) and preserve_symlinks:
                paths.add(path)
            elif os.path.isfile(path):
                paths.add(os.path.realpath(path) if os.path.islink(path) else path)

    included = filter_excluded_paths(sorted(paths), exclude_patterns)

    return IncludedFiles(paths=included, exclude_patterns=exclude_patterns)


def filter_excluded_paths(paths: Iterable[str], exclude_patterns: Iterable[str]) -> list[str]:
    """Return the subset of `paths` not matching any exclusion pattern."""
    patterns = list(exclude_patterns)
    if not patterns:
        return list(paths)

    return [path for path in paths if not any(fnmatch.fnmatchcase(path, pattern) for pattern in patterns)]

"""Assembling the sorted file set of one function."""

import fnmatch
import os
from dataclasses import dataclass, field
from typing import Any

from funcpack.config_runtime import DEFAULTS
from funcpack.feature_flags import FeatureFlags
from funcpack.function import FunctionSource
from funcpack.function_config import FunctionConfig, filter_excluded_paths, get_paths_of_included_files
from funcpack.node_dependencies.manifest import ManifestCache
from funcpack.node_dependencies.resolver import ModuleResolver
from funcpack.node_dependencies.special_cases import get_external_and_ignored_modules_from_special_cases
from funcpack.node_dependencies.tree_shaking import TreeShakePolicy
from funcpack.node_dependencies.walker import DependencyWalker
from funcpack.utils.constants import PLUGINS_MODULES_DIR
from funcpack.utils.helpers import find_up

# Editor and OS droppings, matched against base names
JUNK_PATTERNS = (
    ".DS_Store",
    "._*",
    "Thumbs.db",
    "desktop.ini",
    "*.swp",
    ".*.swp",
    "*~",
    ".#*",
    "npm-debug.log",
    ".Spotlight-V100",
    ".Trashes",
    "__MACOSX",
)


def is_junk(path: str) -> bool:
    name = os.path.basename(path)
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in JUNK_PATTERNS)


def get_plugins_modules_path(src_dir: str, plugins_modules_dir: str | None = None) -> str | None:
    """Auto-installed plugin modules directory at or above `src_dir`."""
    return find_up(plugins_modules_dir or str(PLUGINS_MODULES_DIR), src_dir, want_dir=True)


def get_tree_files(function: FunctionSource) -> list[str]:
    """Every file below a directory function, without `node_modules`. Symlinks are not followed."""
    if not function.is_directory:
        return [function.src_path]

    files = []
    for root, dirs, filenames in os.walk(function.src_path, followlinks=False):
        kept_dirs = []
        for name in dirs:
            if name == "node_modules":
                continue
            path = os.path.join(root, name)
            if os.path.islink(path):
                files.append(path)
            else:
                kept_dirs.append(name)
        dirs[:] = kept_dirs
        files.extend(os.path.join(root, name) for name in filenames)

    return files


@dataclass
class SrcFiles:
    """The Resolved File Set of a function plus what the walk learned on the way."""

    paths: list[str] = field(default_factory=list)
    native_modules: list[str] = field(default_factory=list)
    external_modules: list[str] = field(default_factory=list)
    unresolved_imports: list[str] = field(default_factory=list)
    plugins_modules_path: str | None = None


async def get_src_files(
    function: FunctionSource,
    config: FunctionConfig | None = None,
    feature_flags: FeatureFlags | None = None,
    runtime_config: dict[str, Any] | None = None,
    base_path: str | None = None,
) -> SrcFiles:
    """Resolve every file `function` needs at runtime.

    Tree files, walked dependencies and included files are normalized,
    deduplicated, stripped of junk and sorted. Exclusion patterns from
    `included_files` apply to the whole set.
    """
    config = config or FunctionConfig()
    feature_flags = feature_flags or FeatureFlags()
    runtime_config = runtime_config or DEFAULTS

    included = get_paths_of_included_files(
        config.included_files,
        config.included_files_base_path or base_path or function.src_dir,
        preserve_symlinks=feature_flags.preserve_included_symlinks,
    )

    special = get_external_and_ignored_modules_from_special_cases(function.src_dir)
    external_modules = list(dict.fromkeys([*special.external_modules, *config.external_node_modules]))
    ignored_modules = list(dict.fromkeys([*special.ignored_modules, *config.ignored_node_modules]))

    plugins_modules_path = get_plugins_modules_path(
        function.src_dir, runtime_config.get("paths", {}).get("plugins_modules_dir")
    )

    manifests = ManifestCache()
    resolver = ModuleResolver(
        extensions=runtime_config.get("resolve", {}).get("extensions", DEFAULTS["resolve"]["extensions"]),
        manifests=manifests,
    )
    walker = DependencyWalker(
        project_manifest=manifests.get(function.src_dir),
        plugins_modules_path=plugins_modules_path,
        resolver=resolver,
        policy=TreeShakePolicy.from_config(runtime_config),
        external_modules=external_modules,
        ignored_modules=ignored_modules,
        feature_flags=feature_flags,
    )

    result = await walker.walk_entry(function.main_file)

    files = {os.path.normpath(path) for path in [*get_tree_files(function), *result.paths]}
    files.update(included.paths)
    paths = filter_excluded_paths(sorted(path for path in files if not is_junk(path)), included.exclude_patterns)

    return SrcFiles(
        paths=paths,
        native_modules=sorted(walker.report.native_modules),
        external_modules=sorted(walker.report.external_modules),
        unresolved_imports=sorted(walker.report.unresolved_imports),
        plugins_modules_path=plugins_modules_path,
    )

"""Node.js module resolution that preserves symbolic links.

Resolved paths are normalized but never passed through realpath: when a file
requires `./symlink`, both the link and its target have to be archived for the
require to work at runtime.
"""

import os
from collections.abc import Iterable, Sequence
from typing import Any

from funcpack.errors import NodeModuleNotFoundError, PackagePathNotExportedError
from funcpack.node_dependencies.manifest import MANIFEST_FILENAME, ManifestCache
from funcpack.node_dependencies.module_name import get_module_name, is_local_specifier, split_subpath
from funcpack.utils.logging import logger

DEFAULT_EXTENSIONS = (".js", ".json", ".node", ".mjs", ".cjs")

# `exports` conditions honoured, in order of preference
EXPORT_CONDITIONS = ("require", "node", "default", "import")


def node_modules_paths(basedir: str) -> list[str]:
    """Every `node_modules` directory from `basedir` up to the filesystem root."""
    dirs = []
    current = os.path.abspath(basedir)

    while True:
        if os.path.basename(current) != "node_modules":
            dirs.append(os.path.join(current, "node_modules"))
        parent = os.path.dirname(current)
        if parent == current:
            return dirs
        current = parent


def _resolve_export_target(target: Any, pattern_match: str | None) -> str | None:
    if isinstance(target, str):
        if not target.startswith("./"):
            return None
        return target.replace("*", pattern_match) if pattern_match is not None else target

    if isinstance(target, list):
        for item in target:
            resolved = _resolve_export_target(item, pattern_match)
            if resolved is not None:
                return resolved
        return None

    if isinstance(target, dict):
        for condition in EXPORT_CONDITIONS:
            if condition in target:
                resolved = _resolve_export_target(target[condition], pattern_match)
                if resolved is not None:
                    return resolved

    return None


def resolve_exports(package_dir: str, exports: Any, subpath: str) -> str:
    """Map `subpath` (`.` or `./x`) through a package's `exports` field.

    Supports exact keys, `*` patterns (longest prefix wins), legacy folder
    keys ending with `/`, and nested condition objects.

    Raises:
        PackagePathNotExportedError: `exports` does not expose `subpath`
    """
    if not isinstance(exports, dict) or not any(key.startswith(".") for key in exports):
        exports = {".": exports}

    target = None

    if subpath in exports and "*" not in subpath:
        target = _resolve_export_target(exports[subpath], None)
    else:
        best_key = None
        best_match = None
        for key in exports:
            if "*" in key:
                prefix, _, suffix = key.partition("*")
                if (
                    subpath.startswith(prefix)
                    and subpath.endswith(suffix)
                    and len(subpath) >= len(prefix) + len(suffix)
                ):
                    match = subpath[len(prefix) : len(subpath) - len(suffix)]
                else:
                    continue
            elif key.endswith("/") and subpath.startswith(key):
                match = None
            else:
                continue

            if best_key is None or len(key) > len(best_key):
                best_key, best_match = key, match

        if best_key is not None:
            if best_key.endswith("/") and "*" not in best_key:
                base = _resolve_export_target(exports[best_key], None)
                target = base + subpath[len(best_key) :] if base is not None else None
            else:
                target = _resolve_export_target(exports[best_key], best_match)

    if target is None:
        raise PackagePathNotExportedError(package_dir, subpath)

    return os.path.normpath(os.path.join(package_dir, target))


class ModuleResolver:
    """Implements the Node.js resolution algorithm against the filesystem."""

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS, manifests: ManifestCache | None = None):
        self.extensions = tuple(extensions)
        self.manifests = manifests if manifests is not None else ManifestCache()

    def _load_as_file(self, path: str) -> str | None:
        if os.path.isfile(path):
            return path
        for ext in self.extensions:
            candidate = path + ext
            if os.path.isfile(candidate):
                return candidate
        return None

    def _load_index(self, path: str) -> str | None:
        for ext in self.extensions:
            candidate = os.path.join(path, "index" + ext)
            if os.path.isfile(candidate):
                return candidate
        return None

    def _load_as_directory(self, path: str) -> str | None:
        if not os.path.isdir(path):
            return None

        manifest_path = os.path.join(path, MANIFEST_FILENAME)
        if os.path.isfile(manifest_path):
            main = self.manifests.load(manifest_path).main
            if main:
                main_path = os.path.normpath(os.path.join(path, main))
                resolved = self._load_as_file(main_path) or self._load_index(main_path)
                if resolved is not None:
                    return resolved

        return self._load_index(path)

    def _load_local(self, path: str) -> str | None:
        path = os.path.normpath(path)
        return self._load_as_file(path) or self._load_as_directory(path)

    def _load_package(self, specifier: str, basedir: str) -> str | None:
        module_name = get_module_name(specifier)
        if module_name is None:
            return None

        for modules_dir in node_modules_paths(basedir):
            package_dir = os.path.join(modules_dir, module_name)
            if not os.path.isdir(package_dir):
                # A single-file module such as node_modules/foo.js
                if module_name == specifier:
                    resolved = self._load_as_file(package_dir)
                    if resolved is not None:
                        return resolved
                continue

            manifest_path = os.path.join(package_dir, MANIFEST_FILENAME)
            if os.path.isfile(manifest_path):
                exports = self.manifests.load(manifest_path).exports
                if exports is not None:
                    target = resolve_exports(package_dir, exports, split_subpath(specifier, module_name))
                    return target if os.path.isfile(target) else None

            resolved = self._load_local(os.path.join(modules_dir, specifier))
            if resolved is not None:
                return resolved

        return None

    def resolve_from(self, specifier: str, basedir: str) -> str:
        """Resolve `specifier` as if required by a file inside `basedir`.

        Raises:
            NodeModuleNotFoundError: nothing matches
            PackagePathNotExportedError: the package restricts the subpath
        """
        basedir = os.path.abspath(basedir)

        if is_local_specifier(specifier):
            resolved = self._load_local(os.path.join(basedir, specifier))
        else:
            resolved = self._load_package(specifier, basedir)

        if resolved is None:
            raise NodeModuleNotFoundError(specifier, [basedir])
        return resolved

    def resolve_path(self, specifier: str, search_dirs: Iterable[str]) -> str:
        """Resolve `specifier` from the first of `search_dirs` that can.

        When every directory fails, a PackagePathNotExportedError from any of
        them is raised, since the package was found there. Otherwise the
        first NodeModuleNotFoundError is.
        """
        first_error: Exception | None = None
        search_dirs = [d for d in search_dirs if d]

        for basedir in search_dirs:
            try:
                return self.resolve_from(specifier, basedir)
            except PackagePathNotExportedError as e:
                if not isinstance(first_error, PackagePathNotExportedError):
                    first_error = e
            except NodeModuleNotFoundError as e:
                first_error = first_error or e

        if first_error is None:
            raise NodeModuleNotFoundError(specifier, search_dirs)
        raise first_error

    def resolve_module_entry(self, specifier: str, search_dirs: Iterable[str]) -> str | None:
        """Like resolve_path() but returns None instead of raising."""
        try:
            return self.resolve_path(specifier, search_dirs)
        except (NodeModuleNotFoundError, PackagePathNotExportedError):
            return None

    def resolve_package(self, module_name: str, search_dirs: Iterable[str]) -> str:
        """Path of the installed package.json of `module_name`.

        Each directory of `search_dirs` is tried in turn. In a directory where
        the package's `exports` hides `package.json`, it is located by
        resolving its main entry point and searching upward for a directory
        named like the package that holds a manifest.

        Raises:
            NodeModuleNotFoundError: the package is not installed
        """
        search_dirs = [d for d in search_dirs if d]

        for basedir in search_dirs:
            try:
                return self.resolve_from(f"{module_name}/{MANIFEST_FILENAME}", basedir)
            except NodeModuleNotFoundError:
                continue
            except PackagePathNotExportedError:
                logger.debug(f"{module_name} does not export {MANIFEST_FILENAME}, locating it from its main file")
                package_dir = self._find_package_dir_from_main(module_name, [basedir])
                if package_dir is not None:
                    return os.path.join(package_dir, MANIFEST_FILENAME)

        raise NodeModuleNotFoundError(module_name, search_dirs)

    def _find_package_dir_from_main(self, module_name: str, search_dirs: list[str]) -> str | None:
        main_file = self.resolve_module_entry(module_name, search_dirs)
        if main_file is None:
            return None

        current = os.path.dirname(main_file)
        while True:
            if current.replace("\\", "/").endswith(module_name) and os.path.isfile(
                os.path.join(current, MANIFEST_FILENAME)
            ):
                return current
            parent = os.path.dirname(current)
            if parent == current:
                return None
            current = parent


def resolve_module_entry(
    specifier: str,
    search_dirs: Iterable[str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> str | None:
    """Resolve `specifier` from several roots, returning None when none works."""
    return ModuleResolver(extensions).resolve_module_entry(specifier, search_dirs)


def resolve_package(module_name: str, search_dirs: Iterable[str], extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str:
    return ModuleResolver(extensions).resolve_package(module_name, search_dirs)

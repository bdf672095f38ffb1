"""Loading and memoizing package.json manifests."""

import json
import os
from dataclasses import dataclass, field
from typing import Any

from funcpack.errors import ManifestParseError
from funcpack.utils.helpers import find_up

MANIFEST_FILENAME = "package.json"

# Dependencies whose presence marks a package as a native (compiled) module
NATIVE_MARKER_MODULES = ("bindings", "nan", "node-gyp", "node-gyp-build", "node-pre-gyp", "prebuild")


def _str_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class PackageManifest:
    """The parts of a package.json the traversal cares about. Never mutated."""

    name: str | None = None
    main: str | None = None
    exports: Any = None
    dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies_meta: dict[str, dict[str, Any]] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)
    binary: bool = False
    gypfile: bool = False
    path: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str | None = None) -> "PackageManifest":
        files = data.get("files")
        return cls(
            name=data.get("name") if isinstance(data.get("name"), str) else None,
            main=data.get("main") if isinstance(data.get("main"), str) else None,
            exports=data.get("exports"),
            dependencies=_str_dict(data.get("dependencies")),
            peer_dependencies=_str_dict(data.get("peerDependencies")),
            peer_dependencies_meta=_str_dict(data.get("peerDependenciesMeta")),
            optional_dependencies=_str_dict(data.get("optionalDependencies")),
            dev_dependencies=_str_dict(data.get("devDependencies")),
            files=[f for f in files if isinstance(f, str)] if isinstance(files, list) else [],
            binary=bool(data.get("binary")),
            gypfile=bool(data.get("gypfile")),
            path=path,
        )

    @property
    def is_empty(self) -> bool:
        return self.path is None

    def is_optional_dependency(self, module_name: str) -> bool:
        """Whether a failure to resolve `module_name` may be tolerated.

        True for `optionalDependencies`, and for peer dependencies flagged
        optional in `peerDependenciesMeta` that are also declared as peers.
        """
        if module_name in self.optional_dependencies:
            return True

        meta = self.peer_dependencies_meta.get(module_name)
        return bool(isinstance(meta, dict) and meta.get("optional") and module_name in self.peer_dependencies)

    def is_native_module(self) -> bool:
        """Heuristic for packages shipping compiled `.node` binaries."""
        if self.binary or self.gypfile:
            return True

        if any(marker in self.dependencies or marker in self.dev_dependencies for marker in NATIVE_MARKER_MODULES):
            return True

        return any(not path.startswith("!") and os.path.splitext(path)[1] == ".node" for path in self.files)


EMPTY_MANIFEST = PackageManifest()


def read_manifest(path: str) -> PackageManifest:
    """Parse the package.json at `path`.

    Raises:
        ManifestParseError: the file is not a JSON object
    """
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ManifestParseError(path, f"expected an object, got {type(data).__name__}")

    return PackageManifest.from_dict(data, path=path)


def find_manifest_path(directory: str) -> str | None:
    """Nearest package.json at or above `directory`."""
    return find_up(MANIFEST_FILENAME, directory)


def get_manifest(directory: str) -> PackageManifest:
    """Load the nearest package.json at or above `directory`.

    Returns an empty manifest when none exists up to the filesystem root.
    """
    path = find_manifest_path(directory)
    if path is None:
        return EMPTY_MANIFEST
    return read_manifest(path)


class ManifestCache:
    """Memoizes manifests by file path and by lookup directory for one run."""

    def __init__(self):
        self._by_path: dict[str, PackageManifest] = {}
        self._by_dir: dict[str, PackageManifest] = {}

    def load(self, path: str) -> PackageManifest:
        """Manifest stored at exactly `path`."""
        path = os.path.abspath(path)
        manifest = self._by_path.get(path)
        if manifest is None:
            manifest = read_manifest(path)
            self._by_path[path] = manifest
        return manifest

    def get(self, directory: str) -> PackageManifest:
        """Nearest manifest at or above `directory`."""
        directory = os.path.abspath(directory)
        manifest = self._by_dir.get(directory)
        if manifest is None:
            path = find_manifest_path(directory)
            manifest = EMPTY_MANIFEST if path is None else self.load(path)
            self._by_dir[directory] = manifest
        return manifest

    def __len__(self) -> int:
        return len(self._by_path)

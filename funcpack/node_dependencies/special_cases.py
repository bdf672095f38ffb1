"""Packages that get special treatment during the traversal."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from funcpack.errors import FuncpackError
from funcpack.node_dependencies.manifest import PackageManifest, get_manifest
from funcpack.utils.logging import logger

# Present in the execution environment, never bundled
EXCLUDED_MODULES = frozenset({"aws-sdk"})

# Tooling peers that must never be followed
EXCLUDED_PEER_DEPENDENCIES = frozenset({"@prisma/cli", "prisma2"})

# Always left external
EXTERNAL_MODULES = ("@prisma/client",)

# External when the project depends on Next.js
NEXT_EXTERNAL_MODULES = ("critters", "nanoid")


def is_excluded_module(module_name: str, ignored_modules: Iterable[str] = ()) -> bool:
    return module_name in EXCLUDED_MODULES or module_name.startswith("@types/") or module_name in set(ignored_modules)


def get_nested_dependencies(manifest: PackageManifest) -> list[str]:
    """Names a package's own manifest asks to bring along.

    `dependencies`, then `peerDependencies` minus the excluded tooling peers,
    then `optionalDependencies`.
    """
    return [
        *manifest.dependencies,
        *(name for name in manifest.peer_dependencies if name not in EXCLUDED_PEER_DEPENDENCIES),
        *manifest.optional_dependencies,
    ]


def is_optional_module(module_name: str, manifest: PackageManifest) -> bool:
    return manifest.is_optional_dependency(module_name)


@dataclass
class SpecialCaseModules:
    external_modules: list[str] = field(default_factory=list)
    ignored_modules: list[str] = field(default_factory=list)


def _get_manifest_if_available(src_dir: str) -> PackageManifest:
    try:
        return get_manifest(src_dir)
    except (FuncpackError, OSError) as e:
        logger.debug(f"No usable package.json above {src_dir}: {e}")
        return PackageManifest()


def get_external_and_ignored_modules_from_special_cases(src_dir: str) -> SpecialCaseModules:
    """External and ignored modules derived from the project manifest."""
    manifest = _get_manifest_if_available(src_dir)

    external_modules = list(EXTERNAL_MODULES)
    if "next" in manifest.dependencies or "next" in manifest.dev_dependencies:
        external_modules.extend(NEXT_EXTERNAL_MODULES)

    return SpecialCaseModules(external_modules=external_modules, ignored_modules=[])

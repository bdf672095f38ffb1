"""Recursive traversal of a function's dependency graph.

Starting from the entry file, local imports (and tree-shaken package
internals) are resolved to single files and walked in turn. Any other package
import pulls in every file the package publishes, plus its own manifest
dependencies. Sibling imports are processed concurrently and a failing branch cancels its
siblings. Filesystem work runs in worker threads; the shared TraversalCache is
only touched on the event loop, with no await between check and insert.
"""

import asyncio
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from funcpack.errors import NodeModuleNotFoundError, PackagePathNotExportedError
from funcpack.feature_flags import FeatureFlags
from funcpack.node_dependencies.imports import list_imports
from funcpack.node_dependencies.manifest import ManifestCache, PackageManifest
from funcpack.node_dependencies.module_name import get_module_name, is_local_specifier
from funcpack.node_dependencies.published import get_side_files, list_published_files
from funcpack.node_dependencies.resolver import ModuleResolver
from funcpack.node_dependencies.special_cases import (
    get_nested_dependencies,
    is_excluded_module,
    is_optional_module,
)
from funcpack.node_dependencies.traversal_cache import TraversalCache, get_new_cache
from funcpack.node_dependencies.tree_shaking import TreeShakePolicy
from funcpack.utils.logging import logger


async def gather_or_cancel(*aws):
    """Like asyncio.gather(), but the first failure cancels the other awaitables.

    The original exception is re-raised once every sibling has finished.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass
class WalkResult:
    """Files reached from one node of the graph."""

    local_files: set[str] = field(default_factory=set)
    package_files: set[str] = field(default_factory=set)

    @property
    def paths(self) -> set[str]:
        return self.local_files | self.package_files

    def update(self, other: "WalkResult") -> None:
        self.local_files |= other.local_files
        self.package_files |= other.package_files

    @classmethod
    def merge(cls, results: Iterable["WalkResult"]) -> "WalkResult":
        merged = cls()
        for result in results:
            merged.update(result)
        return merged


@dataclass
class WalkReport:
    """Diagnostics gathered while walking, surfaced to callers."""

    native_modules: set[str] = field(default_factory=set)
    external_modules: set[str] = field(default_factory=set)
    unresolved_imports: set[str] = field(default_factory=set)
    tolerated_modules: set[str] = field(default_factory=set)


class DependencyWalker:
    """Walks one function's graph. Create a new walker for each function."""

    def __init__(
        self,
        project_manifest: PackageManifest | None = None,
        plugins_modules_path: str | None = None,
        resolver: ModuleResolver | None = None,
        policy: TreeShakePolicy | None = None,
        external_modules: Iterable[str] = (),
        ignored_modules: Iterable[str] = (),
        feature_flags: FeatureFlags | None = None,
        cache: TraversalCache | None = None,
    ):
        self.project_manifest = project_manifest or PackageManifest()
        self.plugins_modules_path = plugins_modules_path
        self.resolver = resolver or ModuleResolver(manifests=ManifestCache())
        self.policy = policy or TreeShakePolicy()
        self.external_modules = frozenset(external_modules)
        self.ignored_modules = frozenset(ignored_modules)
        self.feature_flags = feature_flags or FeatureFlags()
        self.cache = cache if cache is not None else get_new_cache()
        self.report = WalkReport()

    @property
    def manifests(self) -> ManifestCache:
        return self.resolver.manifests

    def _search_dirs(self, basedir: str) -> list[str]:
        return [d for d in (basedir, self.plugins_modules_path) if d]

    async def walk(self, path: str, propagate: bool = False) -> WalkResult:
        """Files required by the local file at `path`, not including `path` itself."""
        path = os.path.normpath(os.path.abspath(path))

        if not self.cache.visit_local_file(path):
            logger.debug(f"Already walked {path}")
            return WalkResult()

        found = await asyncio.to_thread(list_imports, path)

        if found.unresolved and self.feature_flags.parse_dynamic_imports:
            for expression in found.unresolved:
                logger.debug(f"Cannot statically resolve {expression} in {path}")
            self.report.unresolved_imports.update(found.unresolved)

        basedir = os.path.dirname(path)
        results = await gather_or_cancel(
            *(self.walk_import(specifier, basedir, propagate) for specifier in found.imports)
        )
        return WalkResult.merge(results)

    async def walk_import(self, specifier: str, basedir: str, propagate: bool = False) -> WalkResult:
        """Dispatch one import either to the file walk or to the package walk."""
        module_name = get_module_name(specifier)

        if not is_local_specifier(specifier):
            # require("@scope") and similar oddities name no package
            if module_name is None:
                return WalkResult()
            if self._is_skipped(module_name):
                return WalkResult()

        propagate = propagate or self.policy.triggers_propagation(specifier)

        if self.policy.should_tree_shake(specifier, propagate) and module_name not in self.external_modules:
            try:
                return await self.walk_file_dependency(specifier, basedir, propagate)
            except PackagePathNotExportedError as e:
                logger.debug(f"{e}, including {module_name} as a whole")
            except NodeModuleNotFoundError:
                if module_name is not None and is_optional_module(module_name, self.project_manifest):
                    self._tolerate(module_name)
                    return WalkResult()
                raise

        return await self.walk_dependency(specifier, basedir, self.project_manifest)

    async def walk_file_dependency(self, specifier: str, basedir: str, propagate: bool) -> WalkResult:
        """Resolve `specifier` to a single file and walk it."""
        path = await asyncio.to_thread(self.resolver.resolve_path, specifier, self._search_dirs(basedir))
        result = await self.walk(path, propagate)
        result.local_files.add(path)
        return result

    async def walk_dependency(self, specifier: str, basedir: str, manifest: PackageManifest) -> WalkResult:
        """Include the package owning `specifier` as a whole.

        A package that cannot be found is tolerated when `manifest` lists it as
        optional; otherwise NodeModuleNotFoundError propagates.
        """
        module_name = get_module_name(specifier)
        if module_name is None or self._is_skipped(module_name):
            return WalkResult()

        try:
            return await self.walk_module(module_name, basedir)
        except NodeModuleNotFoundError:
            if is_optional_module(module_name, manifest):
                self._tolerate(module_name)
                return WalkResult()
            raise

    async def walk_module(self, module_name: str, basedir: str) -> WalkResult:
        """Published files of `module_name` and of its manifest dependencies."""
        manifest_path = await asyncio.to_thread(self.resolver.resolve_package, module_name, self._search_dirs(basedir))
        package_dir = os.path.dirname(manifest_path)

        if not self.cache.visit_package_dir(package_dir, module_name):
            logger.debug(f"Already included {module_name} from {package_dir}")
            return WalkResult()

        manifest = await asyncio.to_thread(self.manifests.load, manifest_path)

        if manifest.is_native_module():
            self.report.native_modules.add(module_name)
        if module_name in self.external_modules:
            self.report.external_modules.add(module_name)

        published, side_files, *nested = await gather_or_cancel(
            asyncio.to_thread(list_published_files, package_dir),
            asyncio.to_thread(get_side_files, package_dir, module_name),
            *(self.walk_dependency(name, package_dir, manifest) for name in get_nested_dependencies(manifest)),
        )

        result = WalkResult.merge(nested)
        result.package_files.update(published)
        result.package_files.update(side_files)
        return result

    def _is_skipped(self, module_name: str) -> bool:
        return is_excluded_module(module_name, self.ignored_modules)

    def _tolerate(self, module_name: str) -> None:
        logger.debug(f"Optional module {module_name} is not installed, skipping it")
        self.report.tolerated_modules.add(module_name)

    async def walk_entry(self, entry_file: str) -> WalkResult:
        """Walk from the function's entry file, attributing failures to it."""
        entry_file = os.path.normpath(os.path.abspath(entry_file))

        try:
            result = await self.walk(entry_file)
        except NodeModuleNotFoundError as e:
            raise e.with_entry_file(entry_file) from e
        except Exception as e:
            e.add_note(f'In file "{entry_file}"')
            raise

        result.local_files.add(entry_file)
        return result


async def walk(
    entry_file: str,
    manifest: PackageManifest | None = None,
    cache: TraversalCache | None = None,
    **kwargs,
) -> WalkResult:
    """Walk the graph of `entry_file` with a fresh walker."""
    walker = DependencyWalker(project_manifest=manifest, cache=cache, **kwargs)
    return await walker.walk_entry(entry_file)

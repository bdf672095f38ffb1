"""Dependency traversal for Node.js functions."""

from .manifest import ManifestCache, PackageManifest, get_manifest
from .module_name import get_module_name, is_builtin_module, is_local_specifier
from .published import get_side_files, list_published_files
from .resolver import ModuleResolver, resolve_module_entry, resolve_package
from .src_files import SrcFiles, get_plugins_modules_path, get_src_files
from .special_cases import get_external_and_ignored_modules_from_special_cases, get_nested_dependencies
from .traversal_cache import TraversalCache, get_new_cache
from .tree_shaking import TreeShakePolicy, should_tree_shake
from .walker import DependencyWalker, WalkResult, walk

__all__ = [
    "DependencyWalker",
    "ManifestCache",
    "ModuleResolver",
    "PackageManifest",
    "SrcFiles",
    "TraversalCache",
    "TreeShakePolicy",
    "WalkResult",
    "get_external_and_ignored_modules_from_special_cases",
    "get_manifest",
    "get_module_name",
    "get_nested_dependencies",
    "get_new_cache",
    "get_plugins_modules_path",
    "get_side_files",
    "get_src_files",
    "is_builtin_module",
    "is_local_specifier",
    "list_published_files",
    "resolve_module_entry",
    "resolve_package",
    "should_tree_shake",
    "walk",
]

"""Per-run bookkeeping for the dependency traversal."""

from dataclasses import dataclass, field


@dataclass
class TraversalCache:
    """Sets shared by every branch of one top-level walk.

    Entries are only ever added. Once a path or name is present it is never
    processed again in the same run, which bounds the walk on cyclic and
    diamond-shaped graphs. A fresh instance is created for each function.
    """

    visited_local_files: set[str] = field(default_factory=set)
    resolved_module_names: set[str] = field(default_factory=set)
    visited_package_dirs: set[str] = field(default_factory=set)

    def visit_local_file(self, path: str) -> bool:
        """Mark `path` as walked. Returns False if it already was."""
        if path in self.visited_local_files:
            return False
        self.visited_local_files.add(path)
        return True

    def visit_package_dir(self, package_dir: str, module_name: str) -> bool:
        """Mark a package root as enumerated. Returns False if it already was."""
        if package_dir in self.visited_package_dirs:
            return False
        self.visited_package_dirs.add(package_dir)
        self.resolved_module_names.add(module_name)
        return True


def get_new_cache() -> TraversalCache:
    return TraversalCache()

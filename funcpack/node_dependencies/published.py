"""Listing the files an installed package publishes."""

import fnmatch
import os

from funcpack.utils.logging import logger

# Matched against base names at every depth
IGNORED_FILES = (
    ".npmignore",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "*.log",
    "*.lock",
    "*~",
    "*.map",
    "*.patch",
)

TS_DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")

# TypeScript source -> compiled counterpart
TS_COMPILED_EXTENSIONS = {".ts": ".js", ".mts": ".mjs", ".cts": ".cjs"}

# Packages generating files outside their own directory on install
SIDE_FILES = {
    "@prisma/client": "../../.prisma",
}


def _is_ignored(name: str, siblings: set[str]) -> bool:
    if any(fnmatch.fnmatchcase(name, pattern) for pattern in IGNORED_FILES):
        return True

    if name.endswith(TS_DECLARATION_SUFFIXES):
        return True

    stem, ext = os.path.splitext(name)
    compiled = TS_COMPILED_EXTENSIONS.get(ext)
    return compiled is not None and stem + compiled in siblings


def list_published_files(package_dir: str) -> list[str]:
    """Return the absolute paths of the files `package_dir` publishes, sorted.

    Nested `node_modules` directories are not descended; symbolic links are
    returned as entries and never followed. A missing directory yields [].
    """
    package_dir = os.path.abspath(package_dir)
    if not os.path.isdir(package_dir):
        return []

    files = []

    for root, dirs, filenames in os.walk(package_dir, followlinks=False):
        siblings = set(filenames)

        kept_dirs = []
        for name in dirs:
            if name == "node_modules":
                continue
            path = os.path.join(root, name)
            if os.path.islink(path):
                files.append(path)
            else:
                kept_dirs.append(name)
        dirs[:] = sorted(kept_dirs)

        files.extend(os.path.join(root, name) for name in filenames if not _is_ignored(name, siblings))

    return sorted(files)


def get_side_files(package_dir: str, module_name: str) -> list[str]:
    """Published files of the directory generated next to `module_name`, if any."""
    side_dir = SIDE_FILES.get(module_name)
    if side_dir is None:
        return []

    path = os.path.normpath(os.path.join(package_dir, side_dir))
    logger.debug(f"Including side files of {module_name} from {path}")
    return list_published_files(path)

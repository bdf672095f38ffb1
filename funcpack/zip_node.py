"""Laying out a Node.js function's files inside its archive."""

import os

from funcpack.archive import ArchiveEntry, copy_to_directory, write_zip
from funcpack.entry_file import (
    conflicts_with_entry_file,
    get_entry_file,
    get_module_format,
    is_named_like_entry_file,
    normalize_file_path,
)
from funcpack.errors import InvalidArchiveFormatError
from funcpack.feature_flags import FeatureFlags
from funcpack.function import FunctionSource
from funcpack.function_config import FunctionConfig
from funcpack.utils.constants import ARCHIVE_FORMAT_NONE, ARCHIVE_FORMAT_ZIP, DEFAULT_USER_NAMESPACE
from funcpack.utils.logging import logger


def get_base_path(src_files: list[str], plugins_modules_path: str | None = None) -> str:
    """Deepest directory containing every file outside the plugin modules directory."""
    dirnames = []
    for path in src_files:
        if plugins_modules_path is not None and path.startswith(plugins_modules_path + os.sep):
            continue
        dirnames.append(os.path.dirname(path))

    if not dirnames:
        raise ValueError("Cannot compute a base path without source files")
    if len(dirnames) == 1:
        return dirnames[0]
    return os.path.commonpath(dirnames)


def get_archive_entries(
    function: FunctionSource,
    src_files: list[str],
    base_path: str,
    plugins_modules_path: str | None = None,
    feature_flags: FeatureFlags | None = None,
    config: FunctionConfig | None = None,
) -> list[ArchiveEntry]:
    """Archive entries in write order: the stub first, then files sorted by source path."""
    feature_flags = feature_flags or FeatureFlags()
    config = config or FunctionConfig()

    named_like_entry = is_named_like_entry_file(function.main_file, function.name, base_path)
    has_conflict = conflicts_with_entry_file(src_files, function.main_file, function.name, base_path) or (
        feature_flags.unique_entry_file and named_like_entry
    )
    needs_entry_file = feature_flags.unique_entry_file or has_conflict or not named_like_entry

    # A conflicting file moves every user file into its own sub-directory
    user_namespace = DEFAULT_USER_NAMESPACE if has_conflict else ""

    entries = []

    if needs_entry_file:
        entry_file = get_entry_file(
            function.name,
            function.main_file,
            base_path,
            user_namespace=user_namespace,
            module_format=get_module_format(function.main_file, config.node_module_format),
        )
        entries.append(ArchiveEntry(dest_path=entry_file.filename, content=entry_file.contents.encode("utf-8")))

    for path in sorted(src_files):
        name = normalize_file_path(path, base_path, plugins_modules_path, user_namespace)
        entries.append(ArchiveEntry(dest_path=name, source_path=path))

    return entries


def zip_node_js(
    function: FunctionSource,
    src_files: list[str],
    dest_folder: str,
    archive_format: str = ARCHIVE_FORMAT_ZIP,
    base_path: str | None = None,
    plugins_modules_path: str | None = None,
    feature_flags: FeatureFlags | None = None,
    config: FunctionConfig | None = None,
    compress_level: int = 9,
) -> str:
    """Write the function to `dest_folder`, returning the archive or directory path.

    Entries are written one after the other in sorted order.
    """
    if archive_format not in (ARCHIVE_FORMAT_ZIP, ARCHIVE_FORMAT_NONE):
        raise InvalidArchiveFormatError(archive_format)

    base_path = base_path or get_base_path(src_files, plugins_modules_path)
    entries = get_archive_entries(function, src_files, base_path, plugins_modules_path, feature_flags, config)

    if archive_format == ARCHIVE_FORMAT_ZIP:
        dest_path = os.path.join(dest_folder, f"{function.name}.zip")
        logger.debug(f"Writing {len(entries)} entries to {dest_path}")
        return write_zip(entries, dest_path, compress_level)

    dest_path = os.path.join(dest_folder, function.name)
    logger.debug(f"Copying {len(entries)} entries to {dest_path}")
    return copy_to_directory(entries, dest_path)

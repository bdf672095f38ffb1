"""The generated stub re-exporting a function's main file."""

import os
from dataclasses import dataclass

from funcpack.function_config import MODULE_FORMAT_CJS, MODULE_FORMAT_ESM
from funcpack.utils.helpers import to_posix_path


@dataclass(frozen=True)
class EntryFile:
    filename: str
    contents: str


def get_module_format(main_file: str, node_module_format: str | None = None) -> str:
    if main_file.endswith(".mjs") or node_module_format == MODULE_FORMAT_ESM:
        return MODULE_FORMAT_ESM
    return MODULE_FORMAT_CJS


def get_entry_filename(function_name: str, main_file: str) -> str:
    extension = ".mjs" if main_file.endswith(".mjs") else ".js"
    return f"{function_name}{extension}"


def normalize_file_path(
    path: str,
    common_prefix: str,
    plugins_modules_path: str | None = None,
    user_namespace: str = "",
) -> str:
    """Archive-relative, forward-slash name for `path`.

    Plugin modules land in `node_modules/`, everything else is made relative
    to `common_prefix`. Both are placed under `user_namespace` when set.
    """
    path = os.path.normpath(path)

    if plugins_modules_path is not None and (
        path == plugins_modules_path or path.startswith(plugins_modules_path + os.sep)
    ):
        relative = os.path.join("node_modules", os.path.relpath(path, plugins_modules_path))
    else:
        relative = os.path.relpath(path, common_prefix)

    if user_namespace:
        relative = os.path.join(user_namespace, relative)

    return to_posix_path(os.path.normpath(relative))


def get_entry_file(
    function_name: str,
    main_file: str,
    common_prefix: str,
    user_namespace: str = "",
    module_format: str = MODULE_FORMAT_CJS,
) -> EntryFile:
    main_path = normalize_file_path(main_file, common_prefix, user_namespace=user_namespace)
    import_path = f"./{main_path}"

    if module_format == MODULE_FORMAT_ESM:
        contents = f"export {{ handler }} from '{import_path}'"
    else:
        contents = f"module.exports = require('{import_path}')"

    return EntryFile(filename=get_entry_filename(function_name, main_file), contents=contents)


def is_named_like_entry_file(main_file: str, function_name: str, common_prefix: str) -> bool:
    """Whether the main file already sits where the stub would be written."""
    entry_path = os.path.join(common_prefix, get_entry_filename(function_name, main_file))
    return os.path.normpath(main_file) == os.path.normpath(entry_path)


def conflicts_with_entry_file(src_files: list[str], main_file: str, function_name: str, common_prefix: str) -> bool:
    """Whether a supporting file (not the main file) occupies the stub's path."""
    entry_path = os.path.normpath(os.path.join(common_prefix, get_entry_filename(function_name, main_file)))
    main_file = os.path.normpath(main_file)
    return any(os.path.normpath(path) == entry_path and os.path.normpath(path) != main_file for path in src_files)

"""Discover functions inside functions directories."""

import os
from collections.abc import Iterable

from funcpack.function import FunctionSource

# Extensions a function file may use, in order of precedence
ALLOWED_EXTENSIONS = (".js", ".cjs", ".mjs", ".zip")


def _main_file_candidates(src_path: str, filename: str) -> list[str]:
    return [
        os.path.join(src_path, f"{filename}.js"),
        os.path.join(src_path, "index.js"),
        os.path.join(src_path, f"{filename}.cjs"),
        os.path.join(src_path, "index.cjs"),
        os.path.join(src_path, f"{filename}.mjs"),
        os.path.join(src_path, "index.mjs"),
    ]


def find_function_in_path(src_path: str) -> FunctionSource | None:
    """Return the function living at `src_path`, or None when it is not one."""
    src_path = os.path.abspath(src_path)
    filename = os.path.basename(src_path)

    if filename == "node_modules" or not os.path.exists(src_path):
        return None

    is_directory = os.path.isdir(src_path)

    if is_directory:
        main_file = next(
            (candidate for candidate in _main_file_candidates(src_path, filename) if os.path.isfile(candidate)),
            None,
        )
        if main_file is None:
            return None
        extension = ""
        name = filename
        src_dir = src_path
    else:
        name, extension = os.path.splitext(filename)
        if extension not in ALLOWED_EXTENSIONS:
            return None
        main_file = src_path
        src_dir = os.path.dirname(src_path)

    return FunctionSource(
        name=name,
        src_path=src_path,
        src_dir=src_dir,
        main_file=main_file,
        filename=filename,
        extension=extension,
        is_directory=is_directory,
    )


def list_functions_directories(src_folders: Iterable[str]) -> list[str]:
    """List the candidate paths (one per entry) of every functions directory."""
    paths = []
    for folder in src_folders:
        folder = os.path.abspath(folder)
        if not os.path.isdir(folder):
            continue
        paths.extend(os.path.join(folder, entry) for entry in sorted(os.listdir(folder)))
    return paths


def _precedence(func: FunctionSource) -> tuple[int, int]:
    """Higher tuple wins when two entries share a name."""
    if func.is_directory:
        return (1, 0)
    return (0, len(ALLOWED_EXTENSIONS) - ALLOWED_EXTENSIONS.index(func.extension))


def find_functions_in_paths(paths: Iterable[str]) -> list[FunctionSource]:
    """Find functions in `paths`, keeping a single function per name.

    `{name}/` directories take precedence over `{name}.js` files, and files
    follow the order of ALLOWED_EXTENSIONS. The result is sorted by name.
    """
    functions: dict[str, FunctionSource] = {}

    for path in paths:
        func = find_function_in_path(path)
        if func is None:
            continue
        current = functions.get(func.name)
        if current is None or _precedence(func) > _precedence(current):
            functions[func.name] = func

    return [functions[name] for name in sorted(functions)]

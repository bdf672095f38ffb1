"""Packaging functions: the public entry points.

All functions of a batch are packaged concurrently, bounded by a semaphore.
Each function gets its own traversal cache and manifest cache, so builds never
share state. A failing function is reported in its result while the others
complete.
"""

import asyncio
import os
import shutil
import time
from collections.abc import Iterable, Mapping
from typing import Any

from funcpack.config_runtime import load_runtime_config
from funcpack.entry_file import get_entry_filename
from funcpack.errors import InvalidArchiveFormatError
from funcpack.feature_flags import FeatureFlags
from funcpack.finder import find_function_in_path, find_functions_in_paths, list_functions_directories
from funcpack.function import FunctionResult, FunctionSource
from funcpack.function_config import get_config_for_function
from funcpack.node_dependencies.src_files import get_src_files
from funcpack.utils.constants import ARCHIVE_FORMAT_ZIP, ARCHIVE_FORMATS
from funcpack.utils.helpers import compute_file_hash
from funcpack.utils.logging import logger
from funcpack.zip_node import zip_node_js

FunctionsConfig = Mapping[str, Mapping[str, Any]]


def list_functions(src_folders: str | Iterable[str]) -> list[FunctionSource]:
    """Functions found in one or several functions directories, sorted by name."""
    if isinstance(src_folders, str):
        src_folders = [src_folders]
    return find_functions_in_paths(list_functions_directories(src_folders))


def _describe_error(error: Exception) -> str:
    return "\n".join([str(error), *getattr(error, "__notes__", [])])


def _validate_archive_format(archive_format: str) -> None:
    if archive_format not in ARCHIVE_FORMATS:
        raise InvalidArchiveFormatError(archive_format)


async def list_function_files(
    src_path: str,
    config: FunctionsConfig | None = None,
    feature_flags: FeatureFlags | None = None,
    base_path: str | None = None,
    runtime_config: dict[str, Any] | None = None,
) -> list[str]:
    """The sorted absolute paths a function needs, without writing anything."""
    function = find_function_in_path(src_path)
    if function is None:
        return []
    if function.extension == ".zip":
        return [function.src_path]

    src_files = await get_src_files(
        function,
        get_config_for_function(config, function.name),
        feature_flags,
        runtime_config or load_runtime_config(),
        base_path,
    )
    return src_files.paths


async def _package_function(
    function: FunctionSource,
    dest_folder: str,
    archive_format: str,
    config: FunctionsConfig | None,
    feature_flags: FeatureFlags,
    base_path: str | None,
    runtime_config: dict[str, Any],
) -> FunctionResult:
    start = time.perf_counter()
    function_config = get_config_for_function(config, function.name)
    result = FunctionResult(
        name=function.name,
        main_file=function.main_file,
        archive_format=archive_format,
        config=function_config,
    )

    if function.extension == ".zip":
        result.path = os.path.join(dest_folder, function.filename)
        await asyncio.to_thread(shutil.copyfile, function.src_path, result.path)
        result.inputs = [function.src_path]
    else:
        src_files = await get_src_files(function, function_config, feature_flags, runtime_config, base_path)
        result.inputs = src_files.paths
        result.native_modules = src_files.native_modules
        result.external_modules = src_files.external_modules
        result.unresolved_imports = src_files.unresolved_imports
        result.path = await asyncio.to_thread(
            zip_node_js,
            function,
            src_files.paths,
            dest_folder,
            archive_format=archive_format,
            base_path=base_path,
            plugins_modules_path=src_files.plugins_modules_path,
            feature_flags=feature_flags,
            config=function_config,
            compress_level=runtime_config["archive"]["compress_level"],
        )
        result.entry_filename = get_entry_filename(function.name, function.main_file)

    if os.path.isfile(result.path):
        result.size = os.path.getsize(result.path)
        result.sha256 = compute_file_hash(result.path)

    result.duration_ms = round((time.perf_counter() - start) * 1000)
    logger.info(f"Packaged {function.name} in {result.duration_ms}ms -> {result.path}")

    return result


async def zip_function(
    src_path: str,
    dest_folder: str,
    *,
    archive_format: str = ARCHIVE_FORMAT_ZIP,
    config: FunctionsConfig | None = None,
    feature_flags: FeatureFlags | None = None,
    base_path: str | None = None,
    runtime_config: dict[str, Any] | None = None,
) -> FunctionResult | None:
    """Package the single function at `src_path`. Errors propagate.

    Returns None when `src_path` is not a function.
    """
    _validate_archive_format(archive_format)

    function = find_function_in_path(src_path)
    if function is None:
        return None

    os.makedirs(dest_folder, exist_ok=True)
    return await _package_function(
        function,
        os.path.abspath(dest_folder),
        archive_format,
        config,
        feature_flags or FeatureFlags(),
        base_path,
        runtime_config or load_runtime_config(),
    )


async def zip_functions(
    src_folders: str | Iterable[str],
    dest_folder: str,
    *,
    archive_format: str = ARCHIVE_FORMAT_ZIP,
    config: FunctionsConfig | None = None,
    feature_flags: FeatureFlags | None = None,
    parallel_limit: int | None = None,
    base_path: str | None = None,
    runtime_config: dict[str, Any] | None = None,
) -> list[FunctionResult]:
    """Package every function of `src_folders` into `dest_folder`.

    Results are sorted by function name. A function that fails gets a result
    with `error` set; it does not stop the rest of the batch.
    """
    _validate_archive_format(archive_format)

    runtime_config = runtime_config or load_runtime_config()
    feature_flags = feature_flags or FeatureFlags()
    parallel_limit = parallel_limit or runtime_config["limits"]["parallel_limit"]
    dest_folder = os.path.abspath(dest_folder)

    functions = list_functions(src_folders)
    if not functions:
        logger.warning("No functions found")
        return []

    os.makedirs(dest_folder, exist_ok=True)
    semaphore = asyncio.Semaphore(parallel_limit)

    async def package_one(function: FunctionSource) -> FunctionResult:
        async with semaphore:
            try:
                return await _package_function(
                    function, dest_folder, archive_format, config, feature_flags, base_path, runtime_config
                )
            except Exception as e:
                logger.opt(exception=True).error(f"Failed to package {function.name}: {e}")
                return FunctionResult(
                    name=function.name,
                    main_file=function.main_file,
                    archive_format=archive_format,
                    config=get_config_for_function(config, function.name),
                    error=_describe_error(e),
                )

    logger.info(f"Packaging {len(functions)} function(s) with parallel limit {parallel_limit}")
    results = await asyncio.gather(*(package_one(function) for function in functions))

    return sorted(results, key=lambda result: result.name)

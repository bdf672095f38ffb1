"""End-to-end tests for packaging functions directories."""

import asyncio
import zipfile

import pytest

from funcpack.config_runtime import load_runtime_config
from funcpack.errors import InvalidArchiveFormatError, NodeModuleNotFoundError
from funcpack.utils.helpers import compute_file_hash
from funcpack.zip import list_function_files, list_functions, zip_function, zip_functions


@pytest.fixture
def runtime_config(tmp_path):
    return load_runtime_config(str(tmp_path))


@pytest.fixture
def functions_project(left_pad_project):
    project = left_pad_project
    # a.js is a supporting file of fn.js, keep it out of the functions directory
    (project.functions / "a.js").rename(project.root / "a.js")
    project.add_function("fn.js", "const a = require('../a')\nmodule.exports.handler = a\n")
    project.add_function("broken.js", "require('missing-thing')\n")
    return project


def package(project, dest, runtime_config, **kwargs):
    return asyncio.run(zip_functions(str(project.functions), str(dest), runtime_config=runtime_config, **kwargs))


def test_list_functions(functions_project):
    functions = list_functions(str(functions_project.functions))

    assert [function.name for function in functions] == ["broken", "fn"]


def test_failure_is_isolated(functions_project, tmp_path, runtime_config):
    broken, fn = package(functions_project, tmp_path / "dist", runtime_config)

    assert broken.name == "broken"
    assert not broken.ok
    assert "Cannot find module 'missing-thing'" in broken.error
    assert str(functions_project.functions / "broken.js") in broken.error
    assert broken.path is None

    assert fn.ok
    assert fn.path == str(tmp_path / "dist" / "fn.zip")
    assert fn.entry_filename == "fn.js"
    assert fn.sha256 == compute_file_hash(fn.path)


def test_archive_contents(functions_project, tmp_path, runtime_config):
    _, fn = package(functions_project, tmp_path / "dist", runtime_config)

    with zipfile.ZipFile(fn.path) as archive:
        assert archive.namelist() == [
            "fn.js",
            "a.js",
            "functions/fn.js",
            "node_modules/left-pad/README.md",
            "node_modules/left-pad/index.js",
            "node_modules/left-pad/package.json",
        ]
        assert archive.read("fn.js") == b"module.exports = require('./functions/fn.js')"


def test_repeated_builds_are_identical(functions_project, tmp_path, runtime_config):
    _, first = package(functions_project, tmp_path / "one", runtime_config)
    _, second = package(functions_project, tmp_path / "two", runtime_config, parallel_limit=1)

    assert first.sha256 == second.sha256


def test_directory_format(functions_project, tmp_path, runtime_config):
    _, fn = package(functions_project, tmp_path / "dist", runtime_config, archive_format="none")

    assert fn.path == str(tmp_path / "dist" / "fn")
    assert (tmp_path / "dist" / "fn" / "node_modules" / "left-pad" / "index.js").is_file()
    assert fn.sha256 is None


def test_prebuilt_zip_is_copied(project, tmp_path, runtime_config):
    project.functions.mkdir()
    prebuilt = project.functions / "prebuilt.zip"
    with zipfile.ZipFile(prebuilt, "w") as archive:
        archive.writestr("index.js", "exports.handler = () => {}")

    (result,) = package(project, tmp_path / "dist", runtime_config)

    assert result.path == str(tmp_path / "dist" / "prebuilt.zip")
    assert result.sha256 == compute_file_hash(prebuilt)
    assert result.inputs == [str(prebuilt)]


def test_invalid_format_is_rejected(functions_project, tmp_path, runtime_config):
    with pytest.raises(InvalidArchiveFormatError):
        package(functions_project, tmp_path / "dist", runtime_config, archive_format="tar")

    assert not (tmp_path / "dist").exists()


def test_empty_functions_directory(project, tmp_path, runtime_config):
    project.functions.mkdir()

    assert package(project, tmp_path / "dist", runtime_config) == []


def test_zip_function_propagates_errors(functions_project, tmp_path, runtime_config):
    with pytest.raises(NodeModuleNotFoundError):
        asyncio.run(
            zip_function(str(functions_project.functions / "broken.js"), str(tmp_path), runtime_config=runtime_config)
        )


def test_zip_function_ignores_non_functions(functions_project, tmp_path, runtime_config):
    readme = functions_project.add_function("README.md", "# docs")

    assert asyncio.run(zip_function(str(readme), str(tmp_path), runtime_config=runtime_config)) is None


def test_results_report_native_modules(project, tmp_path, runtime_config):
    project.add_function("fn.js", "require('addon')\n")
    project.add_package("addon", {"index.js": "", "build/Release/addon.node": ""}, gypfile=True)

    (result,) = package(project, tmp_path / "dist", runtime_config)

    assert result.native_modules == ["addon"]
    assert str(project.root / "node_modules" / "addon" / "build" / "Release" / "addon.node") in result.inputs


class TestListFunctionFiles:
    def test_sorted_paths(self, functions_project, runtime_config):
        project = functions_project

        paths = asyncio.run(list_function_files(str(project.functions / "fn.js"), runtime_config=runtime_config))

        assert paths == sorted(paths)
        assert str(project.root / "a.js") in paths
        assert str(project.functions / "fn.js") in paths

    def test_included_files_and_exclusions(self, functions_project, runtime_config):
        project = functions_project
        project.write("functions/data/public.txt", "a")
        project.write("functions/data/secret.txt", "b")
        config = {"fn": {"included_files": ["data/**", "!data/secret.txt"]}}

        paths = asyncio.run(
            list_function_files(str(project.functions / "fn.js"), config=config, runtime_config=runtime_config)
        )

        assert str(project.functions / "data" / "public.txt") in paths
        assert str(project.functions / "data" / "secret.txt") not in paths

    def test_junk_files_are_dropped(self, project, runtime_config):
        project.add_function("api/index.js", "module.exports = 1\n")
        project.write("functions/api/.DS_Store")
        project.write("functions/api/notes.txt~")

        paths = asyncio.run(list_function_files(str(project.functions / "api"), runtime_config=runtime_config))

        assert paths == [str(project.functions / "api" / "index.js")]

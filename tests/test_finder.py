"""Tests for function discovery."""

from funcpack.finder import find_function_in_path, find_functions_in_paths, list_functions_directories


def test_file_function(project):
    path = project.add_function("hello.js", "")

    function = find_function_in_path(str(path))

    assert function.name == "hello"
    assert function.main_file == str(path)
    assert function.src_dir == str(project.functions)
    assert not function.is_directory


def test_directory_function_prefers_named_main(project):
    project.add_function("api/index.js", "")
    named = project.add_function("api/api.js", "")

    function = find_function_in_path(str(project.functions / "api"))

    assert function.main_file == str(named)
    assert function.src_dir == str(project.functions / "api")
    assert function.is_directory


def test_directory_function_index(project):
    index = project.add_function("api/index.mjs", "")

    assert find_function_in_path(str(project.functions / "api")).main_file == str(index)


def test_non_functions(project):
    project.add_function("notes.md", "")
    project.write("functions/empty/readme.txt")
    project.write("functions/node_modules/x.js")

    assert find_function_in_path(str(project.functions / "notes.md")) is None
    assert find_function_in_path(str(project.functions / "empty")) is None
    assert find_function_in_path(str(project.functions / "node_modules")) is None
    assert find_function_in_path(str(project.functions / "absent.js")) is None


def test_one_function_per_name(project):
    project.add_function("hello.mjs", "")
    project.add_function("hello.js", "")
    project.add_function("api.zip", "")
    project.add_function("api/index.js", "")

    functions = find_functions_in_paths(list_functions_directories([str(project.functions)]))

    assert [(f.name, f.filename) for f in functions] == [("api", "api"), ("hello", "hello.js")]


def test_missing_directories_are_skipped(tmp_path):
    assert list_functions_directories([str(tmp_path / "absent")]) == []

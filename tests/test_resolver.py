"""Tests for module resolution with preserved symlinks."""

import os

import pytest

from funcpack.errors import NodeModuleNotFoundError, PackagePathNotExportedError
from funcpack.node_dependencies.resolver import (
    ModuleResolver,
    node_modules_paths,
    resolve_exports,
    resolve_module_entry,
    resolve_package,
)


@pytest.fixture
def resolver():
    return ModuleResolver()


class TestLocalResolution:
    def test_infers_extension(self, project, resolver):
        target = project.add_function("helper.js", "")

        assert resolver.resolve_from("./helper", str(project.functions)) == str(target)

    def test_exact_file_wins(self, project, resolver):
        target = project.add_function("data.json", "{}")

        assert resolver.resolve_from("./data.json", str(project.functions)) == str(target)

    def test_directory_main(self, project, resolver):
        project.write_json("functions/lib/package.json", {"main": "dist/entry"})
        target = project.write("functions/lib/dist/entry.js")

        assert resolver.resolve_from("./lib", str(project.functions)) == str(target)

    def test_directory_index(self, project, resolver):
        target = project.write("functions/utils/index.cjs")

        assert resolver.resolve_from("./utils", str(project.functions)) == str(target)

    def test_missing_file(self, project, resolver):
        project.functions.mkdir()

        with pytest.raises(NodeModuleNotFoundError) as exc_info:
            resolver.resolve_from("./nope", str(project.functions))

        assert exc_info.value.code == "MODULE_NOT_FOUND"
        assert "Cannot find module './nope'" in str(exc_info.value)

    def test_symlinked_file_is_not_canonicalized(self, project, resolver):
        real = project.write("shared/real.js")
        project.functions.mkdir()
        link = project.functions / "link.js"
        os.symlink(real, link)

        assert resolver.resolve_from("./link", str(project.functions)) == str(link)


class TestPackageResolution:
    def test_searches_node_modules_upward(self, project, resolver):
        package_dir = project.add_package("left-pad")
        nested = project.functions / "a" / "b"
        nested.mkdir(parents=True)

        assert resolver.resolve_from("left-pad", str(nested)) == str(package_dir / "index.js")

    def test_deep_import(self, project, resolver):
        package_dir = project.add_package("lodash", {"index.js": "", "fp/map.js": ""})

        assert resolver.resolve_from("lodash/fp/map", str(project.root)) == str(package_dir / "fp" / "map.js")

    def test_scoped_package(self, project, resolver):
        package_dir = project.add_package("@scope/pkg", main="lib/main.js", files={"lib/main.js": ""})

        assert resolver.resolve_from("@scope/pkg", str(project.root)) == str(package_dir / "lib" / "main.js")

    def test_resolve_package_returns_manifest(self, project):
        package_dir = project.add_package("left-pad")

        assert resolve_package("left-pad", [str(project.root)]) == str(package_dir / "package.json")

    def test_resolve_package_missing(self, project):
        with pytest.raises(NodeModuleNotFoundError) as exc_info:
            resolve_package("missing-thing", [str(project.root)])

        assert exc_info.value.specifier == "missing-thing"
        assert isinstance(exc_info.value, ModuleNotFoundError)

    def test_symlinked_package_keeps_link_path(self, project):
        real_dir = project.root / "packages" / "linked"
        project.write_json("packages/linked/package.json", {"name": "linked"})
        project.write("packages/linked/index.js")
        (project.root / "node_modules").mkdir()
        link = project.root / "node_modules" / "linked"
        os.symlink(real_dir, link, target_is_directory=True)

        manifest_path = resolve_package("linked", [str(project.root)])

        assert manifest_path == str(link / "package.json")
        assert os.path.realpath(manifest_path) == str(real_dir.resolve() / "package.json")

    def test_exports_hiding_package_json_falls_back_to_main(self, project):
        package_dir = project.add_package(
            "restricted",
            {"lib/main.js": ""},
            exports={".": "./lib/main.js"},
        )

        assert resolve_package("restricted", [str(project.root)]) == str(package_dir / "package.json")

    def test_exports_restricts_deep_imports(self, project, resolver):
        project.add_package("restricted", {"lib/main.js": "", "lib/private.js": ""}, exports={".": "./lib/main.js"})

        with pytest.raises(PackagePathNotExportedError):
            resolver.resolve_from("restricted/lib/private.js", str(project.root))

    def test_multiple_search_dirs(self, project):
        plugins = project.root / ".funcpack" / "plugins" / "node_modules"
        package_dir = project.add_package("plugin-only", base=".funcpack/plugins/node_modules")

        found = resolve_module_entry("plugin-only", [str(project.root), str(plugins)])

        assert found == str(package_dir / "index.js")

    def test_exports_fallback_in_second_search_dir(self, project):
        project.functions.mkdir()
        plugins = project.root / ".funcpack" / "plugins" / "node_modules"
        package_dir = project.add_package(
            "hidden",
            {"lib/main.js": ""},
            base=".funcpack/plugins/node_modules",
            exports={".": "./lib/main.js"},
        )

        manifest_path = ModuleResolver().resolve_package("hidden", [str(project.functions), str(plugins)])

        assert manifest_path == str(package_dir / "package.json")

    def test_not_exported_wins_over_not_found(self, project, resolver):
        project.functions.mkdir()
        plugins = project.root / ".funcpack" / "plugins" / "node_modules"
        project.add_package(
            "hidden",
            {"lib/main.js": "", "lib/private.js": ""},
            base=".funcpack/plugins/node_modules",
            exports={".": "./lib/main.js"},
        )

        with pytest.raises(PackagePathNotExportedError):
            resolver.resolve_path("hidden/lib/private.js", [str(project.functions), str(plugins)])

    def test_resolve_module_entry_returns_none(self, project):
        assert resolve_module_entry("missing-thing", [str(project.root)]) is None

    def test_first_error_is_raised(self, project, resolver):
        other = project.root / "other"
        other.mkdir()

        with pytest.raises(NodeModuleNotFoundError) as exc_info:
            resolver.resolve_path("missing-thing", [str(project.root), str(other)])

        assert exc_info.value.search_dirs == (str(project.root),)


class TestExportsMap:
    def test_sugar_string(self):
        assert resolve_exports("/pkg", "./main.js", ".") == os.path.normpath("/pkg/main.js")

    def test_conditions_prefer_require(self):
        exports = {".": {"import": "./esm/index.mjs", "require": "./cjs/index.js"}}

        assert resolve_exports("/pkg", exports, ".") == os.path.normpath("/pkg/cjs/index.js")

    def test_nested_conditions(self):
        exports = {".": {"node": {"import": "./a.mjs", "default": "./a.js"}, "default": "./browser.js"}}

        assert resolve_exports("/pkg", exports, ".") == os.path.normpath("/pkg/a.js")

    def test_top_level_conditions_without_subpaths(self):
        assert resolve_exports("/pkg", {"import": "./a.mjs", "default": "./a.js"}, ".") == os.path.normpath(
            "/pkg/a.js"
        )

    def test_star_pattern(self):
        exports = {"./features/*": "./src/features/*.js", "./features/internal/*": None}

        assert resolve_exports("/pkg", exports, "./features/x") == os.path.normpath("/pkg/src/features/x.js")

    def test_longest_pattern_wins(self):
        exports = {"./features/*": "./src/features/*.js", "./features/internal/*": None}

        with pytest.raises(PackagePathNotExportedError):
            resolve_exports("/pkg", exports, "./features/internal/y")

    def test_legacy_folder_mapping(self):
        exports = {".": "./index.js", "./lib/": "./dist/lib/"}

        assert resolve_exports("/pkg", exports, "./lib/a.js") == os.path.normpath("/pkg/dist/lib/a.js")

    def test_unlisted_subpath(self):
        with pytest.raises(PackagePathNotExportedError) as exc_info:
            resolve_exports("/pkg", {".": "./index.js"}, "./package.json")

        assert exc_info.value.subpath == "./package.json"

    def test_targets_must_be_relative(self):
        with pytest.raises(PackagePathNotExportedError):
            resolve_exports("/pkg", {".": "../outside.js"}, ".")


def test_node_modules_paths_skip_node_modules_dirs(tmp_path):
    basedir = tmp_path / "node_modules" / "pkg"

    paths = node_modules_paths(str(basedir))

    assert paths[0] == str(basedir / "node_modules")
    assert str(tmp_path / "node_modules" / "node_modules") not in paths
    assert str(tmp_path / "node_modules") in paths

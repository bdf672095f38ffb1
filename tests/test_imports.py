"""Tests for static import extraction."""

from funcpack.node_dependencies.imports import ImportList, list_imports, parse_imports

MIXED_MODULE = b"""
import x from './x'
import 'side-effect'
export * from './y.js'
const fs = require('fs')
const z = require('z')
async function load() {
  return import('lazy')
}
const again = require('./x')
"""


def test_specifiers_in_source_order():
    found = parse_imports(MIXED_MODULE)

    assert found.imports == ["./x", "side-effect", "./y.js", "z", "lazy"]
    assert found.unresolved == []


def test_builtins_are_filtered():
    found = parse_imports(b"require('path')\nimport { readFile } from 'node:fs/promises'\nrequire('pathe')\n")

    assert found.imports == ["pathe"]


def test_computed_specifiers_are_reported():
    found = parse_imports(b"const name = 'a'\nrequire(name)\nimport(`./pages/${page}`)\n")

    assert found.imports == []
    assert found.unresolved == ["require(name)", "import(`./pages/${page}`)"]


def test_template_literal_without_substitution():
    assert parse_imports(b"require(`./static`)\n").imports == ["./static"]


def test_other_calls_are_ignored():
    found = parse_imports(b"loader.require('x')\nmyRequire('y')\nrequire()\n")

    assert found == ImportList()


def test_typescript_type_imports_are_skipped():
    source = b"""
import type { Handler } from './types'
import { run } from './run'
import legacy = require('legacy-lib')
"""

    found = parse_imports(source, "typescript")

    assert found.imports == ["./run", "legacy-lib"]


def test_list_imports_picks_grammar_from_extension(project):
    path = project.add_function("handler.ts", "import type { A } from './a'\nimport { b } from './b'\n")

    assert list_imports(str(path)).imports == ["./b"]


def test_list_imports_of_non_js_file(project):
    path = project.add_function("data.json", '{"require": "x"}')

    assert list_imports(str(path)) == ImportList()

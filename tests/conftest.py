"""Pytest configuration and fixtures."""
import json
from pathlib import Path

import pytest


class FakeProject:
    """A Node.js project laid out on disk: package.json, functions, node_modules."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def functions(self) -> Path:
        return self.root / "functions"

    def write(self, relative: str, content: str = "") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_json(self, relative: str, data) -> Path:
        return self.write(relative, json.dumps(data, indent=2))

    def add_package(self, name: str, files: dict[str, str] | None = None, base: str = "node_modules", **manifest) -> Path:
        """Install a package under `base` with the given files and manifest fields."""
        package_dir = self.root / base / name
        self.write_json(f"{base}/{name}/package.json", {"name": name, "version": "1.0.0", **manifest})
        for relative, content in (files if files is not None else {"index.js": "module.exports = 1\n"}).items():
            self.write(f"{base}/{name}/{relative}", content)
        return package_dir

    def add_function(self, name: str, content: str) -> Path:
        return self.write(f"functions/{name}", content)


@pytest.fixture
def project(tmp_path):
    """Empty project with a root package.json."""
    fake = FakeProject(tmp_path / "project")
    fake.write_json("package.json", {"name": "fixture-project", "version": "1.0.0"})
    return fake


@pytest.fixture
def left_pad_project(project):
    """fn.js -> ./a.js -> left-pad, the canonical walk."""
    project.add_function("fn.js", "const a = require('./a')\nmodule.exports.handler = a\n")
    project.add_function("a.js", "const leftPad = require('left-pad')\nmodule.exports = leftPad\n")
    project.add_package(
        "left-pad",
        {"index.js": "module.exports = function leftPad() {}\n", "README.md": "# left-pad\n"},
    )
    return project

"""Exception taxonomy for funcpack."""

from collections.abc import Sequence


class FuncpackError(Exception):
    """Base class for every error raised by funcpack itself."""


class ManifestParseError(FuncpackError):
    """A package.json exists but is not valid JSON (or not a JSON object)."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} is invalid JSON: {reason}")


class NodeModuleNotFoundError(FuncpackError, ModuleNotFoundError):
    """A required module specifier could not be resolved from any search directory."""

    code = "MODULE_NOT_FOUND"

    def __init__(
        self,
        specifier: str,
        search_dirs: Sequence[str] = (),
        entry_file: str | None = None,
    ):
        self.specifier = specifier
        self.search_dirs = tuple(search_dirs)
        self.entry_file = entry_file

        message = f"Cannot find module '{specifier}'"
        if self.search_dirs:
            message += f" from '{self.search_dirs[0]}'"
        if entry_file is not None:
            message = f'In file "{entry_file}"\n{message}'

        super().__init__(message, name=specifier)

    def with_entry_file(self, entry_file: str) -> "NodeModuleNotFoundError":
        """Return a copy of this error attributed to the function's entry file."""
        return NodeModuleNotFoundError(self.specifier, self.search_dirs, entry_file=entry_file)


class PackagePathNotExportedError(FuncpackError):
    """A package's `exports` map does not expose the requested subpath."""

    def __init__(self, package_dir: str, subpath: str):
        self.package_dir = package_dir
        self.subpath = subpath
        super().__init__(f"Package subpath '{subpath}' is not defined by \"exports\" in {package_dir}")


class InvalidArchiveFormatError(FuncpackError, ValueError):
    """The requested archive format is not one of the supported formats."""

    def __init__(self, archive_format: str):
        self.archive_format = archive_format
        super().__init__(f"Invalid archive format: {archive_format}")

"""Data model for discovered functions and their packaging results."""

from dataclasses import asdict, dataclass, field
from typing import Any

from funcpack.function_config import FunctionConfig


@dataclass(frozen=True)
class FunctionSource:
    """A function found in a functions directory. Never mutated after discovery."""

    name: str
    src_path: str
    src_dir: str
    main_file: str
    filename: str
    extension: str
    is_directory: bool


@dataclass
class FunctionResult:
    """Outcome of packaging one function."""

    name: str
    main_file: str
    archive_format: str
    path: str | None = None
    size: int | None = None
    sha256: str | None = None
    entry_filename: str | None = None
    config: FunctionConfig = field(default_factory=FunctionConfig)
    inputs: list[str] = field(default_factory=list)
    native_modules: list[str] = field(default_factory=list)
    external_modules: list[str] = field(default_factory=list)
    unresolved_imports: list[str] = field(default_factory=list)
    duration_ms: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Serializable view without empty values."""
        return {key: value for key, value in asdict(self).items() if value not in (None, [], {})}

"""Byte-stable ZIP archives and plain directory copies.

Entries always carry the same timestamp and keep the permission bits of the
source file, so two builds over identical inputs produce identical bytes.
Symbolic links are stored as links.
"""

import os
import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path

from funcpack.utils.constants import FIXED_ZIP_DATE_TIME
from funcpack.utils.helpers import to_posix_path

# ZipInfo.create_system value for Unix, required for mode bits to be honoured
UNIX_SYSTEM = 3

CONTENT_FILE_MODE = stat.S_IFREG | 0o644


@dataclass(frozen=True)
class ArchiveEntry:
    """One file to write. Exactly one of `source_path` and `content` is set."""

    dest_path: str
    source_path: str | None = None
    content: bytes | None = None


def _zip_info(name: str, mode: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(to_posix_path(name), date_time=FIXED_ZIP_DATE_TIME)
    info.create_system = UNIX_SYSTEM
    info.external_attr = (mode & 0xFFFF) << 16
    info.compress_type = zipfile.ZIP_DEFLATED
    return info


class ZipArchive:
    """Sequential writer over zipfile.ZipFile. Use as a context manager."""

    def __init__(self, dest_path: str | Path, compress_level: int = 9):
        self.dest_path = str(dest_path)
        self.compress_level = compress_level
        self._zip = zipfile.ZipFile(
            self.dest_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compress_level
        )

    def add_file(self, source_path: str, name: str) -> None:
        st = os.lstat(source_path)

        if stat.S_ISLNK(st.st_mode):
            data = os.readlink(source_path).encode("utf-8")
        else:
            with open(source_path, "rb") as f:
                data = f.read()

        self._zip.writestr(_zip_info(name, st.st_mode), data, compresslevel=self.compress_level)

    def add_content(self, content: bytes | str, name: str) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._zip.writestr(_zip_info(name, CONTENT_FILE_MODE), content, compresslevel=self.compress_level)

    def add_entry(self, entry: ArchiveEntry) -> None:
        if entry.content is not None:
            self.add_content(entry.content, entry.dest_path)
        else:
            self.add_file(entry.source_path, entry.dest_path)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ZipArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def write_zip(entries: list[ArchiveEntry], dest_path: str, compress_level: int = 9) -> str:
    """Write `entries` to `dest_path` in the given order. A failed write leaves no archive behind."""
    os.makedirs(os.path.dirname(os.path.abspath(dest_path)), exist_ok=True)

    try:
        with ZipArchive(dest_path, compress_level) as archive:
            for entry in entries:
                archive.add_entry(entry)
    except BaseException:
        if os.path.exists(dest_path):
            os.remove(dest_path)
        raise

    return dest_path


def copy_to_directory(entries: list[ArchiveEntry], dest_dir: str) -> str:
    """Recreate `dest_dir` and copy `entries` into it.

    Permission bits are kept, timestamps are not. Symlinks are recreated.
    """
    shutil.rmtree(dest_dir, ignore_errors=True)
    os.makedirs(dest_dir)

    for entry in entries:
        target = os.path.join(dest_dir, *to_posix_path(entry.dest_path).split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)

        if entry.content is not None:
            with open(target, "wb") as f:
                f.write(entry.content)
        elif os.path.islink(entry.source_path):
            os.symlink(os.readlink(entry.source_path), target)
        else:
            shutil.copyfile(entry.source_path, target)
            shutil.copymode(entry.source_path, target)

    return dest_dir

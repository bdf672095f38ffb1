"""Tests for byte-stable archive writing."""

import os
import stat
import zipfile

import pytest

from funcpack.archive import ArchiveEntry, copy_to_directory, write_zip
from funcpack.utils.constants import FIXED_ZIP_DATE_TIME
from funcpack.utils.helpers import compute_file_hash


@pytest.fixture
def sources(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.js").write_text("module.exports = 1\n")
    (src / "bin.js").write_text("#!/usr/bin/env node\n")
    os.chmod(src / "bin.js", 0o755)
    os.symlink("index.js", src / "alias.js")
    return src


def entries_for(src):
    return [
        ArchiveEntry(dest_path="entry.js", content=b"module.exports = require('./index.js')"),
        ArchiveEntry(dest_path="alias.js", source_path=str(src / "alias.js")),
        ArchiveEntry(dest_path="bin.js", source_path=str(src / "bin.js")),
        ArchiveEntry(dest_path="index.js", source_path=str(src / "index.js")),
    ]


def test_identical_inputs_give_identical_bytes(sources, tmp_path):
    first = write_zip(entries_for(sources), str(tmp_path / "one" / "fn.zip"))
    os.utime(sources / "index.js", (0, 0))
    second = write_zip(entries_for(sources), str(tmp_path / "two" / "fn.zip"))

    assert compute_file_hash(first) == compute_file_hash(second)


def test_entries_keep_write_order_and_fixed_time(sources, tmp_path):
    path = write_zip(entries_for(sources), str(tmp_path / "fn.zip"))

    with zipfile.ZipFile(path) as archive:
        infos = archive.infolist()

    assert [info.filename for info in infos] == ["entry.js", "alias.js", "bin.js", "index.js"]
    assert all(info.date_time == FIXED_ZIP_DATE_TIME for info in infos)
    assert all(info.create_system == 3 for info in infos)


def test_permission_bits_are_kept(sources, tmp_path):
    path = write_zip(entries_for(sources), str(tmp_path / "fn.zip"))

    with zipfile.ZipFile(path) as archive:
        bin_mode = archive.getinfo("bin.js").external_attr >> 16
        content_mode = archive.getinfo("entry.js").external_attr >> 16

    assert stat.S_IMODE(bin_mode) == 0o755
    assert stat.S_IMODE(content_mode) == 0o644
    assert stat.S_ISREG(content_mode)


def test_symlinks_are_stored_as_links(sources, tmp_path):
    path = write_zip(entries_for(sources), str(tmp_path / "fn.zip"))

    with zipfile.ZipFile(path) as archive:
        mode = archive.getinfo("alias.js").external_attr >> 16
        target = archive.read("alias.js")

    assert stat.S_ISLNK(mode)
    assert target == b"index.js"


def test_failed_write_leaves_no_archive(tmp_path):
    dest = tmp_path / "fn.zip"

    with pytest.raises(FileNotFoundError):
        write_zip([ArchiveEntry(dest_path="gone.js", source_path=str(tmp_path / "gone.js"))], str(dest))

    assert not dest.exists()


def test_copy_to_directory(sources, tmp_path):
    dest = tmp_path / "out" / "fn"
    dest.mkdir(parents=True)
    (dest / "stale.js").write_text("old")

    copy_to_directory(entries_for(sources) + [ArchiveEntry("lib/deep.js", content=b"x")], str(dest))

    assert sorted(os.listdir(dest)) == ["alias.js", "bin.js", "entry.js", "index.js", "lib"]
    assert os.readlink(dest / "alias.js") == "index.js"
    assert stat.S_IMODE(os.stat(dest / "bin.js").st_mode) == 0o755
    assert (dest / "entry.js").read_bytes() == b"module.exports = require('./index.js')"
    assert (dest / "lib" / "deep.js").read_text() == "x"

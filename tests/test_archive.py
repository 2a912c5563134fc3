"""Tests for pack()/unpack() and archive layout validation."""

import errno
import os
import shutil
import tarfile
from unittest.mock import patch

import pytest

from db_dock.backup.archive import locate_backup_dir, pack, unpack
from db_dock.errors import ArchiveFormatError, InvalidArchiveError


@pytest.fixture
def work_dir(tmp_path):
    """A backup working directory with one schema and two data artifacts."""
    d = tmp_path / "out" / "mysql_backup_2026.10.18.11.49.03"
    d.mkdir(parents=True)
    (d / "shop_schema.sql").write_text("CREATE TABLE users (id INT);\n")
    (d / "shop_users.sql").write_text("INSERT INTO users VALUES (1);\n")
    (d / "shop_orders.sql").write_bytes(b"INSERT INTO orders VALUES (1, '\xc3\xa9');\n")
    return d


def _make_tar(path, entries):
    """Build a tar.gz from {arcname: bytes | None}; None means directory."""
    src = path.parent / "src"
    src.mkdir()
    with tarfile.open(path, "w:gz") as tf:
        for arcname, content in entries.items():
            target = src / arcname
            if content is None:
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
            tf.add(target, arcname=arcname, recursive=False)
    return path


class TestPack:
    def test_archive_name_and_location(self, work_dir):
        archive = pack(work_dir)
        assert archive == work_dir.parent / "mysql_backup_2026.10.18.11.49.03.tar.gz"
        assert archive.is_file()

    def test_sole_top_level_entry(self, work_dir):
        archive = pack(work_dir)
        with tarfile.open(archive) as tf:
            tops = {name.split("/")[0] for name in tf.getnames()}
        assert tops == {work_dir.name}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ArchiveFormatError):
            pack(tmp_path / "nope")


class TestRoundTrip:
    def test_same_names_and_bytes(self, work_dir, tmp_path):
        archive = pack(work_dir)
        dest = tmp_path / "extract"
        dest.mkdir()
        top = unpack(archive, dest)

        original = {p.name: p.read_bytes() for p in work_dir.iterdir()}
        restored = {p.name: p.read_bytes() for p in top.iterdir()}
        assert restored == original

    def test_renamed_archive(self, work_dir, tmp_path):
        """The top-level directory is found by listing, not by name."""
        archive = pack(work_dir)
        renamed = archive.rename(tmp_path / "nightly.tar.gz")
        dest = tmp_path / "extract"
        dest.mkdir()
        top = unpack(renamed, dest)
        assert top.name == work_dir.name

    def test_default_destination_is_temp_dir(self, work_dir):
        archive = pack(work_dir)
        top = unpack(archive)
        try:
            assert top.parent.name.startswith("mysql_restore_")
            assert (top / "shop_schema.sql").is_file()
        finally:
            shutil.rmtree(top.parent)


class TestInvalidArchives:
    def _extract_dir(self, tmp_path):
        dest = tmp_path / "extract"
        dest.mkdir()
        return dest

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchiveFormatError, match="not found"):
            unpack(tmp_path / "missing.tar.gz", tmp_path)

    def test_not_a_tarball(self, tmp_path):
        bogus = tmp_path / "bogus.tar.gz"
        bogus.write_text("definitely not gzip")
        with pytest.raises(ArchiveFormatError):
            unpack(bogus, self._extract_dir(tmp_path))

    def test_no_top_level_directory(self, tmp_path):
        archive = _make_tar(tmp_path / "flat.tar.gz", {"shop_schema.sql": b"--"})
        with pytest.raises(ArchiveFormatError, match="locate"):
            unpack(archive, self._extract_dir(tmp_path))

    def test_multiple_top_level_directories(self, tmp_path):
        archive = _make_tar(
            tmp_path / "two.tar.gz",
            {"a/shop_schema.sql": b"--", "b/logs_schema.sql": b"--"},
        )
        with pytest.raises(ArchiveFormatError, match="multiple"):
            unpack(archive, self._extract_dir(tmp_path))

    def test_no_schema_artifact(self, tmp_path):
        archive = _make_tar(tmp_path / "data.tar.gz", {"backup/shop_users.sql": b"--"})
        with pytest.raises(InvalidArchiveError, match="_schema.sql"):
            unpack(archive, self._extract_dir(tmp_path))

    def test_locate_backup_dir_direct(self, tmp_path):
        top = tmp_path / "whatever"
        top.mkdir()
        (top / "x_schema.sql").write_text("--")
        assert locate_backup_dir(tmp_path) == top

    def test_truncated_archive(self, work_dir, tmp_path):
        (work_dir / "shop_big.sql").write_bytes(os.urandom(256 * 1024))
        archive = pack(work_dir)
        data = archive.read_bytes()
        cut = tmp_path / "cut.tar.gz"
        cut.write_bytes(data[: len(data) // 2])

        with pytest.raises(ArchiveFormatError, match="Cannot extract"):
            unpack(cut, self._extract_dir(tmp_path))


class TestPackFailures:
    def test_write_error_becomes_archive_error(self, work_dir):
        no_space = OSError(errno.ENOSPC, "No space left on device")
        with patch("db_dock.backup.archive.tarfile.open", side_effect=no_space):
            with pytest.raises(ArchiveFormatError, match="Cannot write archive"):
                pack(work_dir)
        assert not (work_dir.parent / f"{work_dir.name}.tar.gz").exists()

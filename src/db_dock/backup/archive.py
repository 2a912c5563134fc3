"""Packing a backup directory into ``.tar.gz`` and back.

The archive holds exactly one top-level directory.  Extraction finds it by
listing, never by name, since archives get renamed after creation.
"""

import logging
import tarfile
import tempfile
import zlib
from pathlib import Path

from db_dock.backup.artifacts import ARCHIVE_SUFFIX, SCHEMA_SUFFIX
from db_dock.errors import ArchiveFormatError

logger = logging.getLogger(__name__)


def pack(work_dir: Path) -> Path:
    """Compress ``work_dir`` into ``<parent>/<name>.tar.gz``.

    The archive's only top-level entry is ``work_dir.name``.  A partially
    written archive is removed on failure.

    Returns:
        Path of the created archive.

    Raises:
        ArchiveFormatError: If ``work_dir`` is not a directory or the
            archive cannot be written.
    """
    work_dir = Path(work_dir)
    if not work_dir.is_dir():
        raise ArchiveFormatError(f"Not a directory: {work_dir}")

    archive_path = work_dir.parent / f"{work_dir.name}{ARCHIVE_SUFFIX}"
    logger.info("Creating archive: %s", archive_path)
    try:
        with tarfile.open(archive_path, "w:gz") as tf:
            tf.add(work_dir, arcname=work_dir.name)
    except OSError as e:
        archive_path.unlink(missing_ok=True)
        raise ArchiveFormatError(f"Cannot write archive {archive_path}: {e}") from e
    except BaseException:
        archive_path.unlink(missing_ok=True)
        raise
    return archive_path


def locate_backup_dir(root: Path) -> Path:
    """Return the single top-level directory under ``root``.

    Raises:
        ArchiveFormatError: If there are zero or several top-level
            directories, or no ``*_schema.sql`` anywhere inside.
    """
    dirs = sorted(p for p in root.iterdir() if p.is_dir())
    if not dirs:
        raise ArchiveFormatError("Could not locate extracted directory inside archive")
    if len(dirs) > 1:
        names = ", ".join(p.name for p in dirs)
        raise ArchiveFormatError(f"Archive has multiple top-level directories: {names}")

    top = dirs[0]
    if not any(p.is_file() for p in top.rglob(f"*{SCHEMA_SUFFIX}")):
        raise ArchiveFormatError(
            f"No *{SCHEMA_SUFFIX} files found in {top.name}. Is this a valid backup?"
        )
    return top


def unpack(archive_path: Path, dest: Path | None = None) -> Path:
    """Extract ``archive_path`` and return its top-level directory.

    Args:
        archive_path: A ``.tar.gz`` produced by ``pack`` (any name).
        dest: Extraction root.  Defaults to a new ``mysql_restore_*``
            temporary directory which the caller owns.

    Raises:
        ArchiveFormatError: If the file is missing, unreadable, or not laid
            out as a backup.
    """
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise ArchiveFormatError(f"Backup file not found: {archive_path}")

    if dest is None:
        dest = Path(tempfile.mkdtemp(prefix="mysql_restore_"))

    logger.info("Extracting %s to %s", archive_path, dest)
    try:
        with tarfile.open(archive_path, "r:*") as tf:
            tf.extractall(dest, filter="data")
    except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
        raise ArchiveFormatError(f"Cannot extract {archive_path}: {e}") from e

    return locate_backup_dir(dest)

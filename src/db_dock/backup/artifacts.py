"""Artifact and archive naming.

File names are the only manifest inside a backup::

    mysql_backup_2026.10.18.11.49.03/
        shop_schema.sql      # DDL: tables, routines, triggers, events
        shop_users.sql       # rows of shop.users
        shop_orders.sql      # rows of shop.orders

A data artifact must therefore never end in ``_schema.sql``; the dump
refuses such tables (see ``check_table_names``).
"""

from datetime import datetime
from pathlib import Path

from db_dock.errors import ArtifactCollisionError

ARCHIVE_PREFIX = "mysql_backup_"
ARCHIVE_SUFFIX = ".tar.gz"
TIMESTAMP_FORMAT = "%Y.%m.%d.%H.%M.%S"
SCHEMA_SUFFIX = "_schema.sql"
SQL_SUFFIX = ".sql"


def backup_dir_name(now: datetime) -> str:
    """``mysql_backup_<Y.m.d.H.M.S>`` for the given moment."""
    return f"{ARCHIVE_PREFIX}{now.strftime(TIMESTAMP_FORMAT)}"


def schema_artifact_name(database: str) -> str:
    return f"{database}{SCHEMA_SUFFIX}"


def data_artifact_name(database: str, table: str) -> str:
    return f"{database}_{table}{SQL_SUFFIX}"


def is_schema_artifact(name: str) -> bool:
    return name.endswith(SCHEMA_SUFFIX)


def database_from_schema_artifact(name: str) -> str:
    return name[: -len(SCHEMA_SUFFIX)]


def table_from_data_artifact(name: str, database: str) -> str:
    return name[len(database) + 1 : -len(SQL_SUFFIX)]


def check_table_names(database: str, tables: list[str]) -> None:
    """Refuse tables whose data artifact would read as a schema artifact.

    Raises:
        ArtifactCollisionError: For a table named ``schema`` or ``*_schema``.
    """
    clashing = [t for t in tables if is_schema_artifact(data_artifact_name(database, t))]
    if clashing:
        raise ArtifactCollisionError(
            f"Cannot back up {database}: table(s) {', '.join(clashing)} "
            f"would collide with the {SCHEMA_SUFFIX} naming"
        )


def find_schema_artifacts(directory: Path) -> list[Path]:
    """Schema artifacts directly under ``directory``, sorted by database name."""
    found = [p for p in directory.iterdir() if p.is_file() and is_schema_artifact(p.name)]
    return sorted(found, key=lambda p: database_from_schema_artifact(p.name))


def find_data_artifacts(
    directory: Path,
    database: str,
    archive_databases: list[str],
) -> list[Path]:
    """Data artifacts belonging to ``database``, sorted by file name.

    A file is attributed to the archive database with the longest matching
    ``<name>_`` prefix, so ``shop`` does not pick up ``shop_archive_*.sql``
    when ``shop_archive`` is also in the archive.

    Args:
        directory: Extracted backup directory.
        database: Database whose artifacts are wanted.
        archive_databases: Every database with a schema artifact in
            ``directory``.
    """
    prefix = f"{database}_"
    longer = [
        f"{other}_" for other in archive_databases
        if other != database and other.startswith(prefix)
    ]

    result = []
    for path in sorted(directory.iterdir()):
        name = path.name
        if not path.is_file() or not name.startswith(prefix):
            continue
        if not name.endswith(SQL_SUFFIX) or is_schema_artifact(name):
            continue
        if any(name.startswith(p) for p in longer):
            continue
        result.append(path)
    return result

"""Backup: per-database schema dump plus bounded-parallel table dumps.

Databases are processed strictly one after another.  Within a database the
schema artifact is written first, then one data artifact per table with at
most ``concurrency`` exports running at once.  The first failing export
cancels the rest and aborts the run.

Usage:
    from db_dock.backup.dump import run_backup

    result = await run_backup(client, settings, databases="shop,logs", jobs=4)
    print(result.archive_path)
"""

import asyncio
import logging
import shutil
from datetime import datetime
from pathlib import Path

from db_dock.adapters.base import MySQLClient
from db_dock.backup.archive import pack
from db_dock.backup.artifacts import (
    backup_dir_name,
    check_table_names,
    data_artifact_name,
    schema_artifact_name,
)
from db_dock.backup.models import BackupResult
from db_dock.backup.selection import normalize, resolve_databases
from db_dock.config.models import DockSettings
from db_dock.errors import ConfigurationError

logger = logging.getLogger(__name__)


async def dump_database(
    client: MySQLClient,
    database: str,
    out_dir: Path,
    concurrency: int = 1,
) -> list[Path]:
    """Dump one database into ``out_dir``.

    Writes ``<db>_schema.sql`` always, then ``<db>_<table>.sql`` for every
    table.  The dispatcher waits for a free slot before starting each
    export and returns only once all of them have finished.

    Args:
        client: Client bound to the located target.
        database: Database to dump.
        out_dir: Working directory of this run.
        concurrency: Maximum simultaneous table exports (1 = sequential).

    Returns:
        Paths of the data artifacts written (empty for a table-less
        database).

    Raises:
        ConfigurationError: If ``concurrency`` is below 1.
        ArtifactCollisionError: If a table name clashes with the schema
            artifact naming.
        ExternalToolError: If any export fails.
    """
    if concurrency < 1:
        raise ConfigurationError(f"concurrency must be >= 1, got {concurrency}")

    logger.info("Backing up database: %s", database)
    await client.dump_schema(database, out_dir / schema_artifact_name(database))

    tables = await client.list_tables(database)
    if not tables:
        logger.debug("   (no tables)")
        return []
    check_table_names(database, tables)

    slots = asyncio.Semaphore(concurrency)
    written: list[Path] = []

    async def _export(table: str, dest: Path) -> None:
        try:
            await client.dump_table(database, table, dest)
        finally:
            slots.release()

    try:
        async with asyncio.TaskGroup() as tg:
            for table in tables:
                await slots.acquire()
                logger.debug("   • %s.%s", database, table)
                dest = out_dir / data_artifact_name(database, table)
                tg.create_task(_export(table, dest))
                written.append(dest)
    except ExceptionGroup as eg:
        # Surface the first failure itself, not the group
        raise eg.exceptions[0] from None

    return written


async def dump_databases(
    client: MySQLClient,
    databases: list[str],
    out_dir: Path,
    concurrency: int = 1,
) -> dict[str, int]:
    """Dump ``databases`` in order; returns table count per database."""
    counts: dict[str, int] = {}
    for database in databases:
        written = await dump_database(client, database, out_dir, concurrency)
        counts[database] = len(written)
    return counts


async def run_backup(
    client: MySQLClient,
    settings: DockSettings,
    databases: str = "",
    include_performance_db: bool = False,
    out_dir: Path | None = None,
    jobs: int | None = None,
    now: datetime | None = None,
) -> BackupResult:
    """Select, dump and archive.

    The working directory ``<out_dir>/mysql_backup_<timestamp>/`` is removed
    once packed, and also when anything fails.

    Args:
        client: Client bound to the located target.
        settings: Supplies the default exclusions, output root and job count.
        databases: Explicit comma list (``--db``); empty means "all".
        include_performance_db: Back up ``performance_db`` with "all".
        out_dir: Output root; defaults to ``settings.backup_root``.
        jobs: Parallel table exports; defaults to ``settings.jobs``.
        now: Timestamp for the archive name; defaults to the current time.

    Returns:
        ``BackupResult`` with the archive path and per-database table counts.

    Raises:
        ConfigurationError: If the working directory cannot be created.
        EmptySelectionError: If no database is selected.
        ExternalToolError: If any listing or export fails.
        ArchiveFormatError: If the archive cannot be written.
    """
    out_dir = Path(out_dir) if out_dir is not None else settings.backup_root
    jobs = jobs if jobs is not None else settings.jobs

    explicit = normalize(databases)
    live = [] if explicit else await client.list_databases()
    selected = resolve_databases(explicit, settings.exclude_dbs, include_performance_db, live)
    for db in live:
        if db not in selected:
            logger.debug("⏭ Skipping %s", db)

    if out_dir.exists() and not out_dir.is_dir():
        raise ConfigurationError(f"Output path is not a directory: {out_dir}")
    work_dir = out_dir / backup_dir_name(now or datetime.now())
    try:
        work_dir.mkdir(parents=True)
    except FileExistsError as e:
        raise ConfigurationError(f"Backup directory already exists: {work_dir}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot create backup directory {work_dir}: {e}") from e
    logger.debug("Backup directory: %s", work_dir)

    try:
        counts = await dump_databases(client, sorted(selected), work_dir, jobs)
        archive_path = pack(work_dir)
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    logger.info("Backup complete: %s", archive_path)
    return BackupResult(
        archive_path=archive_path,
        databases=sorted(selected),
        table_counts=counts,
    )

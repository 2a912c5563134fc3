"""Restore: replay an extracted backup directory into the target.

Per database, strictly in order: create-if-absent, load the schema
artifact, then load the accepted data artifacts with foreign key checks
relaxed.  Databases are replayed one at a time, sorted by name.

Usage:
    from db_dock.backup.restore import run_restore
    from db_dock.backup.selection import resolve_restore_scope

    scope = resolve_restore_scope(only_table="shop.users")
    summary = await run_restore(client, Path("mysql_backup_2026.tar.gz"), scope)
"""

import logging
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

from db_dock.adapters.base import MySQLClient
from db_dock.backup.archive import unpack
from db_dock.backup.artifacts import (
    database_from_schema_artifact,
    find_data_artifacts,
    find_schema_artifacts,
    table_from_data_artifact,
)
from db_dock.backup.models import RestoreScope, RestoreSummary, SkippedItem
from db_dock.errors import ArchiveFormatError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def foreign_key_checks_relaxed(client: MySQLClient, database: str):
    """Yield a loader for ``database`` that runs with FK checks off.

    ``FOREIGN_KEY_CHECKS`` is a session variable and every load is its own
    ``mysql`` session, so the loader switches the checks off at the start
    of each session (``load_file(..., foreign_key_checks=False)``) and they
    end with it.  No other session is affected, and the loader refuses to
    run once the block has exited.

    Usage:
        async with foreign_key_checks_relaxed(client, "shop") as load:
            await load(Path("shop_orders.sql"))
    """
    active = True

    async def load(path: Path) -> None:
        if not active:
            raise RuntimeError("Relaxed foreign key loader used after its block exited")
        await client.load_file(database, path, foreign_key_checks=False)

    try:
        yield load
    finally:
        active = False


async def restore_database(
    client: MySQLClient,
    database: str,
    schema_path: Path,
    data_paths: list[Path],
    scope: RestoreScope,
    summary: RestoreSummary,
) -> None:
    """Restore one database.  ``summary`` is updated in place."""
    logger.info("Ensuring database exists: `%s`", database)
    await client.create_database(database)

    logger.info("Restoring schema for `%s`", database)
    await client.load_file(database, schema_path)

    logger.info("Importing tables for `%s` (foreign key checks disabled)", database)
    async with foreign_key_checks_relaxed(client, database) as load:
        for path in data_paths:
            table = table_from_data_artifact(path.name, database)
            fq = f"{database}.{table}"

            reason = scope.table_skip_reason(database, table)
            if reason is not None:
                logger.info("   ⏭ (%s) %s", reason, fq)
                summary.skipped_tables.append(SkippedItem(name=fq, reason=reason))
                continue

            logger.debug("   • Importing %s", fq)
            await load(path)
            summary.loaded_tables.append(fq)

    summary.restored_databases.append(database)
    logger.info("Finished restoring `%s`", database)


async def restore_archive(
    client: MySQLClient,
    extracted_dir: Path,
    scope: RestoreScope,
) -> RestoreSummary:
    """Replay every accepted database found in ``extracted_dir``.

    Args:
        client: Client bound to the located target.
        extracted_dir: Top-level directory of an extracted backup.
        scope: Database and table filters.

    Returns:
        ``RestoreSummary`` of what was restored and skipped.

    Raises:
        ArchiveFormatError: If the directory holds no schema artifacts.
        ExternalToolError: If any create or load fails; already restored
            databases stay restored.
    """
    schemas = find_schema_artifacts(extracted_dir)
    if not schemas:
        raise ArchiveFormatError("No *_schema.sql files found. Is this a valid backup?")

    archive_databases = [database_from_schema_artifact(p.name) for p in schemas]
    logger.info("Databases present in archive: %s", ", ".join(archive_databases))

    summary = RestoreSummary()
    for schema_path, database in zip(schemas, archive_databases):
        reason = scope.database_skip_reason(database)
        if reason is not None:
            logger.info("⏭ (%s) Skipping DB %s", reason, database)
            summary.skipped_databases.append(SkippedItem(name=database, reason=reason))
            continue

        data_paths = find_data_artifacts(extracted_dir, database, archive_databases)
        await restore_database(client, database, schema_path, data_paths, scope, summary)

    logger.info("Restore completed")
    return summary


async def run_restore(
    client: MySQLClient,
    archive_path: Path,
    scope: RestoreScope,
) -> RestoreSummary:
    """Extract ``archive_path`` to a temporary directory and restore it.

    The archive is validated before the target is touched; the temporary
    directory is removed afterwards.
    """
    with tempfile.TemporaryDirectory(prefix="mysql_restore_") as tmp:
        top = unpack(Path(archive_path), Path(tmp))
        return await restore_archive(client, top, scope)

"""Shared command bodies for the argparse CLI and the interactive menu.

Each ``execute_*`` function runs one operation end to end, prints a rich
summary and returns an exit code.  ``DbDockError`` propagates to
``db_dock.cli.main``.
"""

import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from db_dock.adapters.base import MySQLClient
from db_dock.backup.dump import run_backup
from db_dock.backup.models import BackupResult, RestoreScope, RestoreSummary
from db_dock.backup.restore import run_restore
from db_dock.config.models import DockSettings
from db_dock.errors import ArchiveFormatError, ExternalToolError
from db_dock.factory import get_client

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich (DEBUG with ``-v``)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


# ============================================================================
# Reports
# ============================================================================


def print_backup_result(result: BackupResult) -> None:
    table = Table(title="Backup", show_header=True, header_style="bold")
    table.add_column("Database")
    table.add_column("Tables", justify="right")
    for db in result.databases:
        table.add_row(db, str(result.table_counts.get(db, 0)))
    console.print(table)
    console.print(
        f"[bold green]v[/bold green] Backup complete: "
        f"[bold cyan]{result.archive_path}[/bold cyan]"
    )


def print_restore_summary(summary: RestoreSummary) -> None:
    table = Table(title="Restore", show_header=True, header_style="bold")
    table.add_column("Item", style="dim")
    table.add_column("Status")

    for db in summary.restored_databases:
        table.add_row(db, "[green]restored[/green]")
    for item in summary.skipped_databases:
        table.add_row(item.name, f"[yellow]skipped ({item.reason})[/yellow]")
    for fq in summary.loaded_tables:
        table.add_row(fq, "[green]loaded[/green]")
    for item in summary.skipped_tables:
        table.add_row(item.name, f"[yellow]skipped ({item.reason})[/yellow]")

    console.print(table)
    console.print("[bold green]v[/bold green] Restore completed.")


# ============================================================================
# Operations
# ============================================================================


def execute_backup(
    settings: DockSettings,
    databases: str = "",
    include_performance_db: bool = False,
    out_dir: Path | None = None,
    jobs: int | None = None,
    client: MySQLClient | None = None,
) -> int:
    """Locate the target (unless ``client`` is given), back up, report."""
    if client is None:
        client = get_client(settings)
    logger.debug("Using container: %s", client.target.container_id)

    result = asyncio.run(
        run_backup(
            client,
            settings,
            databases=databases,
            include_performance_db=include_performance_db,
            out_dir=out_dir,
            jobs=jobs,
        )
    )
    print_backup_result(result)
    return 0


def execute_restore(
    settings: DockSettings,
    archive_path: Path,
    scope: RestoreScope,
    client: MySQLClient | None = None,
) -> int:
    """Check the archive, locate the target, restore, report."""
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise ArchiveFormatError(f"Backup file not found: {archive_path}")

    if client is None:
        client = get_client(settings)
    logger.debug("Using container: %s", client.target.container_id)

    try:
        summary = asyncio.run(run_restore(client, archive_path, scope))
    except ExternalToolError:
        logger.warning(
            "Restore aborted: databases processed so far are restored, "
            "the current one may be partially loaded."
        )
        raise

    print_restore_summary(summary)
    return 0

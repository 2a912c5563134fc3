"""Command-line interface for db-dock.

Usage:
    db-dock backup --all
    db-dock backup --db shop,logs --jobs 4 --out /srv/backups
    db-dock backup --all --include performance_db -v
    db-dock restore --file mysql_backup_2026.10.18.11.49.03.tar.gz
    db-dock restore --file backup.tar.gz --only-db shop --skip-table shop.audit
    db-dock --env-prefix PROD_ backup --all
    db-dock                       # interactive menu

Exit codes:
    0  success (or cancelled from the menu)
    1  any fatal error: no container, empty selection, invalid archive,
       tool failure, contradictory flags
"""

import argparse
import logging
import sys
from pathlib import Path

from db_dock.backup.selection import PERFORMANCE_DB, resolve_restore_scope
from db_dock.cli.commands import (
    err_console,
    execute_backup,
    execute_restore,
    setup_logging,
)
from db_dock.cli.interactive import run_interactive
from db_dock.config.loader import load_settings
from db_dock.config.models import DEFAULT_EXCLUDE_DBS, DockSettings
from db_dock.errors import ConfigurationError, DbDockError

logger = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> DockSettings:
    return load_settings(
        config_path=getattr(args, "config", None),
        env_prefix=getattr(args, "env_prefix", ""),
    )


# ============================================================================
# Commands
# ============================================================================


def cmd_backup(args: argparse.Namespace) -> int:
    """Handle backup command.

    Flags are checked before the settings are loaded or Docker is queried.

    Returns:
        0 on success.

    Raises:
        ConfigurationError: For ``--all`` with ``--db``, an unsupported
            ``--include`` value, or ``--jobs`` below 1.
    """
    if args.all and args.db:
        raise ConfigurationError("Use either --all or --db, not both.")
    if args.include is not None and args.include != PERFORMANCE_DB:
        raise ConfigurationError(
            f"--include only accepts {PERFORMANCE_DB}, got {args.include!r}"
        )
    if args.jobs is not None and args.jobs < 1:
        raise ConfigurationError(f"--jobs must be >= 1, got {args.jobs}")

    settings = _settings(args)
    return execute_backup(
        settings,
        databases=args.db or "",
        include_performance_db=args.include == PERFORMANCE_DB,
        out_dir=args.out,
        jobs=args.jobs,
    )


def cmd_restore(args: argparse.Namespace) -> int:
    """Handle restore command.

    Returns:
        0 on success.

    Raises:
        ConfigurationError: If ``--file`` is missing.
    """
    if not args.file:
        raise ConfigurationError("Use: restore --file /path/to/backup.tar.gz")

    scope = resolve_restore_scope(
        skip_db=args.skip_db,
        only_db=args.only_db,
        skip_table=args.skip_table,
        only_table=args.only_table,
    )
    settings = _settings(args)
    return execute_restore(settings, Path(args.file), scope)


def cmd_interactive(args: argparse.Namespace) -> int:
    """Run the interactive menu (no subcommand given)."""
    return run_interactive(_settings(args))


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-dock",
        description="Integrated MySQL backup & restore (Docker aware)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Schema files contain DDL (tables, routines, triggers, events).\n"
            "Table files are DATA ONLY (INSERTs), no CREATE TABLE or triggers.\n"
            f"Default excludes: {DEFAULT_EXCLUDE_DBS}\n"
            "Run without a command for the interactive menu."
        ),
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix PROD_ reads PROD_MYSQL_USER)"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="TOML file whose [mysql] table overrides environment settings",
    )
    parser.set_defaults(func=cmd_interactive, verbose=False)

    subparsers = parser.add_subparsers(dest="command")

    # backup command
    p_backup = subparsers.add_parser("backup", help="Back up databases to a .tar.gz")
    p_backup.add_argument(
        "--all",
        action="store_true",
        help="Backup all DBs except the default excluded list",
    )
    p_backup.add_argument(
        "--db",
        default="",
        help="Backup only these DBs (comma-separated)",
    )
    p_backup.add_argument(
        "--include",
        metavar=PERFORMANCE_DB,
        help=f"Include {PERFORMANCE_DB} in an --all backup",
    )
    p_backup.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory (default: $BACKUP_ROOT)",
    )
    p_backup.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Parallel table dumps per DB (default: $JOBS or 1)",
    )
    p_backup.add_argument("-v", "--verbose", action="store_true", help="Verbose")
    p_backup.set_defaults(func=cmd_backup)

    # restore command
    p_restore = subparsers.add_parser("restore", help="Restore from a .tar.gz backup")
    p_restore.add_argument("--file", help="Path to backup .tar.gz")
    p_restore.add_argument("--skip-db", default="", help="Skip these DBs")
    p_restore.add_argument("--only-db", default="", help="Restore only these DBs")
    p_restore.add_argument(
        "--skip-table",
        default="",
        help="Skip these fully-qualified tables (db.table)",
    )
    p_restore.add_argument(
        "--only-table",
        default="",
        help="Restore only these fully-qualified tables (db.table)",
    )
    p_restore.add_argument("-v", "--verbose", action="store_true", help="Verbose")
    p_restore.set_defaults(func=cmd_restore)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for any db-dock error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except DbDockError as e:
        err_console.print(f"[bold red]x[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Backup and restore of MySQL databases running in a container.

Usage:
    from db_dock.backup import run_backup, run_restore, resolve_restore_scope
    from db_dock.backup import pack, unpack, normalize, resolve_databases
"""

from db_dock.backup.archive import pack, unpack
from db_dock.backup.dump import dump_database, dump_databases, run_backup
from db_dock.backup.models import BackupResult, RestoreScope, RestoreSummary, SkippedItem
from db_dock.backup.restore import (
    foreign_key_checks_relaxed,
    restore_archive,
    restore_database,
    run_restore,
)
from db_dock.backup.selection import (
    PERFORMANCE_DB,
    normalize,
    resolve_databases,
    resolve_restore_scope,
)

__all__ = [
    # Selection
    "PERFORMANCE_DB",
    "normalize",
    "resolve_databases",
    "resolve_restore_scope",
    # Dump
    "dump_database",
    "dump_databases",
    "run_backup",
    # Archive
    "pack",
    "unpack",
    # Restore
    "foreign_key_checks_relaxed",
    "restore_archive",
    "restore_database",
    "run_restore",
    # Models
    "BackupResult",
    "RestoreScope",
    "RestoreSummary",
    "SkippedItem",
]

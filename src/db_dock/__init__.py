"""db-dock: Docker-aware logical backup and restore for MySQL.

Locates the running MySQL container, dumps schema and per-table data
through ``docker exec``, packs them into one ``.tar.gz``, and replays such
archives with database/table filters.

Usage:
    from db_dock import load_settings, get_client, run_backup, run_restore
    from db_dock import resolve_restore_scope
"""

__version__ = "0.1.0"

# Adapters
from db_dock.adapters.base import MySQLClient
from db_dock.adapters.docker_exec import DockerExecClient

# Config
from db_dock.config.loader import load_settings
from db_dock.config.models import DockSettings, Target

# Factory
from db_dock.factory import get_client, locate_container, locate_target

# Backup / restore
from db_dock.backup import (
    BackupResult,
    RestoreScope,
    RestoreSummary,
    normalize,
    pack,
    resolve_databases,
    resolve_restore_scope,
    run_backup,
    run_restore,
    unpack,
)

# Errors
from db_dock.errors import (
    ArchiveFormatError,
    ArtifactCollisionError,
    ConfigurationError,
    DbDockError,
    DiscoveryError,
    EmptySelectionError,
    ExternalToolError,
    InvalidArchiveError,
)

__all__ = [
    # Adapters
    "MySQLClient",
    "DockerExecClient",
    # Config
    "load_settings",
    "DockSettings",
    "Target",
    # Factory
    "get_client",
    "locate_container",
    "locate_target",
    # Backup / restore
    "BackupResult",
    "RestoreScope",
    "RestoreSummary",
    "normalize",
    "pack",
    "resolve_databases",
    "resolve_restore_scope",
    "run_backup",
    "run_restore",
    "unpack",
    # Errors
    "DbDockError",
    "DiscoveryError",
    "ConfigurationError",
    "EmptySelectionError",
    "ArchiveFormatError",
    "InvalidArchiveError",
    "ExternalToolError",
    "ArtifactCollisionError",
]

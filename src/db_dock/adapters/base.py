"""MySQL client protocol definition.

Defines the ``MySQLClient`` Protocol that the backup and restore
orchestrators consume.  All methods are ``async def`` -- each call maps to
one external ``mysql`` / ``mysqldump`` process.

Usage:
    from db_dock.adapters.base import MySQLClient

    async def show(client: MySQLClient) -> None:
        for db in await client.list_databases():
            print(db, await client.list_tables(db))
"""

from pathlib import Path
from typing import Protocol

from db_dock.config.models import Target


class MySQLClient(Protocol):
    """Operations against one located MySQL target.

    Any failure of the underlying tool raises
    ``db_dock.errors.ExternalToolError``.
    """

    target: Target

    async def list_databases(self) -> list[str]:
        """Return every database name visible to the configured user."""
        ...

    async def list_tables(self, database: str) -> list[str]:
        """Return the table names of ``database`` (empty list if none)."""
        ...

    async def dump_schema(self, database: str, dest: Path) -> None:
        """Write the structure-only export of ``database`` to ``dest``.

        Covers tables, routines, triggers and events; no rows and no GTID
        markers.
        """
        ...

    async def dump_table(self, database: str, table: str, dest: Path) -> None:
        """Write the data-only export of one table to ``dest``.

        The export runs in a single transaction (consistent snapshot) and
        contains ``INSERT`` statements only.
        """
        ...

    async def create_database(self, database: str) -> None:
        """Create ``database`` if it does not exist.  Never drops anything."""
        ...

    async def load_file(
        self,
        database: str,
        path: Path,
        foreign_key_checks: bool = True,
    ) -> None:
        """Replay a SQL file into ``database``.

        Args:
            database: Target database name.
            path: SQL file streamed to the client.
            foreign_key_checks: When ``False`` the loading session runs with
                ``FOREIGN_KEY_CHECKS=0``.
        """
        ...

    async def execute(self, sql: str, database: str | None = None) -> None:
        """Execute a single SQL statement, optionally inside ``database``."""
        ...

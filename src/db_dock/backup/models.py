"""Result and filter models for backup and restore runs.

Usage:
    from db_dock.backup.models import RestoreScope

    scope = RestoreScope(only_databases={"shop"}, skip_tables={"shop.audit"})
    scope.includes_database("shop")          # True
    scope.includes_table("shop", "audit")    # False
"""

from pathlib import Path

from pydantic import BaseModel, Field


class RestoreScope(BaseModel):
    """The four restore filters.

    ``only_*`` restricts the universe first, then ``skip_*`` removes from
    what remains.  An empty set imposes no restriction.  Table sets hold
    fully-qualified ``database.table`` names.
    """

    model_config = {"frozen": True}

    skip_databases: frozenset[str] = frozenset()
    only_databases: frozenset[str] = frozenset()
    skip_tables: frozenset[str] = frozenset()
    only_tables: frozenset[str] = frozenset()

    def database_skip_reason(self, database: str) -> str | None:
        """Return ``"only-db"`` / ``"skip-db"`` if filtered out, else ``None``."""
        if self.only_databases and database not in self.only_databases:
            return "only-db"
        if database in self.skip_databases:
            return "skip-db"
        return None

    def table_skip_reason(self, database: str, table: str) -> str | None:
        """Return ``"only-table"`` / ``"skip-table"`` if filtered out, else ``None``."""
        fq = f"{database}.{table}"
        if self.only_tables and fq not in self.only_tables:
            return "only-table"
        if fq in self.skip_tables:
            return "skip-table"
        return None

    def includes_database(self, database: str) -> bool:
        return self.database_skip_reason(database) is None

    def includes_table(self, database: str, table: str) -> bool:
        return self.table_skip_reason(database, table) is None


class SkippedItem(BaseModel):
    """A database or table left out by a restore filter."""

    name: str
    reason: str


class RestoreSummary(BaseModel):
    """Outcome of ``restore_archive``."""

    restored_databases: list[str] = Field(default_factory=list)
    skipped_databases: list[SkippedItem] = Field(default_factory=list)
    loaded_tables: list[str] = Field(default_factory=list)      # database.table
    skipped_tables: list[SkippedItem] = Field(default_factory=list)


class BackupResult(BaseModel):
    """Outcome of ``run_backup``."""

    archive_path: Path
    databases: list[str]
    table_counts: dict[str, int] = Field(default_factory=dict)

    @property
    def total_tables(self) -> int:
        return sum(self.table_counts.values())

"""Database and table selection.

Turns raw comma-separated lists into name sets and decides which
databases a backup covers and which databases/tables a restore applies.

Usage:
    >>> normalize(" shop, logs,,shop ")
    frozenset({'shop', 'logs'})
    >>> resolve_databases("", DEFAULT_EXCLUDE_DBS, False, ["shop", "mysql"])
    frozenset({'shop'})
"""

from collections.abc import Iterable

from db_dock.backup.models import RestoreScope
from db_dock.errors import EmptySelectionError

PERFORMANCE_DB = "performance_db"


def normalize(raw: str | Iterable[str] | None) -> frozenset[str]:
    """Split on commas, trim whitespace, drop blanks and duplicates.

    Accepts a raw string or an iterable of (possibly comma-joined)
    strings, so ``normalize(normalize(x)) == normalize(x)``.
    """
    if raw is None:
        return frozenset()
    parts = [raw] if isinstance(raw, str) else list(raw)
    names = {name.strip() for part in parts for name in part.split(",")}
    names.discard("")
    return frozenset(names)


def resolve_databases(
    explicit: str | Iterable[str] | None,
    default_exclude: str | Iterable[str],
    include_override: bool,
    live_databases: Iterable[str],
) -> frozenset[str]:
    """Decide which databases a backup covers.

    An explicit selection is taken as-is; default exclusions and the
    ``performance_db`` override only apply when there is none.

    Args:
        explicit: ``--db`` list.  Non-empty bypasses everything else.
        default_exclude: Names excluded when backing up "all".
        include_override: Drop ``performance_db`` from the exclusions.
        live_databases: Databases present on the server, taken verbatim.

    Returns:
        Selected database names.

    Raises:
        EmptySelectionError: If nothing is selected.
    """
    selected = normalize(explicit)

    if not selected:
        excluded = normalize(default_exclude)
        if include_override:
            excluded = excluded - {PERFORMANCE_DB}
        selected = frozenset(live_databases) - excluded

    if not selected:
        raise EmptySelectionError("No databases to back up.")
    return selected


def resolve_restore_scope(
    skip_db: str | Iterable[str] | None = None,
    only_db: str | Iterable[str] | None = None,
    skip_table: str | Iterable[str] | None = None,
    only_table: str | Iterable[str] | None = None,
) -> RestoreScope:
    """Build the restore filters from the four raw lists."""
    return RestoreScope(
        skip_databases=normalize(skip_db),
        only_databases=normalize(only_db),
        skip_tables=normalize(skip_table),
        only_tables=normalize(only_table),
    )

"""Interactive menu shown when ``db-dock`` runs without a subcommand."""

import asyncio
import re
from pathlib import Path

from rich.prompt import IntPrompt, Prompt

from db_dock.backup.selection import resolve_restore_scope
from db_dock.cli.commands import console, execute_backup, execute_restore
from db_dock.config.models import DockSettings
from db_dock.factory import get_client

_RANGE = re.compile(r"^(\d+)-(\d+)$")


def parse_picks(picks: str, count: int) -> list[int]:
    """Turn ``"1,3-5,10"`` into zero-based indices below ``count``.

    Out-of-range and malformed entries are ignored; duplicates are dropped
    keeping first-seen order.

    Example:
        >>> parse_picks("1,3-4,9", count=5)
        [0, 2, 3]
    """
    indices: list[int] = []
    for part in picks.split(","):
        part = part.strip()
        match = _RANGE.match(part)
        if match:
            numbers = range(int(match.group(1)), int(match.group(2)) + 1)
        elif part.isdigit():
            numbers = [int(part)]
        else:
            continue
        for n in numbers:
            idx = n - 1
            if 0 <= idx < count and idx not in indices:
                indices.append(idx)
    return indices


def _ask_output(settings: DockSettings) -> tuple[Path, int]:
    out = Prompt.ask("Output directory", default=str(settings.backup_root), console=console)
    jobs = IntPrompt.ask(
        "Parallel jobs per DB (1=no parallel)", default=settings.jobs, console=console
    )
    return Path(out), max(jobs, 1)


def backup_all(settings: DockSettings) -> int:
    out, jobs = _ask_output(settings)
    return execute_backup(settings, out_dir=out, jobs=jobs)


def backup_pick_many(settings: DockSettings) -> int:
    client = get_client(settings)
    databases = asyncio.run(client.list_databases())

    console.print("Available DBs (enter numbers, comma or ranges like 1,3-5,10):")
    for i, name in enumerate(databases, 1):
        console.print(f"{i:2d}) {name}")
    picks = Prompt.ask("Select", console=console)
    selected = [databases[i] for i in parse_picks(picks, len(databases))]
    if not selected:
        console.print("Nothing selected.")
        return 0

    out, jobs = _ask_output(settings)
    return execute_backup(
        settings,
        databases=",".join(selected),
        out_dir=out,
        jobs=jobs,
        client=client,
    )


def restore(settings: DockSettings) -> int:
    archive = Prompt.ask("Path to backup tar.gz", console=console)
    console.print("Restore scope:")
    console.print("  1) Restore ALL (no skips)")
    console.print("  2) Restore with filters (skip/only DBs/tables)")
    choice = Prompt.ask("Choose", console=console)

    if choice == "1":
        scope = resolve_restore_scope()
    elif choice == "2":
        only_db = Prompt.ask("only DBs (comma list, blank=none)", default="", console=console)
        skip_db = Prompt.ask("skip DBs (comma list, blank=none)", default="", console=console)
        only_tbl = Prompt.ask(
            "only tables (db.tbl,db2.tbl2; blank=none)", default="", console=console
        )
        skip_tbl = Prompt.ask(
            "skip tables (db.tbl,db2.tbl2; blank=none)", default="", console=console
        )
        scope = resolve_restore_scope(skip_db, only_db, skip_tbl, only_tbl)
    else:
        console.print("Cancelled.")
        return 0

    return execute_restore(settings, Path(archive), scope)


def run_interactive(settings: DockSettings) -> int:
    """Show the main menu and run the chosen action."""
    console.print("== MySQL Backup/Restore ==")
    console.print("1) Backup (default: exclude performance_db)")
    console.print("2) Backup (pick one or MANY DBs)")
    console.print("3) Restore (all or with skip/only filters)")
    console.print("4) Quit")
    choice = Prompt.ask("Select", console=console)

    if choice == "1":
        return backup_all(settings)
    if choice == "2":
        return backup_pick_many(settings)
    if choice == "3":
        return restore(settings)
    console.print("Bye.")
    return 0

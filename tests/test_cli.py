"""Tests for the db-dock CLI and the interactive menu helpers.

``get_client`` is patched so no Docker daemon is contacted; backups and
restores run the real orchestrators against an ``AsyncMock`` client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from db_dock.backup.archive import pack
from db_dock.cli import build_parser, main
from db_dock.cli.interactive import parse_picks, run_interactive
from db_dock.config.models import DockSettings
from db_dock.errors import DiscoveryError

GET_CLIENT = "db_dock.cli.commands.get_client"


def _make_mock_client(tables_by_db: dict[str, list[str]]) -> AsyncMock:
    client = AsyncMock()
    client.target = MagicMock(container_id="c0ffee")

    async def _dump_schema(database, dest):
        dest.write_text("-- ddl\n")

    async def _dump_table(database, table, dest):
        dest.write_text("-- rows\n")

    async def _list_tables(database):
        return tables_by_db.get(database, [])

    client.list_databases = AsyncMock(return_value=list(tables_by_db))
    client.list_tables = AsyncMock(side_effect=_list_tables)
    client.dump_schema = AsyncMock(side_effect=_dump_schema)
    client.dump_table = AsyncMock(side_effect=_dump_table)
    return client


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("JOBS", "BACKUP_ROOT", "EXCLUDE_DBS"):
        monkeypatch.delenv(name, raising=False)


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------


class TestParser:
    def test_backup_flags(self):
        args = build_parser().parse_args(
            ["backup", "--db", "a,b", "--include", "performance_db", "--jobs", "3", "-v"]
        )
        assert args.db == "a,b"
        assert args.include == "performance_db"
        assert args.jobs == 3
        assert args.verbose is True

    def test_restore_flags(self):
        args = build_parser().parse_args(
            [
                "restore", "--file", "x.tar.gz",
                "--skip-db", "a", "--only-db", "b",
                "--skip-table", "b.t1", "--only-table", "b.t2",
            ]
        )
        assert (args.file, args.skip_db, args.only_db) == ("x.tar.gz", "a", "b")
        assert (args.skip_table, args.only_table) == ("b.t1", "b.t2")

    def test_global_options(self):
        args = build_parser().parse_args(["--env-prefix", "PROD_", "backup", "--all"])
        assert args.env_prefix == "PROD_"
        assert args.all is True


# ------------------------------------------------------------------
# Configuration errors (exit 1, no side effects)
# ------------------------------------------------------------------


class TestConfigurationErrors:
    def test_all_and_db_conflict(self):
        with patch(GET_CLIENT) as get_client:
            assert main(["backup", "--all", "--db", "shop"]) == 1
        get_client.assert_not_called()

    def test_unknown_include(self):
        with patch(GET_CLIENT) as get_client:
            assert main(["backup", "--include", "sys"]) == 1
        get_client.assert_not_called()

    def test_jobs_below_one(self):
        with patch(GET_CLIENT) as get_client:
            assert main(["backup", "--jobs", "0"]) == 1
        get_client.assert_not_called()

    def test_restore_requires_file(self):
        with patch(GET_CLIENT) as get_client:
            assert main(["restore"]) == 1
        get_client.assert_not_called()

    def test_restore_missing_archive(self, tmp_path):
        with patch(GET_CLIENT) as get_client:
            assert main(["restore", "--file", str(tmp_path / "nope.tar.gz")]) == 1
        get_client.assert_not_called()


# ------------------------------------------------------------------
# Backup / restore end to end
# ------------------------------------------------------------------


class TestBackupCommand:
    def test_backup_all(self, tmp_path):
        client = _make_mock_client({"shop": ["users"], "mysql": ["user"]})
        with patch(GET_CLIENT, return_value=client):
            code = main(["backup", "--all", "--out", str(tmp_path), "--jobs", "2"])

        assert code == 0
        archives = list(tmp_path.glob("mysql_backup_*.tar.gz"))
        assert len(archives) == 1
        assert [p for p in tmp_path.iterdir() if p.is_dir()] == []

    def test_discovery_failure(self, tmp_path):
        with patch(GET_CLIENT, side_effect=DiscoveryError("no container")):
            assert main(["backup", "--all", "--out", str(tmp_path)]) == 1

    def test_empty_selection(self, tmp_path):
        client = _make_mock_client({"mysql": [], "sys": []})
        with patch(GET_CLIENT, return_value=client):
            assert main(["backup", "--out", str(tmp_path)]) == 1


class TestRestoreCommand:
    def _archive(self, tmp_path):
        work = tmp_path / "mysql_backup_2026.10.18.11.49.03"
        work.mkdir()
        (work / "shop_schema.sql").write_text("-- ddl\n")
        (work / "shop_users.sql").write_text("-- rows\n")
        (work / "shop_orders.sql").write_text("-- rows\n")
        return pack(work)

    def test_restore_with_filters(self, tmp_path):
        archive = self._archive(tmp_path)
        client = _make_mock_client({})
        with patch(GET_CLIENT, return_value=client):
            code = main(["restore", "--file", str(archive), "--only-table", "shop.users"])

        assert code == 0
        loaded = [c.args[1].name for c in client.load_file.call_args_list]
        assert loaded == ["shop_schema.sql", "shop_users.sql"]

    def test_restore_invalid_archive(self, tmp_path):
        bogus = tmp_path / "bogus.tar.gz"
        bogus.write_text("nope")
        client = _make_mock_client({})
        with patch(GET_CLIENT, return_value=client):
            assert main(["restore", "--file", str(bogus)]) == 1
        client.create_database.assert_not_called()


# ------------------------------------------------------------------
# Interactive menu
# ------------------------------------------------------------------


class TestParsePicks:
    def test_numbers_and_ranges(self):
        assert parse_picks("1,3-5,10", count=10) == [0, 2, 3, 4, 9]

    def test_ignores_invalid_and_out_of_range(self):
        assert parse_picks("0, x, 2, 7, 2-3", count=3) == [1, 2]

    def test_blank(self):
        assert parse_picks("", count=3) == []


class TestInteractiveMenu:
    def test_quit(self):
        with patch("db_dock.cli.interactive.Prompt.ask", return_value="4"):
            assert run_interactive(DockSettings()) == 0

    def test_backup_all_from_menu(self, tmp_path):
        client = _make_mock_client({"shop": ["users"]})
        answers = iter(["1", str(tmp_path)])
        with (
            patch("db_dock.cli.interactive.Prompt.ask", side_effect=lambda *a, **k: next(answers)),
            patch("db_dock.cli.interactive.IntPrompt.ask", return_value=2),
            patch(GET_CLIENT, return_value=client),
        ):
            assert run_interactive(DockSettings()) == 0
        assert len(list(tmp_path.glob("mysql_backup_*.tar.gz"))) == 1

    def test_pick_many_from_menu(self, tmp_path):
        client = _make_mock_client({"shop": ["users"], "logs": ["events"], "crm": []})
        answers = iter(["2", "2-3", str(tmp_path)])
        with (
            patch("db_dock.cli.interactive.Prompt.ask", side_effect=lambda *a, **k: next(answers)),
            patch("db_dock.cli.interactive.IntPrompt.ask", return_value=1),
            patch("db_dock.cli.interactive.get_client", return_value=client),
        ):
            assert run_interactive(DockSettings()) == 0

        schema_dumps = sorted(c.args[0] for c in client.dump_schema.call_args_list)
        assert schema_dumps == ["crm", "logs"]

"""MySQL client that runs the stock command-line tools via ``docker exec``.

Provides ``DockerExecClient``, the ``MySQLClient`` implementation used by
the CLI.  Nothing is installed on the host besides the Docker CLI: every
``mysql`` / ``mysqldump`` invocation runs inside the located container and
talks to the server over ``127.0.0.1`` on the internal port.

The password is exported as ``MYSQL_PWD`` in the environment of the local
``docker`` process and forwarded by name (``-e MYSQL_PWD``), so it never
appears in a process listing.

Usage:
    from db_dock.adapters.docker_exec import DockerExecClient

    client = DockerExecClient(target)
    databases = await client.list_databases()
    await client.dump_schema("shop", Path("out/shop_schema.sql"))
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import IO, Any

from db_dock.config.models import Target
from db_dock.errors import ExternalToolError

logger = logging.getLogger(__name__)

SCHEMA_DUMP_OPTIONS = (
    "--no-data",
    "--routines",
    "--triggers",
    "--events",
    "--set-gtid-purged=OFF",
)

DATA_DUMP_OPTIONS = (
    "--single-transaction",
    "--no-create-info",
    "--skip-triggers",
    "--set-gtid-purged=OFF",
)

DISABLE_FK_CHECKS = "SET FOREIGN_KEY_CHECKS=0"


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


class DockerExecClient:
    """``MySQLClient`` backed by ``docker exec`` subprocesses.

    Args:
        target: Located container and connection coordinates.
        docker_bin: Docker CLI executable name or path.

    Example:
        client = DockerExecClient(target, docker_bin="/usr/bin/docker")
        await client.create_database("shop")
        await client.load_file("shop", Path("shop_schema.sql"))
    """

    def __init__(self, target: Target, docker_bin: str = "docker") -> None:
        self.target = target
        self._docker_bin = docker_bin

    # ------------------------------------------------------------------
    # Command construction
    # ------------------------------------------------------------------

    def _command(self, tool: str, *args: str, interactive: bool = False) -> list[str]:
        """Build the argv for ``tool`` running inside the target container."""
        cmd = [self._docker_bin, "exec"]
        if interactive:
            cmd.append("-i")
        cmd += [
            "-e",
            "MYSQL_PWD",
            self.target.container_id,
            tool,
            f"-u{self.target.user}",
            "-h127.0.0.1",
            f"-P{self.target.port}",
        ]
        cmd.extend(args)
        return cmd

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        env["MYSQL_PWD"] = self.target.password.get_secret_value()
        return env

    # ------------------------------------------------------------------
    # Process execution
    # ------------------------------------------------------------------

    async def _run(
        self,
        cmd: list[str],
        stdin: IO[Any] | None = None,
        stdout: IO[Any] | int = asyncio.subprocess.PIPE,
    ) -> bytes:
        """Run ``cmd`` to completion and return its stdout.

        The child is killed if the awaiting task is cancelled, so a
        fail-fast abort elsewhere never leaves exports running.

        Raises:
            ExternalToolError: If the binary is missing or exits non-zero.
        """
        logger.debug("exec: %s", " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=stdin,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise ExternalToolError(
                f"{cmd[0]} not found. Is the Docker CLI installed?",
                command=cmd,
            ) from e

        try:
            out, err = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            stderr = (err or b"").decode(errors="replace").strip()
            tool = cmd[cmd.index(self.target.container_id) + 1]
            raise ExternalToolError(
                f"{tool} failed with exit code {process.returncode}: {stderr}",
                command=cmd,
                returncode=process.returncode,
                stderr=stderr,
            )
        return out or b""

    async def _query(self, sql: str, database: str | None = None) -> list[str]:
        """Run ``sql`` in batch mode and return non-empty output lines."""
        args = ["-N", "-s", "-e", sql]
        if database is not None:
            args.append(database)
        out = await self._run(self._command("mysql", *args))
        return [line for line in out.decode().splitlines() if line.strip()]

    async def _dump_to(self, cmd: list[str], dest: Path) -> None:
        """Stream a dump into ``dest``; no file is left behind on failure."""
        partial = dest.with_name(dest.name + ".part")
        try:
            with open(partial, "wb") as f:
                await self._run(cmd, stdout=f)
            partial.replace(dest)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ExternalToolError(f"Cannot write {dest}: {e}", command=cmd) from e
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # MySQLClient
    # ------------------------------------------------------------------

    async def list_databases(self) -> list[str]:
        return await self._query("SHOW DATABASES;")

    async def list_tables(self, database: str) -> list[str]:
        return await self._query(f"SHOW TABLES IN {quote_identifier(database)};")

    async def dump_schema(self, database: str, dest: Path) -> None:
        cmd = self._command("mysqldump", *SCHEMA_DUMP_OPTIONS, database)
        await self._dump_to(cmd, dest)

    async def dump_table(self, database: str, table: str, dest: Path) -> None:
        cmd = self._command("mysqldump", *DATA_DUMP_OPTIONS, database, table)
        await self._dump_to(cmd, dest)

    async def create_database(self, database: str) -> None:
        await self.execute(f"CREATE DATABASE IF NOT EXISTS {quote_identifier(database)};")

    async def load_file(
        self,
        database: str,
        path: Path,
        foreign_key_checks: bool = True,
    ) -> None:
        args = []
        if not foreign_key_checks:
            args.append(f"--init-command={DISABLE_FK_CHECKS}")
        args.append(database)
        cmd = self._command("mysql", *args, interactive=True)
        with open(path, "rb") as f:
            await self._run(cmd, stdin=f)

    async def execute(self, sql: str, database: str | None = None) -> None:
        args = ["-e", sql]
        if database is not None:
            args.append(database)
        await self._run(self._command("mysql", *args))

"""Exception hierarchy for db-dock.

Library code raises these; only the CLI catches them (``DbDockError`` maps
to exit code 1).

Usage:
    from db_dock.errors import DbDockError, ExternalToolError
"""


class DbDockError(Exception):
    """Base class for every fatal db-dock error."""


class DiscoveryError(DbDockError):
    """Raised when no running MySQL container can be located."""


class ConfigurationError(DbDockError):
    """Raised for contradictory, missing, or invalid settings and flags."""


class EmptySelectionError(DbDockError):
    """Raised when database selection resolves to nothing."""


class ArchiveFormatError(DbDockError):
    """Raised when a backup archive cannot be read or written, or is malformed."""


InvalidArchiveError = ArchiveFormatError


class ArtifactCollisionError(DbDockError):
    """Raised when a table name would overwrite its database's schema artifact."""


class ExternalToolError(DbDockError):
    """Raised when ``docker exec`` / ``mysql`` / ``mysqldump`` fails.

    Attributes:
        command: The argv that was executed (password never included).
        returncode: Process exit status, ``None`` if it never started.
        stderr: Decoded standard error of the process.
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr

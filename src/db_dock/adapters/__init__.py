"""MySQL client adapters.

Provides the ``MySQLClient`` Protocol and ``DockerExecClient``, which runs
the MySQL command-line tools inside the target container.

Usage:
    from db_dock.adapters import MySQLClient, DockerExecClient
"""

from db_dock.adapters.base import MySQLClient
from db_dock.adapters.docker_exec import DockerExecClient, quote_identifier

__all__ = [
    "MySQLClient",
    "DockerExecClient",
    "quote_identifier",
]

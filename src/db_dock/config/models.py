"""Pydantic models for db-dock configuration and the located target."""

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EXCLUDE_DBS = "performance_db,information_schema,mysql,sys,performance_schema"


# ============================================================================
# Configuration Models
# ============================================================================


class DockSettings(BaseSettings):
    """Environment-driven settings.

    Every field maps to the upper-cased environment variable of the same
    name (``MYSQL_USER``, ``BACKUP_ROOT``, ...).  Pass ``_env_prefix`` to
    read prefixed variables instead.
    """

    # Target discovery
    mysql_published_port: int = 33066
    stack_ns: str = "dwdm"
    service_name: str = "mysql"

    # Connection inside the container
    mysql_internal_port: int = 3306
    mysql_user: str = "root_user"
    mysql_password: SecretStr = SecretStr("change_me_very_strong")

    # Backup defaults
    backup_root: Path = Path("/root/mysql-backup/backupfiles")
    jobs: int = Field(default=1, ge=1)
    exclude_dbs: str = DEFAULT_EXCLUDE_DBS

    docker_bin: str = "docker"

    model_config = SettingsConfigDict(extra="ignore")

    @property
    def swarm_service_label(self) -> str:
        """Swarm service name label value, e.g. ``dwdm_mysql``."""
        return f"{self.stack_ns}_{self.service_name}"


# ============================================================================
# Target
# ============================================================================


class Target(BaseModel):
    """Handle to one running MySQL container plus connection coordinates.

    Created once per run by ``db_dock.factory.locate_target`` and passed
    explicitly to everything that talks to the database.
    """

    model_config = {"frozen": True}

    container_id: str
    user: str
    password: SecretStr
    port: int = 3306

"""Settings loader: environment variables with optional TOML overrides."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from db_dock.config.models import DockSettings
from db_dock.errors import ConfigurationError


def load_settings(
    config_path: Path | None = None,
    env_prefix: str = "",
) -> DockSettings:
    """Build ``DockSettings`` from the environment and an optional TOML file.

    Values in the file's ``[mysql]`` table take precedence over the
    environment, since the file was named explicitly on the command line.

    Args:
        config_path: Optional path to a TOML file.
        env_prefix: Prefix for environment variable lookup
            (``"PROD_"`` reads ``PROD_MYSQL_USER``).

    Returns:
        Validated settings.

    Raises:
        ConfigurationError: If the file is missing, is not valid TOML, or
            any value fails validation.

    Example:
        >>> settings = load_settings(Path("db-dock.toml"))
        >>> settings.jobs
        4
    """
    overrides: dict = {}

    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e
        overrides = data.get("mysql", {})

    try:
        return DockSettings(_env_prefix=env_prefix, **overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration:\n{e}") from e

"""Configuration: environment settings, TOML loading, and the Target model.

Usage:
    >>> from db_dock.config import load_settings, DockSettings, Target
"""

from db_dock.config.loader import load_settings
from db_dock.config.models import DEFAULT_EXCLUDE_DBS, DockSettings, Target

__all__ = ["load_settings", "DockSettings", "Target", "DEFAULT_EXCLUDE_DBS"]

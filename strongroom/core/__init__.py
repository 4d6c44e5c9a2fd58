"""Core app configuration, database and error types."""

from strongroom.core.config import get_settings, settings
from strongroom.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

"""Core app configuration, database and errors."""

from nita.core.config import get_settings, settings
from nita.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

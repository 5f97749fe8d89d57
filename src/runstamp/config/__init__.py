"""
runstamp configuration.

Pydantic-based settings read from environment variables and .env files.
"""

from runstamp.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]

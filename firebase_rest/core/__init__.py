"""Core: configuration.

Single place for settings.
"""

from firebase_rest.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

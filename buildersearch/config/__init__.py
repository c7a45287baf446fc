"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    BuilderSearchError,
    ErrorCode,
    SearchError,
    StorageError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "BuilderSearchError",
    "SearchError",
    "StorageError",
]

"""
CLI Interface - Command-line tools for BuilderSearch.

Provides commands for:
- Record import
- Search and faceted search
- Index building
- Serving the API
"""

from .main import app, main

__all__ = ["app", "main"]

"""
JSON File Adapter - Records read from a JSON array file.
"""

from .store import JSONFileRecordStore

__all__ = ["JSONFileRecordStore"]

"""
Mapping-table backends for Keylink.
"""

from .base import BaseMappingStore
from .storage import Storage
from .sqlite_storage import SqliteStorage
from .storage_factory import get_storage

__all__ = ["BaseMappingStore", "Storage", "SqliteStorage", "get_storage"]

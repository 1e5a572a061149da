"""
Object store backends served by the storage facade.
"""

from vaultsync.storage.base import ListPage, ObjectStore, StoredObject
from vaultsync.storage.filesystem import FilesystemObjectStore
from vaultsync.storage.memory import MemoryObjectStore

__all__ = ["FilesystemObjectStore", "ListPage", "MemoryObjectStore", "ObjectStore", "StoredObject"]

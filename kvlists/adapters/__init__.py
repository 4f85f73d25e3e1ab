"""
Concrete ListStore backends.
"""

from kvlists.adapters.lmdb_store import LMDBListStore
from kvlists.adapters.memory_store import MemoryListStore

__all__ = ["LMDBListStore", "MemoryListStore"]

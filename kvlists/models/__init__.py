"""
Data models for the list store.
"""

from kvlists.models.exceptions import (
    AlreadyExistsError,
    InvalidPatternError,
    KVListsError,
    NotFoundError,
    StorageFaultError,
)
from kvlists.models.info import DBInfo, ListInfo
from kvlists.models.row import Row, to_bytes
from kvlists.models.search_result import SearchResult, SearchResultRow

__all__ = [
    "AlreadyExistsError",
    "DBInfo",
    "InvalidPatternError",
    "KVListsError",
    "ListInfo",
    "NotFoundError",
    "Row",
    "SearchResult",
    "SearchResultRow",
    "StorageFaultError",
    "to_bytes",
]

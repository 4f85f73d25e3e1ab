"""
Transactional list/row store with pagination and regex search.

This package provides:
- ListStore - the list/row CRUD contract, with LMDB and in-memory backends
- read_row_page / PageWindow - offset pagination over ordered rows
- search(...) - regex-filtered, paginated scan across lists
- get_db_info / get_list_info - size and row-count statistics
"""

from kvlists.adapters import LMDBListStore, MemoryListStore
from kvlists.engine import (
    PageWindow,
    auto_format_value,
    get_db_info,
    get_list_info,
    get_list_page,
    num_pages,
    search,
)
from kvlists.interfaces import ListStore
from kvlists.models import (
    AlreadyExistsError,
    DBInfo,
    InvalidPatternError,
    KVListsError,
    ListInfo,
    NotFoundError,
    Row,
    SearchResult,
    SearchResultRow,
    StorageFaultError,
)

__version__ = "0.1.0"

__all__ = [
    "AlreadyExistsError",
    "DBInfo",
    "InvalidPatternError",
    "KVListsError",
    "LMDBListStore",
    "ListInfo",
    "ListStore",
    "MemoryListStore",
    "NotFoundError",
    "PageWindow",
    "Row",
    "SearchResult",
    "SearchResultRow",
    "StorageFaultError",
    "auto_format_value",
    "get_db_info",
    "get_list_info",
    "get_list_page",
    "num_pages",
    "search",
]

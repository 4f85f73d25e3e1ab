"""
Store-independent engines: pagination, search and statistics.
"""

from kvlists.engine.info import get_db_info, get_list_info, get_list_page
from kvlists.engine.pagination import PageWindow, num_pages
from kvlists.engine.search import auto_format_value, compile_pattern, search

__all__ = [
    "PageWindow",
    "auto_format_value",
    "compile_pattern",
    "get_db_info",
    "get_list_info",
    "get_list_page",
    "num_pages",
    "search",
]

"""
Pagination - Offset-based windowing over ordered sequences.
"""

from collections.abc import Iterable
from itertools import islice
from typing import TypeVar

T = TypeVar("T")


def num_pages(num_rows: int, page_size: int) -> int:
    """
    Number of selectable pages for a sequence.

    Always at least 1 so that an empty list still has a first page. A list
    whose length is an exact multiple of page_size gets a trailing empty page.

    Args:
        num_rows: Length of the sequence.
        page_size: Number of items per page.

    Returns:
        1 + num_rows // page_size
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if num_rows < 0:
        raise ValueError(f"num_rows must be >= 0, got {num_rows}")
    return 1 + num_rows // page_size


class PageWindow:
    """
    The rank range [start, stop) selected by a zero-based page index.

    Used both for single-list browsing (positions are row positions) and
    for search (positions are global match ranks). Items are ranked during
    one forward pass; nothing is re-read to skip the offset, so reaching
    page P costs O(P * page_size) per request and no cursor state is kept
    between requests.
    """

    def __init__(self, page_index: int, page_size: int) -> None:
        """
        Args:
            page_index: Zero-based page number.
            page_size: Number of items per page.

        Raises:
            ValueError: If page_index is negative or page_size is not positive.
        """
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self.page_index = page_index
        self.page_size = page_size

    @property
    def start(self) -> int:
        return self.page_index * self.page_size

    @property
    def stop(self) -> int:
        return self.start + self.page_size

    def contains(self, rank: int) -> bool:
        """Check if a zero-based rank falls inside the window."""
        return self.start <= rank < self.stop

    def select(self, items: Iterable[T]) -> list[T]:
        """
        Collect the items at positions [start, stop) of an ordered iterable.

        The iterable is consumed in a single forward pass and no further
        than stop, so a lazy cursor is never walked past the page.

        Returns:
            The window's items; fewer when the iterable is shorter, empty
            when the window starts past the end.
        """
        return list(islice(items, self.start, self.stop))

    def __repr__(self) -> str:
        return f"PageWindow(page_index={self.page_index}, page_size={self.page_size})"

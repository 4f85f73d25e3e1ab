"""
SearchResult - Request-scoped output of a multi-list search.
"""

from dataclasses import dataclass, field

from kvlists.models.row import Row


@dataclass
class SearchResultRow:
    """
    A matching row placed in the requested page.

    Attributes:
        list_name: Name of the list the row was found in.
        row: The row as stored.
        match: Substring matched by the pattern ("" when no pattern applied).
        display_value: Pretty-printed value for display (raw text if not JSON).
    """

    list_name: str
    row: Row
    match: str = ""
    display_value: str = ""


@dataclass
class SearchResult:
    """
    Attributes:
        total_results: Number of matches across the whole scan, independent
            of the page window.
        rows: Matches whose rank falls inside the page window, in scan order.
    """

    total_results: int = 0
    rows: list[SearchResultRow] = field(default_factory=list)

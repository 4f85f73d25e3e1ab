"""
Search - Regex-filtered, paginated scan across multiple lists.
"""

import json
import logging
import re
from collections.abc import Sequence

from kvlists.engine.pagination import PageWindow
from kvlists.interfaces.list_store import ListStore
from kvlists.models.exceptions import InvalidPatternError
from kvlists.models.row import Row
from kvlists.models.search_result import SearchResult, SearchResultRow

logger = logging.getLogger(__name__)


def compile_pattern(pattern: "re.Pattern[str] | str | None") -> "re.Pattern[str] | None":
    """
    Normalize a search pattern.

    Args:
        pattern: A compiled pattern, regex source text, or None.

    Returns:
        The compiled pattern, or None when no filtering should happen
        (None or an empty pattern).

    Raises:
        InvalidPatternError: If the source text is not a valid regex.
    """
    if pattern is None:
        return None
    if isinstance(pattern, re.Pattern):
        return pattern if pattern.pattern else None
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(f"invalid search pattern {pattern!r}: {e}") from e


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def _is_json(text: str) -> bool:
    # Numbers stay text so huge literals are neither converted nor limited
    try:
        json.loads(
            text,
            parse_int=str,
            parse_float=str,
            parse_constant=_reject_constant,
        )
    except ValueError:
        return False
    return True


def _indent_json(text: str, indent: str = "\t") -> str:
    """
    Re-indent valid JSON text without touching any token.

    Only whitespace outside strings changes: one member per line, a space
    after each colon, and empty objects/arrays stay on one line.
    """
    out: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    opened = False

    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch in " \t\r\n":
            continue

        if opened:
            opened = False
            if ch in "}]":
                depth -= 1
                out.append(ch)
                continue
            out.append("\n" + indent * depth)

        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch in "{[":
            depth += 1
            opened = True
            out.append(ch)
        elif ch in "}]":
            depth -= 1
            out.append("\n" + indent * depth + ch)
        elif ch == ",":
            out.append(",\n" + indent * depth)
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)

    return "".join(out)


def auto_format_value(value: str | bytes) -> str:
    """
    Render a row value for display.

    Values that are valid JSON are re-indented with tabs, keeping every
    literal exactly as stored; anything else is returned unchanged as
    text. Only the returned string is affected, the stored value never is.
    """
    text = value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
    if not _is_json(text):
        return text
    return _indent_json(text)


def search(
    store: ListStore,
    lists: Sequence[str] | None,
    pattern: "re.Pattern[str] | str | None",
    exclude_matches: bool,
    page_index: int,
    page_size: int,
) -> SearchResult:
    """
    Search rows of the selected lists whose value matches a pattern.

    Lists are scanned in the given order (or the store's list order when
    none are given) and rows in ascending key order. Each match gets a
    global rank; only matches whose rank falls in the page window are
    materialized, but every match is counted in total_results.

    Args:
        store: Store to scan.
        lists: Names of the lists to scan; empty or None means all lists.
        pattern: Regex tested against each value; None or "" matches every row.
        exclude_matches: Invert the pattern (keep rows that do NOT match).
        page_index: Zero-based page of matches to return.
        page_size: Number of matches per page.

    Returns:
        SearchResult with the global match count and the requested page.

    Raises:
        NotFoundError: When the scan reaches a list that does not exist.
        InvalidPatternError: If pattern is text that does not compile.
        ValueError: If the page window is invalid.
    """
    window = PageWindow(page_index, page_size)
    regex = compile_pattern(pattern)
    if not lists:
        lists = list(store.read_each_list())

    logger.debug(
        f"Searching {len(lists)} lists for {regex.pattern if regex else None!r} "
        f"(exclude={exclude_matches}, {window})"
    )

    result = SearchResult()
    for list_name in lists:
        for row in store.read_each_row(list_name):
            matched, match = _match_row(row, regex, exclude_matches)
            if not matched:
                continue

            rank = result.total_results
            result.total_results += 1
            if window.contains(rank):
                result.rows.append(
                    SearchResultRow(
                        list_name=list_name,
                        row=row,
                        match=match,
                        display_value=auto_format_value(row.value),
                    )
                )

    return result


def _match_row(
    row: Row, regex: "re.Pattern[str] | None", exclude_matches: bool
) -> tuple[bool, str]:
    """Return (counts as a match, matched substring)."""
    if regex is None:
        return True, ""

    found = regex.search(row.value_str)
    if exclude_matches:
        return found is None, ""
    if found is None:
        return False, ""
    return True, found.group(0)

"""
MemoryListStore - In-process list store.
"""

import logging
import threading
from collections.abc import Iterator

from sortedcontainers import SortedDict

from kvlists.engine.pagination import PageWindow
from kvlists.interfaces.list_store import ListStore
from kvlists.models.exceptions import AlreadyExistsError, NotFoundError
from kvlists.models.row import Row, to_bytes

logger = logging.getLogger(__name__)


class MemoryListStore(ListStore):
    """
    Non-durable list store kept in process memory.

    Each list is a SortedDict keyed by row key bytes, so rows iterate in
    ascending byte order like the durable backend. A single re-entrant lock
    plays the role of the engine transaction; iterators walk a snapshot
    taken under that lock and never observe later writes.
    """

    def __init__(self) -> None:
        self._lists: SortedDict = SortedDict()
        self._lock = threading.RLock()

    def _find_list(self, list_name: str) -> SortedDict:
        """Return the rows of a list. Caller must hold the lock."""
        rows = self._lists.get(self._list_key(list_name))
        if rows is None:
            raise NotFoundError(list_name)
        return rows

    def _snapshot(self, list_name: str) -> list[Row]:
        with self._lock:
            rows = self._find_list(list_name)
            return [Row(k, v) for k, v in rows.items()]

    # General information

    def size(self) -> int:
        with self._lock:
            return sum(
                len(k) + len(v) for rows in self._lists.values() for k, v in rows.items()
            )

    def disk_size(self) -> int:
        return 0

    def disk_path(self) -> str:
        return ""

    def num_lists(self) -> int:
        with self._lock:
            return len(self._lists)

    def num_rows(self, list_name: str) -> int:
        with self._lock:
            return len(self._find_list(list_name))

    # List operations

    def list_exists(self, name: str) -> bool:
        with self._lock:
            return self._list_key(name) in self._lists

    def create_list(self, name: str) -> None:
        key = self._list_key(name)
        with self._lock:
            if key in self._lists:
                raise AlreadyExistsError(name)
            self._lists[key] = SortedDict()
        logger.info(f"Created list {name!r}")

    def read_each_list(self) -> Iterator[str]:
        with self._lock:
            names = list(self._lists.keys())
        for key in names:
            yield key.decode("utf-8", "surrogateescape")

    def delete_list(self, name: str) -> None:
        key = self._list_key(name)
        with self._lock:
            if key not in self._lists:
                raise NotFoundError(name)
            del self._lists[key]
        logger.info(f"Deleted list {name!r}")

    # List row operations

    def create_row(self, list_name: str, row: Row) -> None:
        row_key = self._row_key(row.key)
        with self._lock:
            rows = self._find_list(list_name)
            if row_key in rows:
                raise AlreadyExistsError(row.key_str)
            rows[row_key] = row.value

    def read_row(self, list_name: str, key: str | bytes) -> Row:
        row_key = self._row_key(key)
        with self._lock:
            rows = self._find_list(list_name)
            if row_key not in rows:
                raise NotFoundError(row_key.decode("utf-8", errors="replace"))
            return Row(row_key, rows[row_key])

    def read_row_page(self, list_name: str, page_index: int, page_size: int) -> list[Row]:
        window = PageWindow(page_index, page_size)
        with self._lock:
            rows = self._find_list(list_name)
            return window.select(Row(k, v) for k, v in rows.items())

    def read_each_row(self, list_name: str) -> Iterator[Row]:
        yield from self._snapshot(list_name)

    def update_row(self, list_name: str, key: str | bytes, new_value: str | bytes) -> None:
        row_key = self._row_key(key)
        with self._lock:
            rows = self._find_list(list_name)
            if row_key not in rows:
                raise NotFoundError(row_key.decode("utf-8", errors="replace"))
            rows[row_key] = to_bytes(new_value)

    def delete_row(self, list_name: str, key: str | bytes) -> None:
        row_key = self._row_key(key)
        with self._lock:
            rows = self._find_list(list_name)
            if row_key not in rows:
                raise NotFoundError(row_key.decode("utf-8", errors="replace"))
            del rows[row_key]

    def close(self) -> None:
        with self._lock:
            self._lists.clear()

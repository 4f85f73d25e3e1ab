"""
DBInfo and ListInfo - Point-in-time statistics snapshots.
"""

from dataclasses import dataclass, field


@dataclass
class ListInfo:
    """
    Statistics for a single list.

    Attributes:
        num_rows: Number of rows in the list.
        total_row_size: Sum of key and value sizes of every row, in bytes.
        avg_row_size: Integer average row size (0 for an empty list).
    """

    num_rows: int = 0
    total_row_size: int = 0
    avg_row_size: int = 0


@dataclass
class DBInfo:
    """
    Statistics for the whole store.

    Attributes:
        size: Logical size reported by the storage engine, in bytes.
        disk_size: Physical size of the backing file, in bytes.
        disk_path: Path of the backing file ("" for in-memory stores).
        num_lists: Number of lists.
        lists: Per-list statistics keyed by list name.
    """

    size: int = 0
    disk_size: int = 0
    disk_path: str = ""
    num_lists: int = 0
    lists: dict[str, ListInfo] = field(default_factory=dict)

    @property
    def total_rows(self) -> int:
        return sum(info.num_rows for info in self.lists.values())

    @property
    def total_row_size(self) -> int:
        return sum(info.total_row_size for info in self.lists.values())

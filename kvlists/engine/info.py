"""
Info - Per-list and whole-store statistics.
"""

from kvlists.engine.pagination import PageWindow
from kvlists.interfaces.list_store import ListStore
from kvlists.models.info import DBInfo, ListInfo
from kvlists.models.row import Row


def get_list_info(store: ListStore, list_name: str) -> ListInfo:
    """
    Compute statistics for a list in one read-only traversal.

    Args:
        store: Store holding the list.
        list_name: The list to inspect.

    Returns:
        Row count, summed key+value size and integer average row size.

    Raises:
        NotFoundError: If the list does not exist.
    """
    info = ListInfo()
    for row in store.read_each_row(list_name):
        info.num_rows += 1
        info.total_row_size += row.size()

    # Average only if rows are present
    if info.num_rows:
        info.avg_row_size = info.total_row_size // info.num_rows

    return info


def get_list_page(
    store: ListStore, list_name: str, page_index: int, page_size: int
) -> tuple[ListInfo, list[Row]]:
    """
    Compute list statistics and one page of its rows together.

    Both come from the same read_each_row traversal, so the page and the
    row count always describe the same snapshot of the list.

    Raises:
        NotFoundError: If the list does not exist.
        ValueError: If the page window is invalid.
    """
    window = PageWindow(page_index, page_size)
    info = ListInfo()
    rows: list[Row] = []

    for rank, row in enumerate(store.read_each_row(list_name)):
        info.num_rows += 1
        info.total_row_size += row.size()
        if window.contains(rank):
            rows.append(row)

    if info.num_rows:
        info.avg_row_size = info.total_row_size // info.num_rows

    return info, rows


def get_db_info(store: ListStore) -> DBInfo:
    """
    Compute statistics for the whole store.

    Nothing is cached: every call re-walks every list.
    """
    info = DBInfo(
        size=store.size(),
        disk_size=store.disk_size(),
        disk_path=store.disk_path(),
    )

    for list_name in list(store.read_each_list()):
        info.lists[list_name] = get_list_info(store, list_name)
    info.num_lists = len(info.lists)

    return info

"""
ListStore abstract base class for list/row storage backends.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from kvlists.models.row import Row, to_bytes


class ListStore(ABC):
    """
    Abstract base class for transactional stores of named, ordered lists.

    Every operation runs in exactly one engine transaction: reads in a read
    transaction, writes in a write transaction. Existence checks share the
    transaction with the write they guard, so a failed check leaves no
    partial mutation behind.

    Implementations:
    - LMDBListStore: Durable, one LMDB named database per list
    - MemoryListStore: In-process, for ephemeral data and tests

    Raises (all operations):
        NotFoundError: A referenced list or key does not exist.
        AlreadyExistsError: A create targets an existing list or key.
        StorageFaultError: The underlying engine failed.
    """

    # General information

    @abstractmethod
    def size(self) -> int:
        """Return the logical size of the store in bytes, as reported by the engine."""
        pass

    @abstractmethod
    def disk_size(self) -> int:
        """Return the physical size of the backing file in bytes."""
        pass

    @abstractmethod
    def disk_path(self) -> str:
        """Return the path of the backing file."""
        pass

    @abstractmethod
    def num_lists(self) -> int:
        """Return the number of lists."""
        pass

    @abstractmethod
    def num_rows(self, list_name: str) -> int:
        """
        Return the number of rows in a list.

        Raises:
            NotFoundError: If the list does not exist.
        """
        pass

    # List operations

    @abstractmethod
    def list_exists(self, name: str) -> bool:
        """Check whether a list exists."""
        pass

    @abstractmethod
    def create_list(self, name: str) -> None:
        """
        Create an empty list.

        Raises:
            AlreadyExistsError: If a list with that name exists.
        """
        pass

    @abstractmethod
    def read_each_list(self) -> Iterator[str]:
        """
        Iterate over list names in the engine's native (byte) order.

        The iterator is lazy and single-pass. The read transaction stays
        open until the iterator is exhausted or closed, so an exception
        raised by the consumer aborts the traversal.
        """
        pass

    @abstractmethod
    def delete_list(self, name: str) -> None:
        """
        Delete a list and all of its rows.

        Raises:
            NotFoundError: If the list does not exist.
        """
        pass

    # List row operations

    @abstractmethod
    def create_row(self, list_name: str, row: Row) -> None:
        """
        Insert a row; never overwrites.

        Raises:
            NotFoundError: If the list does not exist.
            AlreadyExistsError: If row.key is already present in the list.
        """
        pass

    @abstractmethod
    def read_row(self, list_name: str, key: str | bytes) -> Row:
        """
        Read a single row.

        Raises:
            NotFoundError: If the list or the key does not exist.
        """
        pass

    @abstractmethod
    def read_row_page(self, list_name: str, page_index: int, page_size: int) -> list[Row]:
        """
        Read the rows at positions [page_index * page_size, page_index * page_size + page_size).

        Args:
            list_name: The list to read.
            page_index: Zero-based page number.
            page_size: Number of rows per page.

        Returns:
            Rows in ascending key order; fewer than page_size on the last
            page, empty when the window starts past the end.

        Raises:
            NotFoundError: If the list does not exist.
            ValueError: If page_index is negative or page_size is not positive.
        """
        pass

    @abstractmethod
    def read_each_row(self, list_name: str) -> Iterator[Row]:
        """
        Iterate over every row of a list in ascending key order.

        Raises:
            NotFoundError: When iteration starts and the list does not exist.
        """
        pass

    @abstractmethod
    def update_row(self, list_name: str, key: str | bytes, new_value: str | bytes) -> None:
        """
        Overwrite the value of an existing row (never an upsert).

        Raises:
            NotFoundError: If the list or the key does not exist.
        """
        pass

    @abstractmethod
    def delete_row(self, list_name: str, key: str | bytes) -> None:
        """
        Remove a row.

        Raises:
            NotFoundError: If the list or the key does not exist.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the engine handle."""
        pass

    @staticmethod
    def _list_key(name: str) -> bytes:
        """Validate a list name and encode it for the engine."""
        if not isinstance(name, str):
            raise TypeError(f"list name must be str, got {type(name).__name__}")
        if not name:
            raise ValueError("list name cannot be empty")
        return name.encode("utf-8", "surrogateescape")

    @staticmethod
    def _row_key(key: str | bytes) -> bytes:
        """Validate a row key and encode it for the engine."""
        encoded = to_bytes(key)
        if not encoded:
            raise ValueError("row key cannot be empty")
        return encoded

    def __enter__(self) -> "ListStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

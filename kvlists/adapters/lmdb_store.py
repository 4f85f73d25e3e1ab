"""
LMDBListStore - List store backed by an LMDB environment.
"""

import logging
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import lmdb

from kvlists.engine.pagination import PageWindow
from kvlists.interfaces.list_store import ListStore
from kvlists.models.exceptions import AlreadyExistsError, NotFoundError, StorageFaultError
from kvlists.models.row import Row, to_bytes

logger = logging.getLogger(__name__)


def _decode(key: bytes) -> str:
    return key.decode("utf-8", errors="replace")


class LMDBListStore(ListStore):
    """
    List store over a single-file LMDB environment.

    Layout:
    - Each list is an LMDB named database.
    - The main database holds only the named-database records, so it is
      used to enumerate lists and to check their existence.

    LMDB serializes writers and gives every read transaction a consistent
    snapshot, so no extra locking is needed around transactions. The only
    lock guards the cache of named-database handles.
    """

    # Maximum size the memory map (and the file) may grow to (1GB)
    DEFAULT_MAP_SIZE = 1024 * 1024 * 1024

    # Maximum number of lists (LMDB named databases)
    DEFAULT_MAX_LISTS = 128

    # Seconds to keep retrying while the environment is locked
    DEFAULT_OPEN_TIMEOUT = 2.0

    OPEN_RETRY_INTERVAL = 0.05

    def __init__(
        self,
        path: str,
        map_size: int = DEFAULT_MAP_SIZE,
        max_lists: int = DEFAULT_MAX_LISTS,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        """
        Open (or create) the store.

        Args:
            path: Path of the LMDB data file. A "<path>-lock" file is created next to it.
            map_size: Maximum size of the data file in bytes.
            max_lists: Maximum number of lists the environment can hold.
            open_timeout: Seconds to wait for a locked environment before failing.

        Raises:
            ValueError: If an argument is out of range.
            PermissionError: If the parent directory is not writable.
            StorageFaultError: If the environment cannot be opened in time.
        """
        if not path or not path.strip():
            raise ValueError("path cannot be empty")
        if map_size <= 0:
            raise ValueError(f"map_size must be positive, got {map_size}")
        if max_lists <= 0:
            raise ValueError(f"max_lists must be positive, got {max_lists}")
        if open_timeout < 0:
            raise ValueError(f"open_timeout must be >= 0, got {open_timeout}")

        path = os.path.abspath(path)
        parent = os.path.dirname(path)
        if not os.path.isdir(parent):
            raise FileNotFoundError(f"Parent directory does not exist: {parent}")
        if not os.access(parent, os.W_OK):
            raise PermissionError(f"Parent directory not writable: {parent}")

        self._path = path
        self._env = self._open_env(path, map_size, max_lists, open_timeout)

        # Named database handles by encoded list name
        self._handles: dict[bytes, Any] = {}
        self._handles_lock = threading.Lock()

        # Upper bound for both list names and row keys (511 bytes by default)
        self._max_key_size = self._env.max_key_size()

        logger.info(f"Opened LMDB list store at {path}")

    @classmethod
    def _open_env(
        cls, path: str, map_size: int, max_lists: int, open_timeout: float
    ) -> lmdb.Environment:
        deadline = time.monotonic() + open_timeout
        while True:
            try:
                return lmdb.open(path, subdir=False, map_size=map_size, max_dbs=max_lists)
            except lmdb.LockError as e:
                if time.monotonic() >= deadline:
                    raise StorageFaultError(
                        f"open {path}: still locked after {open_timeout}s"
                    ) from e
                logger.warning(f"LMDB environment {path} is locked, retrying: {e}")
                time.sleep(cls.OPEN_RETRY_INTERVAL)
            except lmdb.Error as e:
                raise StorageFaultError(f"open {path}: {e}") from e

    @contextmanager
    def _transaction(self, write: bool = False) -> Iterator[lmdb.Transaction]:
        """
        Run a block in one LMDB transaction.

        Commits on success, aborts on any exception. Engine errors are
        re-raised as StorageFaultError; everything else propagates as is.
        """
        try:
            with self._env.begin(write=write) as txn:
                yield txn
        except lmdb.Error as e:
            raise StorageFaultError(str(e)) from e

    def _handle(self, key: bytes, list_name: str) -> Any:
        """Return the cached named-database handle for a list, opening it if needed."""
        with self._handles_lock:
            db = self._handles.get(key)
            if db is not None:
                return db
            if not self._fits(key):
                raise NotFoundError(list_name)
            try:
                # Uses its own short write transaction, so it must never be
                # called while this thread holds a write transaction.
                db = self._env.open_db(key, create=False)
            except lmdb.NotFoundError:
                raise NotFoundError(list_name) from None
            except lmdb.Error as e:
                raise StorageFaultError(f"open list {list_name!r}: {e}") from e
            self._handles[key] = db
            return db

    def _fits(self, key: bytes) -> bool:
        return len(key) <= self._max_key_size

    def _check_key_size(self, key: bytes, what: str) -> None:
        if not self._fits(key):
            raise ValueError(
                f"{what} is {len(key)} bytes, the maximum is {self._max_key_size}"
            )

    @staticmethod
    def _check_list(txn: lmdb.Transaction, key: bytes, list_name: str) -> None:
        """Raise NotFoundError unless the list exists in this transaction's snapshot."""
        if txn.get(key) is None:
            raise NotFoundError(list_name)

    # General information

    def size(self) -> int:
        try:
            info = self._env.info()
            stat = self._env.stat()
        except lmdb.Error as e:
            raise StorageFaultError(str(e)) from e
        return (info["last_pgno"] + 1) * stat["psize"]

    def disk_size(self) -> int:
        try:
            return os.stat(self.disk_path()).st_size
        except OSError as e:
            raise StorageFaultError(f"stat {self.disk_path()}: {e}") from e

    def disk_path(self) -> str:
        return self._path

    def num_lists(self) -> int:
        with self._transaction() as txn:
            return sum(1 for _ in txn.cursor().iternext(values=False))

    def num_rows(self, list_name: str) -> int:
        key = self._list_key(list_name)
        db = self._handle(key, list_name)
        with self._transaction() as txn:
            self._check_list(txn, key, list_name)
            return txn.stat(db)["entries"]

    # List operations

    def list_exists(self, name: str) -> bool:
        key = self._list_key(name)
        with self._transaction() as txn:
            return self._fits(key) and txn.get(key) is not None

    def create_list(self, name: str) -> None:
        key = self._list_key(name)
        self._check_key_size(key, "list name")
        with self._transaction(write=True) as txn:
            if txn.get(key) is not None:
                raise AlreadyExistsError(name)
            db = self._env.open_db(key, txn=txn, create=True)

        # Handle becomes usable by other transactions once committed
        with self._handles_lock:
            self._handles[key] = db
        logger.info(f"Created list {name!r}")

    def read_each_list(self) -> Iterator[str]:
        with self._transaction() as txn:
            for key in txn.cursor().iternext(values=False):
                yield key.decode("utf-8", "surrogateescape")

    def delete_list(self, name: str) -> None:
        key = self._list_key(name)
        db = self._handle(key, name)
        with self._transaction(write=True) as txn:
            self._check_list(txn, key, name)
            txn.drop(db, delete=True)

        with self._handles_lock:
            self._handles.pop(key, None)
        logger.info(f"Deleted list {name!r}")

    # List row operations

    def create_row(self, list_name: str, row: Row) -> None:
        key = self._list_key(list_name)
        row_key = self._row_key(row.key)
        self._check_key_size(row_key, "row key")
        db = self._handle(key, list_name)
        with self._transaction(write=True) as txn:
            self._check_list(txn, key, list_name)
            if not txn.put(row_key, row.value, db=db, overwrite=False):
                raise AlreadyExistsError(row.key_str)
        logger.debug(f"Created row {row.key_str!r} in {list_name!r}")

    def read_row(self, list_name: str, key: str | bytes) -> Row:
        list_key = self._list_key(list_name)
        row_key = self._row_key(key)
        db = self._handle(list_key, list_name)
        with self._transaction() as txn:
            self._check_list(txn, list_key, list_name)
            value = txn.get(row_key, db=db) if self._fits(row_key) else None
            if value is None:
                raise NotFoundError(_decode(row_key))
            return Row(row_key, value)

    def read_row_page(self, list_name: str, page_index: int, page_size: int) -> list[Row]:
        window = PageWindow(page_index, page_size)
        key = self._list_key(list_name)
        db = self._handle(key, list_name)
        with self._transaction() as txn:
            self._check_list(txn, key, list_name)
            return window.select(Row(k, v) for k, v in txn.cursor(db=db))

    def read_each_row(self, list_name: str) -> Iterator[Row]:
        key = self._list_key(list_name)
        db = self._handle(key, list_name)
        with self._transaction() as txn:
            self._check_list(txn, key, list_name)
            for k, v in txn.cursor(db=db):
                yield Row(k, v)

    def update_row(self, list_name: str, key: str | bytes, new_value: str | bytes) -> None:
        list_key = self._list_key(list_name)
        row_key = self._row_key(key)
        db = self._handle(list_key, list_name)
        with self._transaction(write=True) as txn:
            self._check_list(txn, list_key, list_name)
            if not self._fits(row_key) or txn.get(row_key, db=db) is None:
                raise NotFoundError(_decode(row_key))
            txn.put(row_key, to_bytes(new_value), db=db)
        logger.debug(f"Updated row {key!r} in {list_name!r}")

    def delete_row(self, list_name: str, key: str | bytes) -> None:
        list_key = self._list_key(list_name)
        row_key = self._row_key(key)
        db = self._handle(list_key, list_name)
        with self._transaction(write=True) as txn:
            self._check_list(txn, list_key, list_name)
            if not self._fits(row_key) or not txn.delete(row_key, db=db):
                raise NotFoundError(_decode(row_key))
        logger.debug(f"Deleted row {key!r} from {list_name!r}")

    def close(self) -> None:
        with self._handles_lock:
            self._handles.clear()
        self._env.close()
        logger.info(f"Closed LMDB list store at {self._path}")

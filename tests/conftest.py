"""
Shared pytest fixtures for list store tests.
"""

import os
import tempfile

import pytest

from kvlists.adapters import LMDBListStore, MemoryListStore
from kvlists.models.row import Row


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    """Provide a path for an LMDB data file."""
    return os.path.join(temp_dir, "test.lmdb")


@pytest.fixture
def lmdb_store(db_path):
    """Provide an open LMDB-backed store."""
    with LMDBListStore(db_path, map_size=64 * 1024 * 1024) as store:
        yield store


@pytest.fixture
def memory_store():
    """Provide an in-memory store."""
    with MemoryListStore() as store:
        yield store


@pytest.fixture(params=["lmdb", "memory"])
def store(request, db_path):
    """Provide each store backend in turn."""
    if request.param == "lmdb":
        backend = LMDBListStore(db_path, map_size=64 * 1024 * 1024)
    else:
        backend = MemoryListStore()
    with backend:
        yield backend


@pytest.fixture
def fruit_store(store):
    """Store with lists "a" (apple, pear) and "b" (grape)."""
    store.create_list("a")
    store.create_list("b")
    store.create_row("a", Row("1", "apple"))
    store.create_row("a", Row("2", "pear"))
    store.create_row("b", Row("1", "grape"))
    return store


@pytest.fixture
def logs_store(store):
    """Store with list "logs" holding keys "01".."25"."""
    store.create_list("logs")
    for i in range(1, 26):
        store.create_row("logs", Row(f"{i:02d}", f"entry {i}"))
    return store

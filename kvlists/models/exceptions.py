"""
Custom exceptions for the list store.
"""


class KVListsError(Exception):
    """Base exception for all list store errors."""


class NotFoundError(KVListsError):
    """
    Raised when a referenced list or row key does not exist.

    Attributes:
        identifier: Name of the missing list or key.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f'"{identifier}" not found')


class AlreadyExistsError(KVListsError):
    """
    Raised when a create operation targets an existing list or row key.

    Attributes:
        identifier: Name of the conflicting list or key.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f'"{identifier}" already exists')


class StorageFaultError(KVListsError):
    """
    Raised for failures surfaced by the underlying storage engine.

    Covers I/O errors, corruption and lock timeouts at open. The lmdb
    engine exception is chained as __cause__.
    """


class InvalidPatternError(ValueError):
    """Raised when a search pattern is not a valid regular expression."""

"""
Row - A key/value pair stored in a list.
"""

from dataclasses import dataclass


def to_bytes(data: str | bytes) -> bytes:
    """
    Encode a key, value or list name for the storage engine.

    Args:
        data: Text (encoded as UTF-8) or raw bytes.

    Returns:
        The byte representation.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(f"expected str or bytes, got {type(data).__name__}")


@dataclass(frozen=True)
class Row:
    """
    A key/value pair belonging to exactly one list.

    Keys are unique within a list and rows are ordered by the ascending
    byte order of their keys.

    Attributes:
        key: Raw key bytes.
        value: Raw value bytes.
    """

    key: bytes
    value: bytes

    def __post_init__(self) -> None:
        """Normalize str/bytearray inputs to bytes."""
        object.__setattr__(self, "key", to_bytes(self.key))
        object.__setattr__(self, "value", to_bytes(self.value))

    def key_size(self) -> int:
        return len(self.key)

    def value_size(self) -> int:
        return len(self.value)

    def size(self) -> int:
        """Size in bytes used for statistics (key + value)."""
        return self.key_size() + self.value_size()

    @property
    def key_str(self) -> str:
        return self.key.decode("utf-8", errors="replace")

    @property
    def value_str(self) -> str:
        return self.value.decode("utf-8", errors="replace")

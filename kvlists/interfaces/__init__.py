"""
Abstract base classes for list store backends.
"""

from kvlists.interfaces.list_store import ListStore

__all__ = ["ListStore"]

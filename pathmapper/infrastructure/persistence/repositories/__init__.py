"""Concrete repository and store implementations.

TreeRepository maps registered record types onto store paths; SqlStore is
the SQLAlchemy-backed store adapter.
"""

from .store import SqlStore, create_schema
from .tree import TreeRepository

__all__ = [
    "SqlStore",
    "TreeRepository",
    "create_schema",
]

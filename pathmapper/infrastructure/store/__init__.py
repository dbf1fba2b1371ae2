"""Store adapter building blocks and the in-memory adapter.

The SQL adapter lives with the other SQLAlchemy code in
pathmapper.infrastructure.persistence.
"""

from .hub import SubscriptionHub
from .memory import MemoryStore
from .query import apply_query, sort_key

__all__ = [
    "MemoryStore",
    "SubscriptionHub",
    "apply_query",
    "sort_key",
]

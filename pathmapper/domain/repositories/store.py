"""Store adapter interface.

The store is a JSON tree addressed by "/"-separated paths. Adapters provide
point reads, live subscriptions, atomic multi-path writes and single-path
read-modify-write transactions; query translation and delivery mechanics
are adapter concerns.

Concrete implementations live in pathmapper/infrastructure/store/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

from pathmapper.domain.models.query import QuerySpec
from pathmapper.domain.models.records import Abort, TransactionResult

Children = list[tuple[str, Any]]
TransactionFn = Callable[[Any], Any | Abort]


class StoreAdapter(ABC):
    """Abstract access to a hierarchical data store."""

    @abstractmethod
    async def read_once(self, path: str) -> Any | None:
        """Return the value at path, or None when nothing is stored there."""

    @abstractmethod
    def subscribe(self, path: str, query: QuerySpec | None = None) -> AsyncIterator[Any]:
        """Stream the value at path: the current value first, then every change.

        Without a query each emission is the raw value (or None). With a
        query each emission is the ordered Children of path that match it.
        Closing the iterator unsubscribes.
        """

    @abstractmethod
    async def atomic_update(self, updates: Mapping[str, Any]) -> None:
        """Apply every path -> value write at once; None deletes the path.

        Raises on failure, in which case nothing was applied.
        """

    @abstractmethod
    async def transact(self, path: str, fn: TransactionFn) -> TransactionResult[Any]:
        """Atomically replace the value at path with fn(current).

        fn may return ABORT to leave the value untouched.
        """

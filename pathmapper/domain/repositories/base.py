"""Generic repository base interface.

Repository[T] is the root abstraction for mapping record types onto store
paths. The concrete implementation lives in
pathmapper/infrastructure/persistence/repositories/ and is bound to an
explicit Session at construction time.

Design notes:
  - Finders are live: they return async iterators that emit the current
    value and then every change, and never complete by themselves. The
    *_once variants take the first emission and unsubscribe.
  - Records come back wrapped in Tracked; mutate through the wrapper so the
    session can diff the next save against the pre-mutation state.
  - save() and delete() only buffer writes; nothing reaches the store until
    the owning session commits.
  - bindings supply the values of the pattern's bound segments; an "id"
    key is never accepted there (pass id explicitly).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from typing import Generic, TypeVar

from pathmapper.domain.models.query import QueryFunc
from pathmapper.domain.models.records import Abort, TransactionResult
from pathmapper.domain.models.tracking import Tracked

T = TypeVar("T")
X = TypeVar("X")

Bindings = Mapping[str, str]


async def take_first(stream: AsyncIterator[X]) -> X:
    """Await the first emission of a stream, then close it."""
    try:
        return await anext(stream)
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()


class Repository(ABC, Generic[T]):
    """Abstract path-mapped access to one record type."""

    @abstractmethod
    def find_by_id(self, id: str, bindings: Bindings | None = None) -> AsyncIterator[Tracked[T] | None]:
        """Stream the record stored under id (None while it does not exist)."""

    async def find_by_id_once(self, id: str, bindings: Bindings | None = None) -> Tracked[T] | None:
        return await take_first(self.find_by_id(id, bindings))

    @abstractmethod
    def find_all(
        self,
        query: QueryFunc | None = None,
        bindings: Bindings | None = None,
    ) -> AsyncIterator[list[Tracked[T]]]:
        """Stream the records of a collection matching an optional query."""

    async def find_all_once(
        self,
        query: QueryFunc | None = None,
        bindings: Bindings | None = None,
    ) -> list[Tracked[T]]:
        return await take_first(self.find_all(query, bindings))

    @abstractmethod
    def scan(
        self,
        query: QueryFunc | None = None,
        bindings: Bindings | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[list[Tracked[T]]]:
        """Yield non-overlapping pages covering the whole query result."""

    @abstractmethod
    def save(self, record: T | Tracked[T]) -> None:
        """Buffer the record's current state at the path its bindings describe."""

    @abstractmethod
    def delete(self, record: T | Tracked[T]) -> None:
        """Buffer removal of the record at the path its bindings describe."""

    @abstractmethod
    def delete_by_id(self, id: str, bindings: Bindings | None = None) -> None:
        """Buffer removal of the record stored under id."""

    def delete_all(self, records: Iterable[T | Tracked[T]]) -> None:
        for record in records:
            self.delete(record)

    @abstractmethod
    async def update_in_transaction(
        self,
        record: T | Tracked[T],
        fn: Callable[[T | None], T | None | Abort],
    ) -> TransactionResult[T]:
        """Atomic read-modify-write of one record, bypassing the session."""

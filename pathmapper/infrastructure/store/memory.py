"""In-memory store adapter.

Holds the whole tree as nested dicts. Useful for tests and for embedding;
data is lost when the process ends.

Example:
    store = MemoryStore({"products": {"p1": {"price": 123}}})
    await store.read_once("/products/p1")           # {"price": 123}
    await store.atomic_update({"/products/p1/price": 456, "/products/p2": None})
"""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator, Mapping
from typing import Any

from pathmapper.domain.models.query import QuerySpec
from pathmapper.domain.models.records import ABORT, TransactionResult
from pathmapper.domain.repositories.store import StoreAdapter, TransactionFn

from .hub import SubscriptionHub
from .query import apply_query
from .tree import normalize, read_node, split, write_node


class MemoryStore(StoreAdapter):
    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._root: dict[str, Any] = normalize(data) or {}
        self._hub = SubscriptionHub()

    @property
    def subscriber_count(self) -> int:
        return len(self._hub)

    def dump(self) -> dict[str, Any]:
        """Deep copy of the whole tree."""
        return copy.deepcopy(self._root)

    async def read_once(self, path: str) -> Any | None:
        return copy.deepcopy(read_node(self._root, split(path)))

    def subscribe(self, path: str, query: QuerySpec | None = None) -> AsyncIterator[Any]:
        if query is None:
            return self._hub.watch(path, lambda: self.read_once(path))

        async def read_children() -> list[tuple[str, Any]]:
            return apply_query(await self.read_once(path), query)

        return self._hub.watch(path, read_children)

    async def set(self, path: str, value: Any) -> None:
        """Write a single path (None deletes)."""
        await self.atomic_update({path: value})

    async def atomic_update(self, updates: Mapping[str, Any]) -> None:
        root = copy.deepcopy(self._root)
        for path, value in updates.items():
            root = write_node(root, split(path), value)
        self._root = root
        self._hub.notify(updates.keys())

    async def transact(self, path: str, fn: TransactionFn) -> TransactionResult[Any]:
        # No await between read and write: atomic on the event loop.
        keys = split(path)
        current = copy.deepcopy(read_node(self._root, keys))
        result = fn(current)
        if result is ABORT:
            return TransactionResult(committed=False, value=current)

        self._root = write_node(copy.deepcopy(self._root), keys, result)
        self._hub.notify([path])
        return TransactionResult(committed=True, value=copy.deepcopy(read_node(self._root, keys)))

"""Session: the explicit unit of work that repositories are bound to.

    session = Session(MemoryStore())
    products = session.repository(Product)

    product = await products.find_by_id_once("p1", {"country": "uk"})
    product.set(price=456)
    products.save(product)
    await session.commit()

Used as an async context manager, a Session commits when the block exits
cleanly and discards its buffered writes when it raises.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from pathmapper.domain.models.records import RecordT
from pathmapper.domain.repositories.store import StoreAdapter
from pathmapper.domain.services.registry import EntityRegistry, default_registry
from pathmapper.domain.services.unit_of_work import UnitOfWork
from pathmapper.infrastructure.persistence.repositories import SqlStore, TreeRepository


class Session:
    def __init__(
        self,
        store: StoreAdapter,
        registry: EntityRegistry | None = None,
        page_size: int | None = None,
    ) -> None:
        self._unit_of_work = UnitOfWork(store)
        self._registry = registry if registry is not None else default_registry
        self._page_size = page_size

    @property
    def store(self) -> StoreAdapter:
        return self._unit_of_work.store

    @property
    def unit_of_work(self) -> UnitOfWork:
        return self._unit_of_work

    def repository(self, cls: type[RecordT]) -> TreeRepository[RecordT]:
        """Repository for a registered record type, bound to this session."""
        return TreeRepository(self._unit_of_work, cls, self._registry, self._page_size)

    async def commit(self) -> None:
        await self._unit_of_work.commit()

    def discard(self) -> None:
        self._unit_of_work.discard()

    def get_updates(self) -> dict[str, Any]:
        return self._unit_of_work.get_updates()

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            await self.commit()
        else:
            self.discard()


async def get_session(
    store: StoreAdapter | None = None,
    registry: EntityRegistry | None = None,
) -> AsyncGenerator[Session, None]:
    """Dependency that yields a Session committed when the caller finishes.

    Defaults to a SqlStore over the configured database and the default
    registry.
    """
    async with Session(store if store is not None else SqlStore(), registry) as session:
        yield session

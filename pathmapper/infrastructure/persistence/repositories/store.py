"""SQLAlchemy implementation of StoreAdapter.

The tree is stored as one row per leaf (see Node). Every public operation
runs in its own AsyncSession; writes run inside a single transaction, so an
atomic_update either applies every path or none.

Live subscriptions are served in-process: they observe writes made through
this SqlStore instance, not writes made by other processes.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pathmapper.domain.models.query import QuerySpec
from pathmapper.domain.models.records import ABORT, TransactionResult
from pathmapper.domain.repositories.store import StoreAdapter, TransactionFn
from pathmapper.infrastructure.database import AsyncSessionLocal, Base
from pathmapper.infrastructure.persistence.models.nodes import Node
from pathmapper.infrastructure.store.hub import SubscriptionHub
from pathmapper.infrastructure.store.query import apply_query
from pathmapper.infrastructure.store.tree import flatten, join, normalize, split, unflatten

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the nodes table (deployments use the alembic migrations)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class SqlStore(StoreAdapter):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory if session_factory is not None else AsyncSessionLocal
        self._hub = SubscriptionHub()

    async def read_once(self, path: str) -> Any | None:
        async with self._session_factory() as session:
            return await self._read(session, path)

    def subscribe(self, path: str, query: QuerySpec | None = None) -> AsyncIterator[Any]:
        if query is None:
            return self._hub.watch(path, lambda: self.read_once(path))

        async def read_children() -> list[tuple[str, Any]]:
            return apply_query(await self.read_once(path), query)

        return self._hub.watch(path, read_children)

    async def atomic_update(self, updates: Mapping[str, Any]) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                for path, value in updates.items():
                    await self._write(session, path, value)
        logger.debug("Applied %d path update(s)", len(updates))
        self._hub.notify(updates.keys())

    async def transact(self, path: str, fn: TransactionFn) -> TransactionResult[Any]:
        async with self._session_factory() as session:
            async with session.begin():
                current = await self._read(session, path, for_update=True)
                result = fn(copy.deepcopy(current))
                if result is ABORT:
                    return TransactionResult(committed=False, value=current)
                await self._write(session, path, result)
                final = await self._read(session, path)
        self._hub.notify([path])
        return TransactionResult(committed=True, value=final)

    # --- row mapping ---

    @staticmethod
    async def _read(session: AsyncSession, path: str, for_update: bool = False) -> Any | None:
        keys = split(path)
        base = join(keys)
        stmt = (
            select(Node.path, Node.value)
            .where(or_(Node.path == base, _in_subtree(base)))
            .order_by(Node.path)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return unflatten(result.all(), keys)

    @staticmethod
    async def _write(session: AsyncSession, path: str, value: Any) -> None:
        keys = split(path)
        base = join(keys)
        await session.execute(
            delete(Node).where(or_(Node.path == base, _in_subtree(base))),
            execution_options={"synchronize_session": False},
        )

        value = normalize(value)
        if value is None:
            return
        if not keys and not isinstance(value, dict):
            raise ValueError("The store root can only hold an object")

        # A leaf stored above this path would shadow the new subtree.
        ancestors = [join(keys[:i]) for i in range(1, len(keys))]
        if ancestors:
            await session.execute(
                delete(Node).where(Node.path.in_(ancestors)),
                execution_options={"synchronize_session": False},
            )

        rows = [{"path": p, "value": v} for p, v in flatten(value, keys).items()]
        await session.execute(insert(Node), rows)


def _in_subtree(base: str):
    # substr rather than LIKE: SQLite LIKE ignores case.
    prefix = base.rstrip("/") + "/"
    return func.substr(Node.path, 1, len(prefix)) == prefix

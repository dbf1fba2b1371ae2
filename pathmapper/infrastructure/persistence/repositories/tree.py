"""Path-mapped implementation of Repository.

A TreeRepository binds one registered record type to a UnitOfWork. Reads go
straight to the store adapter and come back stamped with id and binding
values and wrapped in Tracked; writes are buffered in the unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import aclosing
from typing import Any

from pathmapper.domain.exceptions import ExtraBinding, InvalidRecordData, MissingBinding
from pathmapper.domain.models.paths import ID_BINDING, PathPattern, child_path
from pathmapper.domain.models.query import QueryFunc, QuerySpec, build_spec
from pathmapper.domain.models.records import ABORT, Abort, RecordT, TransactionResult
from pathmapper.domain.models.tracking import Tracked
from pathmapper.domain.repositories.base import Bindings, Repository, take_first
from pathmapper.domain.services.pagination import next_page_spec
from pathmapper.domain.services.registry import EntityRegistry, default_registry
from pathmapper.domain.services.unit_of_work import UnitOfWork
from pathmapper.infrastructure.database import settings

logger = logging.getLogger(__name__)


def _unwrap(record: RecordT | Tracked[RecordT]) -> RecordT:
    return record.record if isinstance(record, Tracked) else record


class TreeRepository(Repository[RecordT]):
    def __init__(
        self,
        unit_of_work: UnitOfWork,
        cls: type[RecordT],
        registry: EntityRegistry | None = None,
        page_size: int | None = None,
    ) -> None:
        self._uow = unit_of_work
        self._store = unit_of_work.store
        self._cls = cls
        self._pattern = (registry if registry is not None else default_registry).lookup(cls)
        self._page_size = page_size if page_size is not None else settings.scan_page_size

    @property
    def pattern(self) -> PathPattern:
        return self._pattern

    # --- reads ---

    def find_by_id(self, id: str, bindings: Bindings | None = None) -> AsyncIterator[Tracked[RecordT] | None]:
        values = self._bindings(bindings)
        path = self._record_path(id, values)
        return self._watch_record(path, id, values)

    def find_all(
        self,
        query: QueryFunc | None = None,
        bindings: Bindings | None = None,
    ) -> AsyncIterator[list[Tracked[RecordT]]]:
        values = self._bindings(bindings)
        path = self._pattern.resolve_collection(values)
        return self._watch_collection(path, build_spec(query), values)

    def scan(
        self,
        query: QueryFunc | None = None,
        bindings: Bindings | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[list[Tracked[RecordT]]]:
        values = self._bindings(bindings)
        path = self._pattern.resolve_collection(values)
        size = page_size if page_size is not None else self._page_size
        if size < 1:
            raise ValueError(f"page_size must be positive, got {size}")
        return self._pages(path, query, values, size)

    # --- writes ---

    def save(self, record: RecordT | Tracked[RecordT]) -> None:
        record = _unwrap(record)
        self._uow.save(record, self._path_of(record), self._pattern.binding_names)

    def delete(self, record: RecordT | Tracked[RecordT]) -> None:
        self._uow.delete(self._path_of(_unwrap(record)))

    def delete_by_id(self, id: str, bindings: Bindings | None = None) -> None:
        self._uow.delete(self._record_path(id, self._bindings(bindings)))

    async def update_in_transaction(
        self,
        record: RecordT | Tracked[RecordT],
        fn: Callable[[RecordT | None], RecordT | None | Abort],
    ) -> TransactionResult[RecordT]:
        record = _unwrap(record)
        path = self._path_of(record)
        values = self._pattern.extract_bindings(record)
        record_id = values.pop(ID_BINDING)

        def apply(current: Any) -> Any:
            result = fn(self._load(current, record_id, values, path) if current is not None else None)
            if result is ABORT or result is None:
                return result
            return self._uow.snapshot(result, self._pattern.binding_names)

        outcome = await self._store.transact(path, apply)
        value = self._load(outcome.value, record_id, values, path) if outcome.value is not None else None
        logger.debug("Transaction on %s %s", path, "committed" if outcome.committed else "aborted")
        return TransactionResult(committed=outcome.committed, value=value)

    # --- internals ---

    @staticmethod
    def _bindings(bindings: Bindings | None) -> dict[str, Any]:
        values = dict(bindings or {})
        if ID_BINDING in values:
            raise ExtraBinding(ID_BINDING)
        return values

    def _record_path(self, id: str, values: Mapping[str, Any]) -> str:
        if not id:
            raise MissingBinding(ID_BINDING)
        return self._pattern.resolve({**values, ID_BINDING: id})

    def _path_of(self, record: RecordT) -> str:
        bindings = self._pattern.extract_bindings(record)
        if not bindings[ID_BINDING]:
            raise MissingBinding(ID_BINDING)
        return self._pattern.resolve(bindings)

    def _load(self, data: Any, id: str, values: Mapping[str, Any], path: str) -> RecordT:
        if not isinstance(data, Mapping):
            raise InvalidRecordData(path, data)
        return self._cls.model_validate({**data, **values, ID_BINDING: id})

    def _track(self, record: RecordT, path: str) -> Tracked[RecordT]:
        exclude = self._pattern.binding_names
        return Tracked(record, lambda r: self._uow.add_to_cache(r, path, exclude))

    def _tracked_children(
        self, path: str, children: list[tuple[str, Any]], values: Mapping[str, Any]
    ) -> list[Tracked[RecordT]]:
        tracked = []
        for key, data in children:
            location = child_path(path, key)
            if not isinstance(data, Mapping):
                logger.warning("Skipping %s: stored value is not a record", location)
                continue
            tracked.append(self._track(self._load(data, key, values, location), location))
        return tracked

    async def _watch_record(
        self, path: str, id: str, values: Mapping[str, Any]
    ) -> AsyncIterator[Tracked[RecordT] | None]:
        async with aclosing(self._store.subscribe(path)) as stream:
            async for data in stream:
                yield self._track(self._load(data, id, values, path), path) if data is not None else None

    async def _watch_collection(
        self, path: str, spec: QuerySpec, values: Mapping[str, Any]
    ) -> AsyncIterator[list[Tracked[RecordT]]]:
        async with aclosing(self._store.subscribe(path, spec)) as stream:
            async for children in stream:
                yield self._tracked_children(path, children, values)

    async def _pages(
        self, path: str, query: QueryFunc | None, values: Mapping[str, Any], page_size: int
    ) -> AsyncIterator[list[Tracked[RecordT]]]:
        last: tuple[str, Any] | None = None
        pages = 0
        while True:
            spec = next_page_spec(build_spec(query), last, page_size)
            children = await take_first(self._store.subscribe(path, spec))
            if not children:
                logger.debug("Scan of %s finished after %d page(s)", path, pages)
                return
            last = children[-1]
            pages += 1
            logger.debug(
                "Scan of %s: page %d, %d record(s), last id %s", path, pages, len(children), last[0]
            )
            page = self._tracked_children(path, children, values)
            if page:
                yield page

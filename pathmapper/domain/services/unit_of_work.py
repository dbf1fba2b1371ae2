"""Unit-of-work session: snapshot cache, write buffer and atomic commit.

State
  cache    resolved path -> snapshot of the record last read or saved there
  writes   absolute path -> value, or None to delete (last write wins)
  inserts  resolved paths saved wholesale and not yet committed

Saving a record that has a cached snapshot buffers only the differences, at
sub-paths of the record's path. Saving a record with no snapshot (or one
whose path is already an uncommitted insert, or has a pending delete)
buffers the whole record. Nothing reaches the store until commit().

The write buffer is kept prefix-free: writing a path drops buffered writes
below it, and writing below an already-buffered path merges into that
path's value. The store receives one unambiguous multi-path update.

Cache admission: reads only enter the cache while the buffer is empty. Once
a write is pending, the session's view has diverged from the store's last
known state, and a later diff against newer data would silently fold those
uncommitted writes away. This is a consistency trade-off, not an eviction
policy; optimistic conflict detection would be the refinement if needed.

A UnitOfWork is not safe for concurrent use. Use one per logical unit of
work (request, job) or serialize access externally.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from pathmapper.domain.exceptions import CommitFailed
from pathmapper.domain.models.paths import ID_BINDING
from pathmapper.domain.repositories.store import StoreAdapter

from .diff import compare

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, store: StoreAdapter) -> None:
        self.store = store
        self._cache: dict[str, dict[str, Any]] = {}
        self._writes: dict[str, Any] = {}
        self._inserts: set[str] = set()

    @staticmethod
    def snapshot(record: BaseModel, exclude: Iterable[str] = ()) -> dict[str, Any]:
        """Deep, JSON-compatible clone of a record without id and bindings."""
        return record.model_dump(
            mode="json",
            exclude={ID_BINDING, *exclude},
            exclude_none=True,
        )

    # --- buffering ---

    def save(self, record: BaseModel, path: str, exclude: Iterable[str] = ()) -> None:
        """Buffer the record's state at path (see module docstring)."""
        candidate = self.snapshot(record, exclude)

        if path in self._inserts or self._delete_pending(path):
            self._cache.pop(path, None)
            self._put(path, candidate)
            self._inserts.add(path)
            return

        cached = self._cache.get(path)
        if cached is not None:
            for op in compare(cached, candidate):
                self._put(path + op.path, None if op.op == "remove" else op.value)
            self._cache[path] = candidate
            return

        self._put(path, candidate)
        self._inserts.add(path)

    def delete(self, path: str) -> None:
        """Buffer a delete; supersedes anything buffered at or below path."""
        self._put(path, None)
        self._inserts.discard(path)

    def delete_all(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.delete(path)

    def add_to_cache(self, record: BaseModel, path: str, exclude: Iterable[str] = ()) -> None:
        """Admit a read into the cache, unless writes are pending."""
        if self._writes:
            logger.debug("Not caching %s: %d write(s) pending", path, len(self._writes))
            return
        self._cache[path] = self.snapshot(record, exclude)

    def discard(self) -> None:
        """Drop all buffered writes without applying them."""
        self._writes.clear()
        self._inserts.clear()

    # --- commit ---

    async def commit(self) -> None:
        """Apply the buffer as one atomic multi-path update.

        Raises CommitFailed if the store rejects the update; the buffer is
        left untouched so commit() can be retried as is.
        """
        if not self._writes:
            logger.debug("Nothing to commit")
            return

        updates = dict(self._writes)
        try:
            await self.store.atomic_update(updates)
        except Exception as exc:
            logger.warning("Commit of %d write(s) failed: %s", len(updates), exc)
            raise CommitFailed(exc) from exc

        for path, value in updates.items():
            if value is None:
                self._forget(path)
        self._writes.clear()
        self._inserts.clear()
        logger.debug("Committed %d write(s)", len(updates))

    # --- inspection ---

    def get_updates(self) -> dict[str, Any]:
        return copy.deepcopy(self._writes)

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._writes)

    def is_insert(self, path: str) -> bool:
        return path in self._inserts

    def cached(self, path: str) -> dict[str, Any] | None:
        snapshot = self._cache.get(path)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    # --- internals ---

    def _put(self, path: str, value: Any) -> None:
        value = copy.deepcopy(value)
        prefix = path.rstrip("/") + "/"
        for key in [k for k in self._writes if k.startswith(prefix)]:
            del self._writes[key]

        for ancestor in _ancestors(path):
            if ancestor in self._writes:
                self._writes[ancestor] = _merge(self._writes[ancestor], path[len(ancestor) :], value)
                logger.debug("Buffered %s into pending write at %s", path, ancestor)
                return

        self._writes[path] = value
        logger.debug("Buffered %s %s", "delete" if value is None else "write", path)

    def _delete_pending(self, path: str) -> bool:
        for candidate in (path, *_ancestors(path)):
            if candidate in self._writes and self._writes[candidate] is None:
                return True
        return False

    def _forget(self, path: str) -> None:
        prefix = path.rstrip("/") + "/"
        for key in [k for k in self._cache if k == path or k.startswith(prefix)]:
            del self._cache[key]


def _ancestors(path: str) -> list[str]:
    """Proper ancestors of a path, nearest first: /a/b/c -> [/a/b, /a]."""
    result = []
    current = path.rstrip("/")
    while True:
        current, sep, _ = current.rpartition("/")
        if not sep or not current:
            break
        result.append(current)
    return result


def _merge(container: Any, relative: str, value: Any) -> dict[str, Any]:
    """Return container with value written at the relative path "/x/y"."""
    root = copy.deepcopy(container) if isinstance(container, dict) else {}
    keys = [k for k in relative.split("/") if k]
    node = root
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    if value is None:
        node.pop(keys[-1], None)
    else:
        node[keys[-1]] = value
    return root

"""In-process fan-out of change notifications to live subscriptions."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any

from .tree import related, split


class SubscriptionHub:
    """Tracks watched paths and wakes their subscribers on related writes.

    A subscriber re-reads its value when woken and emits it only if it
    changed, so a burst of writes may be observed as a single emission.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[list[str], asyncio.Queue[None]]] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def notify(self, paths: Iterable[str]) -> None:
        changed = [split(path) for path in paths]
        for keys, queue in self._subscribers:
            if any(related(keys, c) for c in changed):
                queue.put_nowait(None)

    async def watch(self, path: str, read: Callable[[], Awaitable[Any]]) -> AsyncIterator[Any]:
        """Emit read() now and again after every related write."""
        entry: tuple[list[str], asyncio.Queue[None]] = (split(path), asyncio.Queue())
        self._subscribers.append(entry)
        queue = entry[1]
        try:
            last = await read()
            yield copy.deepcopy(last)
            while True:
                await queue.get()
                while not queue.empty():
                    queue.get_nowait()
                current = await read()
                if current != last:
                    last = current
                    yield copy.deepcopy(current)
        finally:
            self._subscribers.remove(entry)

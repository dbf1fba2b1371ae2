"""Change-tracking wrapper for loaded records.

Repositories hand out records wrapped in Tracked. The first mutation made
through the wrapper calls the registration callback with the record in its
pre-mutation state (the session uses this to capture its diff baseline);
later mutations are plain pass-through. A record that is never mutated
never registers anything.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Tracked(Generic[T]):
    """A loaded record plus its clean/dirty state.

    on_first_change receives the record before the first mutation is applied.
    """

    def __init__(self, record: T, on_first_change: Callable[[T], None]) -> None:
        self._record = record
        self._on_first_change = on_first_change
        self._dirty = False

    @property
    def record(self) -> T:
        return self._record

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        """Register the current state, once, ahead of a mutation."""
        if self._dirty:
            return
        self._on_first_change(self._record)
        self._dirty = True

    def set(self, **changes: Any) -> T:
        """Assign fields on the record."""
        self.mark_dirty()
        for name, value in changes.items():
            setattr(self._record, name, value)
        return self._record

    def mutate(self, fn: Callable[[T], Any]) -> T:
        """Apply an arbitrary in-place change, e.g. to a nested dict."""
        self.mark_dirty()
        fn(self._record)
        return self._record

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else "clean"
        return f"Tracked({self._record!r}, {state})"

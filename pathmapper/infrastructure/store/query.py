"""Evaluate a QuerySpec against the children of a stored object.

Ordering follows the usual JSON-tree convention:
    None < False < True < numbers < strings < objects/lists
with ties broken by key. Without order_by_field, children are ordered and
bounded by key. Precedence for over-specified queries: order_by_field wins
over order_by_key, limit_first over limit_last, and equal_to is applied in
addition to any range bounds.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pathmapper.domain.models.query import QuerySpec

from .tree import read_node, split

Child = tuple[str, Any]


def sort_key(value: Any) -> tuple:
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, 0)


def apply_query(value: Any, spec: QuerySpec) -> list[Child]:
    """Return the (key, value) children of value selected by spec, in order."""
    if not isinstance(value, dict):
        return []
    children: list[Child] = list(value.items())

    if spec.order_by_field is not None:
        keys = split(spec.order_by_field)

        def ordered(child: Child) -> Any:
            return read_node(child[1], keys) if isinstance(child[1], dict) else None

        children.sort(key=lambda child: (sort_key(ordered(child)), child[0]))
        return _window(children, spec, ordered)

    children.sort(key=lambda child: child[0])
    return _window(children, spec, lambda child: child[0])


def _window(children: list[Child], spec: QuerySpec, ordered: Callable[[Child], Any]) -> list[Child]:
    equal = sort_key(spec.equal_to) if spec.equal_to is not None else None
    start = sort_key(spec.start_at) if spec.start_at is not None else None
    if start is None and spec.start_at_key is not None:
        # Resuming from a child whose ordered value is None.
        start = sort_key(None)
    end = sort_key(spec.end_at) if spec.end_at is not None else None

    selected = []
    for child in children:
        rank = sort_key(ordered(child))
        if equal is not None and rank != equal:
            continue
        if start is not None:
            if rank < start:
                continue
            if rank == start and spec.start_at_key is not None and child[0] < spec.start_at_key:
                continue
        if end is not None and rank > end:
            continue
        selected.append(child)

    if spec.limit_first is not None:
        return selected[: spec.limit_first]
    if spec.limit_last is not None:
        return selected[-spec.limit_last :]
    return selected

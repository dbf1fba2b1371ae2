"""Cursor reshaping for batched scans.

Each page of a scan is fetched with the caller's query rewritten so it
resumes strictly after the last child of the previous page:

  - ordered by a field with an equality bound: the equality becomes the
    degenerate range start_at = end_at = value, and the resume cursor goes
    into start_at_key (an equality filter cannot carry a cursor);
  - ordered by a field without equality: the caller's end_at is kept, and
    the scan resumes at start_at = the last child's field value with the
    cursor in start_at_key;
  - anything else: ordered by key, resuming at start_at = last key.

The cursor is the last key with HIGH_SENTINEL appended, which sorts after
every key that has the last key as a prefix. Pages therefore never
overlap, but a scan is not a consistent snapshot: records written between
page fetches may be skipped or seen at a page boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pathmapper.domain.models.query import QuerySpec

HIGH_SENTINEL = chr(0xF8FF)

Child = tuple[str, Any]


def field_value(value: Any, field: str) -> Any:
    """Value of a "/"-separated field inside a stored child, or None."""
    node = value
    for key in field.split("/"):
        if not isinstance(node, Mapping) or key not in node:
            return None
        node = node[key]
    return node


def next_page_spec(spec: QuerySpec, last: Child | None, page_size: int) -> QuerySpec:
    """Rewrite spec to fetch the page after the child last (None: first page)."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    limits = {"limit_first": page_size, "limit_last": None}

    if spec.order_by_field is not None:
        update: dict[str, Any] = {"order_by_key": False, **limits}
        if spec.equal_to is not None:
            update.update(equal_to=None, start_at=spec.equal_to, end_at=spec.equal_to)
            update["start_at_key"] = last[0] + HIGH_SENTINEL if last is not None else None
        elif last is not None:
            update["start_at"] = field_value(last[1], spec.order_by_field)
            update["start_at_key"] = last[0] + HIGH_SENTINEL
        return spec.model_copy(update=update)

    update = {"order_by_key": True, **limits}
    if last is not None:
        update["start_at"] = last[0] + HIGH_SENTINEL
        update["start_at_key"] = None
    return spec.model_copy(update=update)

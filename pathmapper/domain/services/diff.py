"""Structural diff between two JSON-compatible snapshots.

Produces JSON-Patch style operations (add / replace / remove) whose paths
are relative to the compared documents, e.g. "/categories/cat1". Dicts are
compared key by key and recursed into; every other value, lists included,
is compared as a whole and replaced as a whole.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

OpKind = Literal["add", "replace", "remove"]


@dataclass(frozen=True)
class DiffOp:
    op: OpKind
    path: str
    value: Any = None


def compare(old: Mapping[str, Any], new: Mapping[str, Any]) -> list[DiffOp]:
    """Return the operations that turn old into new."""
    ops: list[DiffOp] = []
    _generate(old, new, "", ops)
    return ops


def _generate(old: Mapping[str, Any], new: Mapping[str, Any], path: str, ops: list[DiffOp]) -> None:
    for key, old_value in old.items():
        child = f"{path}/{key}"
        if key not in new:
            ops.append(DiffOp("remove", child))
            continue
        new_value = new[key]
        if isinstance(old_value, Mapping) and isinstance(new_value, Mapping):
            _generate(old_value, new_value, child, ops)
        elif not _same(old_value, new_value):
            ops.append(DiffOp("replace", child, copy.deepcopy(new_value)))

    for key, new_value in new.items():
        if key not in old:
            ops.append(DiffOp("add", f"{path}/{key}", copy.deepcopy(new_value)))


def _same(a: Any, b: Any) -> bool:
    # True == 1 in Python; a bool/int swap is still a change.
    return type(a) is type(b) and a == b

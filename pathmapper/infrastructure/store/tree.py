"""JSON tree helpers shared by the store adapters.

Store semantics: a None value or an empty dict is "nothing stored", so
writing either removes the node, and parents left empty are pruned. Lists
are leaves; paths never address inside them.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any


def split(path: str) -> list[str]:
    """Path keys: "/products/uk/" -> ["products", "uk"]."""
    return [key for key in path.split("/") if key]


def join(keys: Iterable[str]) -> str:
    return "/" + "/".join(keys)


def normalize(value: Any) -> Any:
    """Deep copy of value with None entries and empty dicts removed."""
    if isinstance(value, Mapping):
        result = {}
        for key, child in value.items():
            child = normalize(child)
            if child is not None:
                result[str(key)] = child
        return result or None
    return copy.deepcopy(value)


def read_node(root: Mapping[str, Any], keys: list[str]) -> Any:
    node: Any = root
    for key in keys:
        if not isinstance(node, Mapping) or key not in node:
            return None
        node = node[key]
    return node


def write_node(root: dict[str, Any], keys: list[str], value: Any) -> dict[str, Any]:
    """Write (or with None, delete) value at keys; returns the new root."""
    value = normalize(value)
    if not keys:
        if value is not None and not isinstance(value, dict):
            raise ValueError("The store root can only hold an object")
        return value or {}

    node = root
    parents: list[tuple[dict[str, Any], str]] = []
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            if value is None:
                return root
            child = {}
            node[key] = child
        parents.append((node, key))
        node = child

    if value is None:
        node.pop(keys[-1], None)
    else:
        node[keys[-1]] = value

    for parent, key in reversed(parents):
        if parent[key]:
            break
        del parent[key]
    return root


def flatten(value: Any, keys: list[str]) -> dict[str, Any]:
    """Map every leaf below keys to its absolute path."""
    if isinstance(value, Mapping):
        leaves: dict[str, Any] = {}
        for key, child in value.items():
            leaves.update(flatten(child, [*keys, str(key)]))
        return leaves
    return {join(keys): value}


def unflatten(rows: Iterable[tuple[str, Any]], keys: list[str]) -> Any:
    """Rebuild the value at keys from (absolute path, leaf) rows."""
    root: dict[str, Any] = {}
    depth = len(keys)
    for path, leaf in rows:
        relative = split(path)[depth:]
        if not relative:
            return leaf
        write_node(root, relative, leaf)
    return root or None


def related(a: list[str], b: list[str]) -> bool:
    """True when one path is equal to, or an ancestor of, the other."""
    n = min(len(a), len(b))
    return a[:n] == b[:n]

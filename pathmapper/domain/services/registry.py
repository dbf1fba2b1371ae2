"""Registration of record types against path patterns.

Patterns are compiled at registration time, so a malformed pattern fails
immediately rather than on first use.

Example:
    registry = EntityRegistry()
    registry.register(Product, "/products/{country}")
    registry.lookup(Product).resolve({"country": "uk", "id": "p1"})
    # "/products/uk/p1"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from pathmapper.domain.exceptions import NotRegistered
from pathmapper.domain.models.paths import PathPattern

C = TypeVar("C", bound=type)


class EntityRegistry:
    """Maps record types to compiled path patterns."""

    def __init__(self) -> None:
        self._patterns: dict[type, PathPattern] = {}

    def register(self, cls: type, pattern: str) -> PathPattern:
        """Register (or re-register) the pattern for a type."""
        compiled = PathPattern.compile(pattern)
        self._patterns[cls] = compiled
        return compiled

    def lookup(self, cls: type) -> PathPattern:
        """Return the pattern for a type; raises NotRegistered."""
        try:
            return self._patterns[cls]
        except KeyError:
            raise NotRegistered(cls) from None

    def __contains__(self, cls: object) -> bool:
        return cls in self._patterns

    def clear(self) -> None:
        self._patterns.clear()


default_registry = EntityRegistry()


def entity(pattern: str, registry: EntityRegistry | None = None) -> Callable[[C], C]:
    """Class decorator registering a record type.

        @entity("/products/{country}")
        class Product(Record):
            country: str | None = None
            price: int = 0
    """

    def decorator(cls: C) -> C:
        target = registry if registry is not None else default_registry
        target.register(cls, pattern)
        return cls

    return decorator

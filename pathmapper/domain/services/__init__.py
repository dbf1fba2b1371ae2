"""Domain services: pure logic with no store access of their own."""

from .diff import DiffOp, compare
from .pagination import HIGH_SENTINEL, field_value, next_page_spec
from .registry import EntityRegistry, default_registry, entity
from .unit_of_work import UnitOfWork

__all__ = [
    "DiffOp",
    "EntityRegistry",
    "HIGH_SENTINEL",
    "UnitOfWork",
    "compare",
    "default_registry",
    "entity",
    "field_value",
    "next_page_spec",
]

"""Tests for pathmapper/domain/services/registry.py."""

import pytest

from pathmapper.domain.exceptions import MalformedPattern, NotRegistered
from pathmapper.domain.models.paths import PathPattern
from pathmapper.domain.models.records import Record
from pathmapper.domain.services.registry import EntityRegistry, default_registry, entity


class Product(Record):
    price: int = 0


def test_register_returns_compiled_pattern():
    registry = EntityRegistry()
    pattern = registry.register(Product, "/products/{country}")
    assert isinstance(pattern, PathPattern)
    assert pattern.binding_names == ("country",)


def test_lookup_returns_registered_pattern():
    registry = EntityRegistry()
    pattern = registry.register(Product, "/products")
    assert registry.lookup(Product) is pattern


def test_lookup_unregistered_type_raises():
    with pytest.raises(NotRegistered) as exc_info:
        EntityRegistry().lookup(Product)
    assert exc_info.value.cls is Product


def test_register_malformed_pattern_fails_immediately():
    registry = EntityRegistry()
    with pytest.raises(MalformedPattern):
        registry.register(Product, "/products/{}")
    assert Product not in registry


def test_register_again_replaces_pattern():
    registry = EntityRegistry()
    registry.register(Product, "/products")
    registry.register(Product, "/items")
    assert str(registry.lookup(Product)) == "/items"


def test_clear_forgets_registrations():
    registry = EntityRegistry()
    registry.register(Product, "/products")
    registry.clear()
    assert Product not in registry


# --- entity decorator ---

def test_entity_decorator_registers_on_given_registry():
    registry = EntityRegistry()

    @entity("/shops/{country}", registry)
    class Shop(Record):
        country: str | None = None

    assert str(registry.lookup(Shop)) == "/shops/{country}"
    assert Shop not in default_registry


def test_entity_decorator_defaults_to_default_registry():
    @entity("/widgets")
    class Widget(Record):
        pass

    assert Widget in default_registry


def test_entity_decorator_returns_class_unchanged():
    registry = EntityRegistry()

    class Shop(Record):
        pass

    assert entity("/shops", registry)(Shop) is Shop

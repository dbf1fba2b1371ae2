"""Tests for pathmapper/infrastructure/store/query.py."""

from pathmapper.domain.models.query import QuerySpec
from pathmapper.infrastructure.store.query import apply_query, sort_key

PRODUCTS = {
    "id2": {"price": 456, "categories": {"cat1": False}},
    "id1": {"price": 123, "categories": {"cat1": True}},
    "id3": {"price": 789, "categories": {"cat1": True}},
}


def _ids(children):
    return [key for key, _ in children]


def test_sort_key_orders_types():
    values = ["a", 2, True, None, {"x": 1}, False]
    assert sorted(values, key=sort_key) == [None, False, True, 2, "a", {"x": 1}]


def test_non_object_has_no_children():
    assert apply_query(None, QuerySpec()) == []
    assert apply_query(5, QuerySpec()) == []


def test_empty_spec_returns_children_in_key_order():
    assert _ids(apply_query(PRODUCTS, QuerySpec())) == ["id1", "id2", "id3"]


def test_children_carry_values():
    children = apply_query(PRODUCTS, QuerySpec(limit_first=1))
    assert children == [("id1", {"price": 123, "categories": {"cat1": True}})]


def test_filter_by_nested_field_equality():
    spec = QuerySpec(order_by_field="categories/cat1", equal_to=True)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id1", "id3"]


def test_order_by_field():
    spec = QuerySpec(order_by_field="price", limit_last=2)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id2", "id3"]


def test_order_by_key_limit_first():
    spec = QuerySpec(order_by_key=True, limit_first=2)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id1", "id2"]


def test_order_by_key_limit_last():
    spec = QuerySpec(order_by_key=True, limit_last=2)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id2", "id3"]


def test_start_at_key():
    spec = QuerySpec(order_by_key=True, start_at="id2")
    assert _ids(apply_query(PRODUCTS, spec)) == ["id2", "id3"]


def test_end_at_key():
    spec = QuerySpec(order_by_key=True, end_at="id2")
    assert _ids(apply_query(PRODUCTS, spec)) == ["id1", "id2"]


def test_start_at_key_breaks_ties_on_field_value():
    spec = QuerySpec(order_by_field="categories/cat1", start_at=True, end_at=True, start_at_key="id2")
    assert _ids(apply_query(PRODUCTS, spec)) == ["id3"]


def test_field_range():
    spec = QuerySpec(order_by_field="price", start_at=200, end_at=800)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id2", "id3"]


def test_missing_field_sorts_first():
    data = {**PRODUCTS, "id0": {"name": "no price"}}
    spec = QuerySpec(order_by_field="price", limit_first=1)
    assert _ids(apply_query(data, spec)) == ["id0"]


def test_limit_first_wins_over_limit_last():
    spec = QuerySpec(limit_first=1, limit_last=2)
    assert _ids(apply_query(PRODUCTS, spec)) == ["id1"]


def test_start_at_key_without_start_at_resumes_among_missing_fields():
    data = {**PRODUCTS, "id0": {"name": "a"}, "id5": {"name": "b"}}
    spec = QuerySpec(order_by_field="price", start_at_key="id0")
    assert _ids(apply_query(data, spec)) == ["id5", "id1", "id2", "id3"]


def test_start_at_key_without_start_at_ignored_under_key_order():
    spec = QuerySpec(order_by_key=True, start_at_key="id2")
    assert _ids(apply_query(PRODUCTS, spec)) == ["id1", "id2", "id3"]

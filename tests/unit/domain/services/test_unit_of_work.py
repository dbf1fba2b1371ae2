"""Tests for pathmapper/domain/services/unit_of_work.py.

The store adapter is an AsyncMock; only atomic_update is exercised.
"""

from unittest.mock import AsyncMock

import pytest

from pathmapper.domain.exceptions import CommitFailed
from pathmapper.domain.models.records import Record
from pathmapper.domain.services.unit_of_work import UnitOfWork


class Product(Record):
    price: int | None = None
    country: str | None = None
    categories: dict[str, bool] | None = None


def _uow():
    return UnitOfWork(AsyncMock())


def _cached_uow(path="/p/1", **fields):
    uow = _uow()
    uow.add_to_cache(Product(id="1", **fields), path)
    return uow


# --- snapshot ---

def test_snapshot_drops_id_bindings_and_none():
    record = Product(id="p1", country="uk", price=1)
    assert UnitOfWork.snapshot(record, ["country"]) == {"price": 1}


def test_snapshot_is_a_deep_copy():
    record = Product(id="p1", categories={"cat1": True})
    snapshot = UnitOfWork.snapshot(record)
    record.categories["cat2"] = True
    assert snapshot == {"categories": {"cat1": True}}


# --- save ---

def test_save_uncached_record_writes_it_whole():
    uow = _uow()
    uow.save(Product(id="1", price=1), "/p/1")
    assert uow.get_updates() == {"/p/1": {"price": 1}}
    assert uow.is_insert("/p/1")


def test_save_cached_record_writes_only_changes():
    uow = _cached_uow(price=123, categories={"cat1": True})
    uow.save(Product(id="1", price=456, categories={"cat1": True}), "/p/1")
    assert uow.get_updates() == {"/p/1/price": 456}
    assert not uow.is_insert("/p/1")


def test_save_updates_cached_snapshot():
    uow = _cached_uow(price=123)
    uow.save(Product(id="1", price=456), "/p/1")
    assert uow.cached("/p/1") == {"price": 456}


def test_save_twice_is_idempotent():
    uow = _cached_uow(price=123)
    uow.save(Product(id="1", price=456), "/p/1")
    uow.save(Product(id="1", price=456), "/p/1")
    assert uow.get_updates() == {"/p/1/price": 456}


def test_save_back_to_original_value_keeps_last_write():
    uow = _cached_uow(price=123)
    uow.save(Product(id="1", price=456), "/p/1")
    uow.save(Product(id="1", price=123), "/p/1")
    assert uow.get_updates() == {"/p/1/price": 123}


def test_save_removed_field_buffers_delete():
    uow = _cached_uow(price=123, categories={"cat1": True})
    uow.save(Product(id="1", price=123), "/p/1")
    assert uow.get_updates() == {"/p/1/categories": None}


def test_save_nested_change_writes_nested_path():
    uow = _cached_uow(categories={"cat1": True})
    uow.save(Product(id="1", categories={"cat1": True, "cat2": False}), "/p/1")
    assert uow.get_updates() == {"/p/1/categories/cat2": False}


def test_save_after_insert_rewrites_whole_record():
    uow = _uow()
    uow.save(Product(id="1", price=1), "/p/1")
    uow.save(Product(id="1", price=2), "/p/1")
    assert uow.get_updates() == {"/p/1": {"price": 2}}


def test_delete_then_save_keeps_the_save():
    uow = _cached_uow(price=1)
    uow.delete("/p/1")
    uow.save(Product(id="1", price=2), "/p/1")
    assert uow.get_updates() == {"/p/1": {"price": 2}}
    assert uow.is_insert("/p/1")


def test_save_then_delete_buffers_null():
    uow = _uow()
    uow.save(Product(id="1", price=2), "/p/1")
    uow.delete("/p/1")
    assert uow.get_updates() == {"/p/1": None}
    assert not uow.is_insert("/p/1")


def test_delete_all_buffers_each_path():
    uow = _uow()
    uow.delete_all(["/p/1", "/p/2"])
    assert uow.get_updates() == {"/p/1": None, "/p/2": None}


# --- prefix-free buffer ---

def test_delete_of_ancestor_drops_buffered_descendants():
    uow = _cached_uow(price=123)
    uow.save(Product(id="1", price=456), "/p/1")
    uow.delete("/p")
    assert uow.get_updates() == {"/p": None}


def test_save_below_pending_delete_merges_into_it():
    uow = _cached_uow(price=1)
    uow.delete("/p")
    uow.save(Product(id="1", price=2), "/p/1")
    assert uow.get_updates() == {"/p": {"1": {"price": 2}}}


# --- cache admission ---

def test_add_to_cache_is_skipped_while_writes_pending():
    uow = _uow()
    uow.save(Product(id="2", price=1), "/p/2")
    uow.add_to_cache(Product(id="1", price=1), "/p/1")
    assert uow.cached("/p/1") is None


def test_cached_returns_a_copy():
    uow = _cached_uow(categories={"cat1": True})
    uow.cached("/p/1")["categories"]["cat1"] = False
    assert uow.cached("/p/1") == {"categories": {"cat1": True}}


# --- commit ---

async def test_commit_sends_buffer_as_one_update():
    uow = _cached_uow(price=123)
    uow.save(Product(id="1", price=456), "/p/1")
    uow.delete("/p/2")
    await uow.commit()
    uow.store.atomic_update.assert_awaited_once_with({"/p/1/price": 456, "/p/2": None})


async def test_commit_clears_buffer_and_inserts():
    uow = _uow()
    uow.save(Product(id="1", price=1), "/p/1")
    await uow.commit()
    assert uow.get_updates() == {}
    assert not uow.has_pending_writes
    assert not uow.is_insert("/p/1")


async def test_commit_with_empty_buffer_skips_store():
    uow = _uow()
    await uow.commit()
    uow.store.atomic_update.assert_not_awaited()


async def test_commit_failure_keeps_buffer():
    uow = _uow()
    uow.store.atomic_update.side_effect = RuntimeError("boom")
    uow.save(Product(id="1", price=1), "/p/1")
    with pytest.raises(CommitFailed) as exc_info:
        await uow.commit()
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert uow.get_updates() == {"/p/1": {"price": 1}}
    assert uow.is_insert("/p/1")


async def test_commit_can_be_retried_after_failure():
    uow = _uow()
    uow.store.atomic_update.side_effect = [RuntimeError("boom"), None]
    uow.save(Product(id="1", price=1), "/p/1")
    with pytest.raises(CommitFailed):
        await uow.commit()
    await uow.commit()
    assert uow.store.atomic_update.await_count == 2
    assert not uow.has_pending_writes


async def test_commit_of_delete_forgets_cached_snapshot():
    uow = _cached_uow(price=1)
    uow.delete("/p/1")
    await uow.commit()
    assert uow.cached("/p/1") is None


async def test_commit_of_collection_delete_forgets_cached_children():
    uow = _cached_uow(path="/p/1", price=1)
    uow.delete("/p")
    await uow.commit()
    assert uow.cached("/p/1") is None


async def test_reads_are_cached_again_after_commit():
    uow = _uow()
    uow.save(Product(id="2", price=1), "/p/2")
    await uow.commit()
    uow.add_to_cache(Product(id="1", price=1), "/p/1")
    assert uow.cached("/p/1") == {"price": 1}


def test_discard_drops_buffer():
    uow = _uow()
    uow.save(Product(id="1", price=1), "/p/1")
    uow.discard()
    assert not uow.has_pending_writes
    assert not uow.is_insert("/p/1")


def test_get_updates_returns_a_copy():
    uow = _uow()
    uow.save(Product(id="1", price=1), "/p/1")
    uow.get_updates()["/p/1"]["price"] = 99
    assert uow.get_updates() == {"/p/1": {"price": 1}}

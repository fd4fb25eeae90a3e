"""Tests for the key-value store backends."""

from __future__ import annotations

import pytest

from medicart.config import get_settings
from medicart.db.repository import SqliteKeyValueStore
from medicart.db.store import MemoryKeyValueStore


@pytest.fixture(params=["memory", "sqlite"])
def backend(request):
    if request.param == "memory":
        yield MemoryKeyValueStore()
        return
    store = SqliteKeyValueStore.open(get_settings().store_path)
    yield store
    store.close()


def test_missing_key_reads_as_none(backend):
    assert backend.get_item("medicationCart") is None
    assert backend.revision("medicationCart") == 0


def test_set_item_overwrites_and_bumps_revision(backend):
    backend.set_item("medicationCart", "[]")
    backend.set_item("medicationCart", '[{"name": "A"}]')

    assert backend.get_item("medicationCart") == '[{"name": "A"}]'
    assert backend.revision("medicationCart") == 2


def test_remove_item_keeps_revision_moving_forward(backend):
    backend.set_item("medicationReminders", "[]")
    backend.remove_item("medicationReminders")

    assert backend.get_item("medicationReminders") is None
    assert backend.revision("medicationReminders") == 2

    backend.set_item("medicationReminders", "[]")
    assert backend.revision("medicationReminders") == 3


def test_remove_missing_key_is_noop(backend):
    backend.remove_item("medicationCart")
    assert backend.revision("medicationCart") == 0


def test_sqlite_store_is_shared_between_connections(tmp_path):
    path = tmp_path / "shared" / "store.db"
    first = SqliteKeyValueStore.open(path)
    second = SqliteKeyValueStore.open(path)

    first.set_item("medicationCart", '[{"name": "Aspirin"}]')

    assert second.get_item("medicationCart") == '[{"name": "Aspirin"}]'
    assert second.revision("medicationCart") == 1
    first.close()
    second.close()

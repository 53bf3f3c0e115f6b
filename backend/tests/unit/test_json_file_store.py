"""Unit tests for the JsonFileKeyValueStore."""

import pytest

from tripstore.domain.exceptions import LocalPersistenceError
from tripstore.infrastructure.storage import JsonFileKeyValueStore


def test_values_round_trip_under_namespace(tmp_path):
    store = JsonFileKeyValueStore(tmp_path, "china-explorer")

    store.set("destinations.snapshot", '[{"id": "a"}]')

    assert store.get("destinations.snapshot") == '[{"id": "a"}]'
    assert (tmp_path / "china-explorer" / "destinations.snapshot.json").exists()


def test_missing_key_is_none(tmp_path):
    assert JsonFileKeyValueStore(tmp_path, "ns").get("nothing") is None


def test_namespaces_do_not_collide(tmp_path):
    first = JsonFileKeyValueStore(tmp_path, "one")
    second = JsonFileKeyValueStore(tmp_path, "two")

    first.set("lastSync", "a")

    assert second.get("lastSync") is None


def test_delete_is_idempotent(tmp_path):
    store = JsonFileKeyValueStore(tmp_path, "ns")
    store.set("k", "v")

    store.delete("k")
    store.delete("k")

    assert store.get("k") is None


def test_unsafe_key_characters_stay_inside_directory(tmp_path):
    store = JsonFileKeyValueStore(tmp_path, "ns")
    store.set("../escape", "v")

    assert store.get("../escape") == "v"
    assert not (tmp_path / "escape.json").exists()


def test_write_failure_raises_local_persistence_error(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory", encoding="utf-8")
    store = JsonFileKeyValueStore(blocker, "ns")

    with pytest.raises(LocalPersistenceError):
        store.set("k", "v")

"""Tests for the JSON snapshot store."""

import json
from datetime import datetime
from unittest.mock import patch

import pytest

from src.core.errors import StoreUnavailable
from src.shell.snapshot_store import SnapshotStore, index_snapshot


@pytest.fixture
def snapshot_file(tmp_path):
    """A list-style snapshot, as exported from a static data file."""
    path = tmp_path / "devfest-data.json"
    path.write_text(json.dumps([
        {"slug": "london", "destinationUrl": "https://example.com/london"},
        {"destinationUrl": "https://example.com/no-slug", "devfestName": "DevFest Somewhere"},
        {"slug": "paris", "destinationUrl": "https://example.com/paris"},
    ]), encoding="utf-8")
    return path


class TestIndexSnapshot:
    """Tests for index_snapshot()."""

    def test_object_snapshot_is_keyed_by_slug(self):
        data = {"a": {"destinationUrl": "https://a"}}
        assert index_snapshot(data) == data

    def test_list_records_without_slug_use_position(self):
        records = index_snapshot([{"slug": "a"}, {"destinationUrl": "https://b"}])
        assert list(records) == ["a", "entry-1"]

    def test_later_duplicate_wins(self):
        records = index_snapshot([{"slug": "a", "v": 1}, {"slug": "a", "v": 2}])
        assert records == {"a": {"slug": "a", "v": 2}}

    def test_non_text_slugs_use_position(self):
        records = index_snapshot([
            {"slug": "london"},
            {"slug": ["oops"], "destinationUrl": "https://b"},
            {"slug": 5, "destinationUrl": "https://c"},
            {"slug": "  ", "destinationUrl": "https://d"},
        ])

        assert list(records) == ["london", "entry-1", "entry-2", "entry-3"]

    def test_rejects_scalars(self):
        with pytest.raises(ValueError):
            index_snapshot("just a string")


class TestSnapshotStore:
    """Tests for SnapshotStore."""

    def test_lists_keys_in_file_order(self, snapshot_file):
        store = SnapshotStore(snapshot_file)
        assert store.list_keys() == ["london", "entry-1", "paris"]

    def test_get_one(self, snapshot_file):
        store = SnapshotStore(snapshot_file)

        assert store.get_one("paris") == {"slug": "paris", "destinationUrl": "https://example.com/paris"}
        assert store.get_one("missing") is None

    def test_get_many(self, snapshot_file):
        store = SnapshotStore(snapshot_file)

        pairs = store.get_many(["london", "missing"])

        assert pairs[0][0] == "london"
        assert pairs[1] == ("missing", None)

    def test_missing_file_raises_store_unavailable(self, tmp_path):
        store = SnapshotStore(tmp_path / "nope.json")

        with pytest.raises(StoreUnavailable):
            store.list_keys()

    def test_invalid_json_raises_store_unavailable(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreUnavailable):
            SnapshotStore(path).get_one("x")

    def test_set_one_persists(self, snapshot_file):
        store = SnapshotStore(snapshot_file)

        store.set_one("lagos", {"destinationUrl": "https://example.com/lagos"})

        reloaded = SnapshotStore(snapshot_file)
        assert reloaded.get_one("lagos") == {"destinationUrl": "https://example.com/lagos"}
        assert reloaded.get_one("london") is not None

    def test_unserializable_record_leaves_snapshot_intact(self, snapshot_file):
        store = SnapshotStore(snapshot_file)
        before = snapshot_file.read_text(encoding="utf-8")

        with pytest.raises(StoreUnavailable):
            store.set_one("bad", {"destinationUrl": "https://x", "updatedAt": datetime(2024, 1, 1)})

        assert snapshot_file.read_text(encoding="utf-8") == before
        assert store.get_one("bad") is None
        assert SnapshotStore(snapshot_file).list_keys() == ["london", "entry-1", "paris"]

    def test_failed_write_keeps_memory_and_file(self, snapshot_file):
        store = SnapshotStore(snapshot_file)
        store.list_keys()

        with patch("src.shell.snapshot_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreUnavailable):
                store.set_one("lagos", {"destinationUrl": "https://example.com/lagos"})

        assert store.get_one("lagos") is None
        assert SnapshotStore(snapshot_file).get_one("lagos") is None
        assert not (snapshot_file.parent / "devfest-data.json.tmp").exists()

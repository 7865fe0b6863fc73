"""Tests for the JSON file stores."""
import asyncio
import json

import pytest

from adwall.core.exceptions import StorageError
from adwall.storage import AsyncJsonFileAdStore, JsonFileAdStore


@pytest.fixture(params=[JsonFileAdStore, AsyncJsonFileAdStore], ids=["file", "async-file"])
def store_cls(request):
    return request.param


def test_missing_file_is_empty(store_cls, tmp_path):
    store = store_cls(tmp_path / "ads.json")

    assert asyncio.run(store.load_all()) == []


def test_blank_file_is_empty(store_cls, tmp_path):
    path = tmp_path / "ads.json"
    path.write_text("  \n")

    assert asyncio.run(store_cls(path).load_all()) == []


def test_save_creates_parent_directory(store_cls, tmp_path):
    path = tmp_path / "nested" / "dir" / "ads.json"
    ads = [{"id": "1", "title": "Vélo à vendre", "clicked": 0, "videos": []}]

    asyncio.run(store_cls(path).save_all(ads))

    assert json.loads(path.read_text(encoding="utf-8")) == ads
    assert "Vélo" in path.read_text(encoding="utf-8")


def test_save_replaces_whole_document(store_cls, tmp_path):
    path = tmp_path / "ads.json"
    store = store_cls(path)

    asyncio.run(store.save_all([{"id": "1"}, {"id": "2"}]))
    asyncio.run(store.save_all([{"id": "2"}]))

    assert asyncio.run(store.load_all()) == [{"id": "2"}]


def test_no_temp_files_left_behind(store_cls, tmp_path):
    asyncio.run(store_cls(tmp_path / "ads.json").save_all([{"id": "1"}]))

    assert [p.name for p in tmp_path.iterdir()] == ["ads.json"]


def test_corrupt_json_raises(store_cls, tmp_path):
    path = tmp_path / "ads.json"
    path.write_text("[{broken")

    with pytest.raises(StorageError, match="Corrupt ads file"):
        asyncio.run(store_cls(path).load_all())


def test_non_array_document_raises(store_cls, tmp_path):
    path = tmp_path / "ads.json"
    path.write_text('{"ads": []}')

    with pytest.raises(StorageError, match="expected a JSON array"):
        asyncio.run(store_cls(path).load_all())


def test_failed_write_keeps_previous_document(store_cls, tmp_path):
    path = tmp_path / "ads.json"
    store = store_cls(path)
    asyncio.run(store.save_all([{"id": "1"}]))

    with pytest.raises(StorageError):
        asyncio.run(store.save_all([{"id": "2", "bad": object()}]))

    assert asyncio.run(store.load_all()) == [{"id": "1"}]
    assert [p.name for p in tmp_path.iterdir()] == ["ads.json"]


def test_health_check(store_cls, tmp_path):
    assert asyncio.run(store_cls(tmp_path / "later" / "ads.json").health_check()) is True

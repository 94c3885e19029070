import json

import pytest

from rxpad.clinical.icd10.models import CodeEntry
from rxpad.clinical.icd10.service import (
    CACHE_DATA_KEY,
    CACHE_VERSION_KEY,
    load_dataset,
    parse_entries,
    read_bundled_dataset,
)
from rxpad.core.kv_store import MemoryKeyValueStore


class BrokenStore:
    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")

    def remove(self, keys):
        raise OSError("storage unavailable")


class ReadOnlyStore(MemoryKeyValueStore):
    def set(self, key, value):
        raise OSError("quota exceeded")


@pytest.fixture
def old_entries(make_entry):
    return [make_entry("A00", "Cholera")]


@pytest.fixture
def new_entries(make_entry):
    return [make_entry("A00", "Cholera"), make_entry("I10", "Essential (primary) hypertension")]


def test_first_load_populates_cache(store, new_entries):
    result = load_dataset("v1", new_entries, store)
    assert result == new_entries
    assert store.get(CACHE_VERSION_KEY) == "v1"
    assert [r["code"] for r in json.loads(store.get(CACHE_DATA_KEY))] == ["A00", "I10"]


def test_matching_version_is_served_from_cache(store, old_entries, new_entries):
    load_dataset("v1", old_entries, store)
    result = load_dataset("v1", new_entries, store)
    assert [e.code for e in result] == ["A00"]


def test_new_version_replaces_cache(store, old_entries, new_entries):
    load_dataset("v1", old_entries, store)
    result = load_dataset("v2", new_entries, store)
    assert result == new_entries
    assert store.get(CACHE_VERSION_KEY) == "v2"
    assert len(json.loads(store.get(CACHE_DATA_KEY))) == 2


def test_cached_entries_round_trip_all_fields(store):
    entry = CodeEntry(
        code="E11.9",
        description="Type 2 diabetes mellitus without complications",
        parent_code="E11",
        parent_description="Type 2 diabetes mellitus",
        category="Endocrine, nutritional and metabolic diseases",
        valid_primary=True,
        valid_clinical=True,
    )
    load_dataset("v1", [entry], store)
    assert load_dataset("v1", [], store) == [entry]


def test_unreadable_cache_falls_back_to_bundled(new_entries):
    assert load_dataset("v1", new_entries, BrokenStore()) == new_entries


def test_corrupt_cache_falls_back_without_writing(new_entries):
    store = MemoryKeyValueStore({CACHE_VERSION_KEY: "v1", CACHE_DATA_KEY: "{not json"})
    assert load_dataset("v1", new_entries, store) == new_entries
    assert store.get(CACHE_DATA_KEY) == "{not json"


@pytest.mark.parametrize(
    "cached",
    [
        '[1, "junk"]',
        '[{"code": "A00"}, null]',
    ],
)
def test_cache_with_bad_records_falls_back_to_bundled(new_entries, cached):
    store = MemoryKeyValueStore({CACHE_VERSION_KEY: "v1", CACHE_DATA_KEY: cached})
    assert load_dataset("v1", new_entries, store) == new_entries
    assert store.get(CACHE_DATA_KEY) == cached


def test_version_without_data_is_a_miss(new_entries):
    store = MemoryKeyValueStore({CACHE_VERSION_KEY: "v1"})
    assert load_dataset("v1", new_entries, store) == new_entries
    assert store.get(CACHE_DATA_KEY) is not None


def test_failed_cache_write_still_returns_bundled(new_entries):
    assert load_dataset("v1", new_entries, ReadOnlyStore()) == new_entries


def test_parse_entries_skips_non_objects_and_defaults_fields():
    entries = parse_entries([{"code": "R51", "description": "Headache"}, "junk", {"code": "R05"}])
    assert [e.code for e in entries] == ["R51", "R05"]
    assert entries[1].description == ""


def test_parse_entries_accepts_camel_case_keys():
    entry = parse_entries([
        {"code": "B15.9", "code3": "B15", "code3Description": "Acute hepatitis A",
         "chapter": "Infectious", "validClinical": "true", "validPrimary": 0},
    ])[0]
    assert entry.parent_code == "B15"
    assert entry.parent_description == "Acute hepatitis A"
    assert entry.category == "Infectious"
    assert entry.valid_clinical is True
    assert entry.valid_primary is False


def test_read_bundled_dataset(bundled):
    assert bundled.version
    codes = [e.code for e in bundled.codes]
    assert len(codes) == len(set(codes))
    assert "I10" in codes


def test_read_bundled_dataset_from_file(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps({"version": "7", "codes": [{"code": "J00", "description": "Cold"}]}))
    dataset = read_bundled_dataset(path)
    assert dataset.version == "7"
    assert dataset.codes[0].code == "J00"

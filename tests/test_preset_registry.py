import json

import pytest
from pydantic import ValidationError

from rxpad.core.errors import RecordNotFound
from rxpad.core.kv_store import MemoryKeyValueStore
from rxpad.schemas.preset import PresetCreate
from rxpad.services import preset_registry
from rxpad.services.preset_registry import PRESETS_STORAGE_KEY


def _payload(**overrides):
    data = {
        "diagnosis": "Tonsillitis",
        "icd10Codes": [{"code": "J03.9", "description": "Acute tonsillitis, unspecified"}],
        "medications": [
            {"name": "Amoxicillin", "dose": "500mg", "direction": "Three times daily", "quantity": "15 capsules"},
            {"name": "Paracetamol", "dose": "1g", "direction": "As needed for pain", "quantity": "20 tablets"},
        ],
    }
    data.update(overrides)
    return PresetCreate.model_validate(data)


def test_empty_store_is_seeded(store):
    presets = preset_registry.list_presets(store)
    assert [p.diagnosis for p in presets] == ["Common Cold", "Hypertension", "Type 2 Diabetes", "High Cholesterol"]
    assert presets[1].icd10_codes[0].code == "I10"


def test_store_with_only_malformed_records_is_reseeded():
    store = MemoryKeyValueStore({PRESETS_STORAGE_KEY: json.dumps([{"diagnosis": "No medications"}, "junk"])})
    presets = preset_registry.list_presets(store)
    assert len(presets) == 4
    assert len(json.loads(store.get(PRESETS_STORAGE_KEY))) == 4


def test_presets_without_codes_load_with_empty_list():
    legacy = [{
        "id": 7,
        "diagnosis": "Headache",
        "medications": [{"id": 1712345678901.42, "name": "Ibuprofen", "dose": "400mg",
                         "direction": "Take as needed", "quantity": "10 tablets"}],
    }]
    store = MemoryKeyValueStore({PRESETS_STORAGE_KEY: json.dumps(legacy)})
    preset = preset_registry.list_presets(store)[0]
    assert preset.icd10_codes == []
    assert preset.medications[0].id == 1712345678901


def test_add_preset_renumbers_medications(store):
    preset = preset_registry.add_preset(store, _payload())
    assert preset.id == 5
    assert [m.id for m in preset.medications] == [1, 2]
    stored = json.loads(store.get(PRESETS_STORAGE_KEY))[-1]
    assert stored["icd10Codes"] == [{"code": "J03.9", "description": "Acute tonsillitis, unspecified"}]


def test_preset_requires_diagnosis_and_medication():
    with pytest.raises(ValidationError):
        _payload(diagnosis="  ")
    with pytest.raises(ValidationError):
        _payload(medications=[])


def test_medication_requires_every_field():
    with pytest.raises(ValidationError):
        _payload(medications=[{"name": "Amoxicillin", "dose": "", "direction": "Daily", "quantity": "10"}])


def test_update_and_delete_preset(store):
    updated = preset_registry.update_preset(store, 1, _payload(diagnosis="Head cold"))
    assert updated.id == 1
    assert preset_registry.get_preset(store, 1).diagnosis == "Head cold"

    preset_registry.delete_preset(store, 1)
    with pytest.raises(RecordNotFound):
        preset_registry.get_preset(store, 1)
    with pytest.raises(RecordNotFound):
        preset_registry.update_preset(store, 1, _payload())


def test_filter_presets(store):
    presets = preset_registry.list_presets(store)
    assert [p.id for p in preset_registry.filter_presets(presets, "metformin")] == [3]
    assert [p.id for p in preset_registry.filter_presets(presets, "e78")] == [4]
    assert [p.id for p in preset_registry.filter_presets(presets, "HYPERTENSION")] == [2]
    assert preset_registry.filter_presets(presets, " ") == presets

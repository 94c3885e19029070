import pytest

from rxpad.core.errors import ConfirmationRequired
from rxpad.services import data_admin, patient_registry, preset_registry


def test_summary_counts_stored_records(store):
    assert data_admin.data_summary(store) == {"patients": 0, "presets": 0, "total": 0}
    patient_registry.list_patients(store)
    preset_registry.list_presets(store)
    assert data_admin.data_summary(store) == {"patients": 5, "presets": 4, "total": 9}



def test_summary_counts_unreadable_data_as_empty(store):
    preset_registry.list_presets(store)
    store.set(patient_registry.PATIENTS_STORAGE_KEY, "{broken")
    assert data_admin.data_summary(store) == {"patients": 0, "presets": 4, "total": 4}

@pytest.mark.parametrize("confirmation", ["", "yes", "deleted"])
def test_delete_all_requires_confirmation(store, confirmation):
    patient_registry.list_patients(store)
    with pytest.raises(ConfirmationRequired):
        data_admin.delete_all_data(store, confirmation)
    assert data_admin.data_summary(store)["patients"] == 5


def test_delete_all_removes_patients_and_presets(store):
    patient_registry.list_patients(store)
    preset_registry.list_presets(store)
    store.set("@icd10_recent", '["fever"]')

    data_admin.delete_all_data(store, "  DELETE ")

    assert store.get(patient_registry.PATIENTS_STORAGE_KEY) is None
    assert store.get(preset_registry.PRESETS_STORAGE_KEY) is None
    assert store.get("@icd10_recent") == '["fever"]'


def test_app_info():
    info = data_admin.app_info()
    assert info["version"]
    assert info["name"]

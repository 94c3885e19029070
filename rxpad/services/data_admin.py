"""Settings screen operations: stored-data summary, wipe, app information."""

import logging

from rxpad.core.config import settings
from rxpad.core.errors import ConfirmationRequired
from rxpad.core.kv_store import KeyValueStore, read_json
from rxpad.services.patient_registry import PATIENTS_STORAGE_KEY
from rxpad.services.preset_registry import PRESETS_STORAGE_KEY

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "delete"


def _count(store: KeyValueStore, key: str) -> int:
    try:
        records = read_json(store, key)
    except ValueError:
        logger.warning("Failed to check %s for backup", key, exc_info=True)
        return 0
    return len(records) if isinstance(records, list) else 0


def data_summary(store: KeyValueStore) -> dict:
    patients = _count(store, PATIENTS_STORAGE_KEY)
    presets = _count(store, PRESETS_STORAGE_KEY)
    return {"patients": patients, "presets": presets, "total": patients + presets}


def delete_all_data(store: KeyValueStore, confirmation: str) -> None:
    """Remove all patients and presets. `confirmation` must read "delete"."""
    if (confirmation or "").strip().lower() != DELETE_CONFIRMATION:
        raise ConfirmationRequired('Please type "delete" to confirm')
    store.remove([PATIENTS_STORAGE_KEY, PRESETS_STORAGE_KEY])
    logger.warning("All patient and preset data deleted")


def app_info() -> dict:
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
        "edition": settings.APP_EDITION,
        "practice": settings.PRACTICE_NAME,
    }

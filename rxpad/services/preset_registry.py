"""Preset prescriptions, stored as a single JSON list under `@prescription_presets`."""

from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from rxpad.core.errors import RecordNotFound
from rxpad.core.kv_store import KeyValueStore, read_json, write_json
from rxpad.schemas.preset import Medication, PresetCreate, PresetOut

logger = logging.getLogger(__name__)

PRESETS_STORAGE_KEY = "@prescription_presets"


def _med(med_id, name, dose, direction, quantity):
    return {"id": med_id, "name": name, "dose": dose, "direction": direction, "quantity": quantity}


SAMPLE_PRESETS = [
    {
        "id": 1,
        "diagnosis": "Common Cold",
        "icd10Codes": [{"code": "J00", "description": "Acute nasopharyngitis [common cold]"}],
        "medications": [
            _med(1, "Paracetamol", "500mg", "Take twice daily after meals", "20 tablets"),
            _med(2, "Vitamin C", "1000mg", "Take once daily", "30 tablets"),
        ],
    },
    {
        "id": 2,
        "diagnosis": "Hypertension",
        "icd10Codes": [{"code": "I10", "description": "Essential (primary) hypertension"}],
        "medications": [
            _med(1, "Amlodipine", "5mg", "Take once daily in the morning", "30 tablets"),
            _med(2, "Metoprolol", "50mg", "Take twice daily", "60 tablets"),
        ],
    },
    {
        "id": 3,
        "diagnosis": "Type 2 Diabetes",
        "icd10Codes": [{"code": "E11.9", "description": "Type 2 diabetes mellitus without complications"}],
        "medications": [_med(1, "Metformin", "500mg", "Take twice daily with meals", "60 tablets")],
    },
    {
        "id": 4,
        "diagnosis": "High Cholesterol",
        "icd10Codes": [{"code": "E78.0", "description": "Pure hypercholesterolaemia"}],
        "medications": [_med(1, "Atorvastatin", "20mg", "Take once daily at bedtime", "30 tablets")],
    },
]


def _parse(records: list) -> List[PresetOut]:
    presets = []
    for record in records:
        try:
            presets.append(PresetOut.model_validate(record))
        except ValidationError:
            logger.warning("Skipping malformed preset record: %r", record)
    return presets


def save_presets(store: KeyValueStore, presets: List[PresetOut]) -> None:
    write_json(store, PRESETS_STORAGE_KEY, [p.model_dump(by_alias=True) for p in presets])


def list_presets(store: KeyValueStore) -> List[PresetOut]:
    """Stored presets; seeds the sample presets when nothing usable is stored."""
    try:
        records = read_json(store, PRESETS_STORAGE_KEY)
    except ValueError:
        logger.warning("Stored presets are unreadable, using sample data", exc_info=True)
        records = None
    if isinstance(records, list) and records:
        parsed = _parse(records)
        if parsed:
            return parsed
        logger.warning("No stored preset record is readable, using sample data")

    presets = _parse(SAMPLE_PRESETS)
    try:
        save_presets(store, presets)
    except Exception:
        logger.exception("Error saving sample presets")
    return presets


def filter_presets(presets: List[PresetOut], text: str) -> List[PresetOut]:
    if not text or not text.strip():
        return list(presets)
    needle = text.lower()
    return [
        p
        for p in presets
        if needle in p.diagnosis.lower()
        or any(needle in med.name.lower() for med in p.medications)
        or any(needle in c.code.lower() or needle in c.description.lower() for c in p.icd10_codes)
    ]


def get_preset(store: KeyValueStore, preset_id: int) -> PresetOut:
    for preset in list_presets(store):
        if preset.id == preset_id:
            return preset
    raise RecordNotFound("Preset", preset_id)


def _medications(payload: PresetCreate) -> List[Medication]:
    return [Medication(id=index, **med.model_dump()) for index, med in enumerate(payload.medications, start=1)]


def add_preset(store: KeyValueStore, payload: PresetCreate) -> PresetOut:
    presets = list_presets(store)
    preset = PresetOut(
        id=max((p.id for p in presets), default=0) + 1,
        diagnosis=payload.diagnosis,
        icd10_codes=payload.icd10_codes,
        medications=_medications(payload),
    )
    save_presets(store, presets + [preset])
    logger.info("Preset %s added (%s)", preset.id, preset.diagnosis)
    return preset


def update_preset(store: KeyValueStore, preset_id: int, payload: PresetCreate) -> PresetOut:
    presets = list_presets(store)
    updated = None
    result = []
    for preset in presets:
        if preset.id == preset_id:
            preset = PresetOut(
                id=preset.id,
                diagnosis=payload.diagnosis,
                icd10_codes=payload.icd10_codes,
                medications=_medications(payload),
            )
            updated = preset
        result.append(preset)
    if updated is None:
        raise RecordNotFound("Preset", preset_id)
    save_presets(store, result)
    return updated


def delete_preset(store: KeyValueStore, preset_id: int) -> None:
    presets = list_presets(store)
    remaining = [p for p in presets if p.id != preset_id]
    if len(remaining) == len(presets):
        raise RecordNotFound("Preset", preset_id)
    save_presets(store, remaining)
    logger.info("Preset %s deleted", preset_id)

"""Patient registry, stored as a single JSON list under `@patients_data`."""

from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from rxpad.core.errors import RecordNotFound
from rxpad.core.kv_store import KeyValueStore, read_json, write_json
from rxpad.schemas.patient import PatientCreate, PatientOut
from rxpad.utils.phone import digits_only, format_cell_number

logger = logging.getLogger(__name__)

PATIENTS_STORAGE_KEY = "@patients_data"

SAMPLE_PATIENTS = [
    {"id": 1, "name": "John", "surname": "Smith", "cellNumber": "+27123456789", "prescriptions": []},
    {"id": 2, "name": "Sarah", "surname": "Johnson", "cellNumber": "+27987654321", "prescriptions": []},
    {"id": 3, "name": "Michael", "surname": "Brown", "cellNumber": "+27555123456", "prescriptions": []},
    {"id": 4, "name": "Emma", "surname": "Davis", "cellNumber": "+27444987654", "prescriptions": []},
    {"id": 5, "name": "David", "surname": "Wilson", "cellNumber": "+27666789123", "prescriptions": []},
]


def _parse(records: list) -> List[PatientOut]:
    patients = []
    for record in records:
        try:
            patients.append(PatientOut.model_validate(record))
        except ValidationError:
            logger.warning("Skipping malformed patient record: %r", record)
    return patients


def save_patients(store: KeyValueStore, patients: List[PatientOut]) -> None:
    write_json(store, PATIENTS_STORAGE_KEY, [p.model_dump(by_alias=True) for p in patients])


def list_patients(store: KeyValueStore) -> List[PatientOut]:
    """Stored patients; seeds the sample patients when nothing usable is stored."""
    try:
        records = read_json(store, PATIENTS_STORAGE_KEY)
    except ValueError:
        logger.warning("Stored patients are unreadable, using sample data", exc_info=True)
        records = None
    if isinstance(records, list) and records:
        parsed = _parse(records)
        if parsed:
            return parsed
        logger.warning("No stored patient record is readable, using sample data")

    patients = _parse(SAMPLE_PATIENTS)
    try:
        save_patients(store, patients)
    except Exception:
        logger.exception("Error saving sample patients")
    return patients


def filter_patients(patients: List[PatientOut], text: str) -> List[PatientOut]:
    """Match by full name, or by the digits of the cell number when the text has digits."""
    if not text or not text.strip():
        return list(patients)
    needle = text.lower()
    digits = digits_only(text)
    return [
        p
        for p in patients
        if needle in p.full_name.lower() or (digits and digits in digits_only(p.cell_number))
    ]


def get_patient(store: KeyValueStore, patient_id: int) -> PatientOut:
    for patient in list_patients(store):
        if patient.id == patient_id:
            return patient
    raise RecordNotFound("Patient", patient_id)


def _next_id(patients: List[PatientOut]) -> int:
    return max((p.id for p in patients), default=0) + 1


def add_patient(store: KeyValueStore, payload: PatientCreate) -> PatientOut:
    patients = list_patients(store)
    patient = PatientOut(
        id=_next_id(patients),
        name=payload.name,
        surname=payload.surname,
        cell_number=format_cell_number(payload.cell_number),
        prescriptions=[],
    )
    save_patients(store, patients + [patient])
    logger.info("Patient %s added", patient.id)
    return patient


def update_patient(store: KeyValueStore, patient_id: int, payload: PatientCreate) -> PatientOut:
    patients = list_patients(store)
    updated = None
    result = []
    for patient in patients:
        if patient.id == patient_id:
            patient = patient.model_copy(
                update={
                    "name": payload.name,
                    "surname": payload.surname,
                    "cell_number": format_cell_number(payload.cell_number),
                }
            )
            updated = patient
        result.append(patient)
    if updated is None:
        raise RecordNotFound("Patient", patient_id)
    save_patients(store, result)
    return updated


def delete_patient(store: KeyValueStore, patient_id: int) -> None:
    patients = list_patients(store)
    remaining = [p for p in patients if p.id != patient_id]
    if len(remaining) == len(patients):
        raise RecordNotFound("Patient", patient_id)
    save_patients(store, remaining)
    logger.info("Patient %s deleted", patient_id)

"""Update functions for the immutable prescription form."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Union

from rxpad.clinical.icd10.models import CodeEntry, CodeRef
from rxpad.core.errors import FormValidationError
from rxpad.schemas.patient import PatientOut
from rxpad.schemas.prescription import MAX_REPEATS, PrescriptionForm
from rxpad.schemas.preset import PresetOut


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def preset_prescription_text(preset: PresetOut) -> str:
    blocks = [
        f"{index}. {med.name} {med.dose}\n   {med.direction}\n   Quantity: {med.quantity}"
        for index, med in enumerate(preset.medications, start=1)
    ]
    return "\n\n".join(blocks)


def select_patient(form: PrescriptionForm, patient: PatientOut) -> PrescriptionForm:
    return form.model_copy(update={"patient": patient, "use_custom_patient": False})


def use_custom_patient(form: PrescriptionForm, name: str) -> PrescriptionForm:
    return form.model_copy(update={"custom_patient_name": name, "use_custom_patient": True})


def select_preset(form: PrescriptionForm, preset: PresetOut) -> PrescriptionForm:
    """Fill the prescription text and ICD-10 codes from a preset."""
    return form.model_copy(
        update={
            "preset_id": preset.id,
            "prescription": preset_prescription_text(preset),
            "icd10_codes": tuple(preset.icd10_codes),
            "use_custom_prescription": False,
        }
    )


def use_custom_prescription(form: PrescriptionForm, text: str) -> PrescriptionForm:
    return form.model_copy(update={"custom_prescription": text, "use_custom_prescription": True})


def set_icd10_codes(form: PrescriptionForm, codes: Iterable[Union[CodeRef, CodeEntry]]) -> PrescriptionForm:
    """Attach codes to the form; search results are reduced to code and description."""
    unique: dict[str, CodeRef] = {}
    for code in codes:
        if isinstance(code, CodeEntry):
            code = CodeRef.from_entry(code)
        unique.setdefault(code.code, code)
    return form.model_copy(update={"icd10_codes": tuple(unique.values())})


def set_repeats(form: PrescriptionForm, repeats: int) -> PrescriptionForm:
    if not 0 <= repeats <= MAX_REPEATS:
        raise FormValidationError(f"Repeats must be between 0 and {MAX_REPEATS}.")
    return form.model_copy(update={"repeats": repeats})


def set_date(form: PrescriptionForm, value: date) -> PrescriptionForm:
    return form.model_copy(update={"date": value})


def set_age(form: PrescriptionForm, age: str) -> PrescriptionForm:
    return form.model_copy(update={"age": age.strip()})


def clear_form() -> PrescriptionForm:
    return PrescriptionForm()


def patient_name(form: PrescriptionForm) -> str:
    if form.use_custom_patient:
        return form.custom_patient_name.strip()
    return form.patient.full_name if form.patient else ""


def prescription_text(form: PrescriptionForm) -> str:
    return form.custom_prescription if form.use_custom_prescription else form.prescription


def validate_form(form: PrescriptionForm) -> None:
    if not form.use_custom_patient and form.patient is None:
        raise FormValidationError("Please select a patient or use custom name.")
    if form.use_custom_patient and not form.custom_patient_name.strip():
        raise FormValidationError("Please enter a patient name.")
    if not prescription_text(form).strip():
        raise FormValidationError("Please enter prescription details.")

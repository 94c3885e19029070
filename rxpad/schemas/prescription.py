from datetime import date as date_type
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rxpad.clinical.icd10.models import CodeRef
from rxpad.schemas.patient import PatientOut

MAX_REPEATS = 6


class PrescriptionForm(BaseModel):
    """State of the create-script form. Immutable: updates return a new form."""

    model_config = ConfigDict(frozen=True)

    date: date_type = Field(default_factory=date_type.today)
    age: str = ""
    patient: Optional[PatientOut] = None
    custom_patient_name: str = ""
    use_custom_patient: bool = False
    preset_id: Optional[int] = None
    prescription: str = ""
    custom_prescription: str = ""
    use_custom_prescription: bool = False
    icd10_codes: tuple[CodeRef, ...] = ()
    repeats: int = Field(0, ge=0, le=MAX_REPEATS)


class PrescriptionRequest(BaseModel):
    """HTTP payload describing a prescription to render."""

    date: Optional[date_type] = None
    age: str = ""
    patient_id: Optional[int] = None
    custom_patient_name: Optional[str] = None
    preset_id: Optional[int] = None
    custom_prescription: Optional[str] = None
    icd10_codes: Optional[list[CodeRef]] = None
    repeats: int = Field(0, ge=0, le=MAX_REPEATS)


class ShareRequest(PrescriptionRequest):
    channel: Literal["whatsapp", "email"] = "whatsapp"


class ExportOut(BaseModel):
    path: str
    filename: str


class ShareOut(ExportOut):
    channel: str
    title: str
    message: str

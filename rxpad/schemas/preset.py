from pydantic import BaseModel, ConfigDict, Field, field_validator

from rxpad.clinical.icd10.models import CodeRef


class MedicationIn(BaseModel):
    name: str
    dose: str
    direction: str
    quantity: str

    @field_validator("name", "dose", "direction", "quantity")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill in all medication fields.")
        return value


class Medication(MedicationIn):
    id: int

    @field_validator("id", mode="before")
    @classmethod
    def _whole_id(cls, value):
        # Older records carry fractional timestamp ids.
        return int(value) if isinstance(value, float) else value


class PresetCreate(BaseModel):
    """Payload to add or edit a preset: a diagnosis and at least one medication."""

    model_config = ConfigDict(populate_by_name=True)

    diagnosis: str
    icd10_codes: list[CodeRef] = Field(default_factory=list, alias="icd10Codes")
    medications: list[MedicationIn]

    @field_validator("diagnosis")
    @classmethod
    def _diagnosis_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a diagnosis and at least one medication.")
        return value

    @field_validator("medications")
    @classmethod
    def _at_least_one(cls, value: list[MedicationIn]) -> list[MedicationIn]:
        if not value:
            raise ValueError("Please enter a diagnosis and at least one medication.")
        return value


class PresetOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    diagnosis: str
    icd10_codes: list[CodeRef] = Field(default_factory=list, alias="icd10Codes")
    medications: list[Medication] = []

    @field_validator("icd10_codes", mode="before")
    @classmethod
    def _codes_or_empty(cls, value):
        # Presets saved before ICD-10 support have no codes.
        return value or []

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatientCreate(BaseModel):
    """Payload to add or edit a patient. Name and surname are required."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    surname: str
    cell_number: str = Field("", alias="cellNumber")

    @field_validator("name", "surname")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill in both name and surname fields.")
        return value

    @field_validator("cell_number", mode="before")
    @classmethod
    def _strip_cell(cls, value):
        return (value or "").strip()


class PatientOut(BaseModel):
    """Stored patient record. Serialized with the camelCase keys of the stored blob."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    name: str
    surname: str
    cell_number: str = Field("", alias="cellNumber")
    prescriptions: list = []

    @field_validator("cell_number", mode="before")
    @classmethod
    def _cell_or_empty(cls, value):
        return value or ""

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

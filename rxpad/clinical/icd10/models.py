"""ICD-10 data models.

This module is intentionally domain-agnostic so it can be reused by any screen
that needs coded terms (code search, presets, prescription form).
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CodeEntry(BaseModel):
    """One coded term of the bundled dataset.

    The bundled artifact uses camelCase keys (`code3`, `code3Description`,
    `chapter`, ...); both those and the field names are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str = ""
    description: str = ""
    parent_code: str = Field("", alias="code3")
    parent_description: str = Field("", alias="code3Description")
    category: str = Field("", alias="chapter")
    group_code: str = Field("", alias="groupCode")
    valid_primary: bool = Field(False, alias="validPrimary")
    valid_clinical: bool = Field(False, alias="validClinical")

    @field_validator(
        "code",
        "description",
        "parent_code",
        "parent_description",
        "category",
        "group_code",
        mode="before",
    )
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("valid_primary", "valid_clinical", mode="before")
    @classmethod
    def _flag_or_false(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "y")
        if isinstance(value, (int, float)):
            return bool(value)
        return False

    def to_record(self) -> dict[str, Any]:
        """Serialized form used by the bundled artifact and the local cache."""
        return self.model_dump(by_alias=True)


class BundledDataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    codes: List[CodeEntry] = []


class CodeRef(BaseModel):
    """Code/description pair attached to presets and prescriptions."""

    code: str
    description: str = ""

    @classmethod
    def from_entry(cls, entry: CodeEntry) -> "CodeRef":
        return cls(code=entry.code, description=entry.description)

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database (backs the key-value store)
    DATABASE_URL: str | None = None

    @property
    def database_url(self):
        return self.DATABASE_URL or "sqlite:///./rxpad.db"

    # App
    PROJECT_NAME: str = "Prescription App"
    APP_VERSION: str = "1.0.0"
    APP_EDITION: str = "Personal Use Edition"
    LOG_LEVEL: str = "INFO"

    # ICD-10
    ICD10_DATASET_PATH: str = str(PACKAGE_DIR / "data" / "icd10_codes.json")
    ICD10_SEARCH_LIMIT: int = 100
    RECENT_SEARCHES_LIMIT: int = 10
    # Collation used to order codes; empty means the environment locale (LC_ALL / LANG)
    ICD10_COLLATION_LOCALE: str = ""

    # Export / share
    EXPORT_DIR: str = "exports/prescriptions"
    SHARE_OUTBOX_DIR: str = Field(
        "exports/outbox",
        validation_alias=AliasChoices("SHARE_OUTBOX_DIR", "OUTBOX_DIR"),
    )
    DEFAULT_COUNTRY_CODE: str = "27"

    # Practice header printed on every prescription
    PRACTICE_NAME: str = "DR P. HIRA INC."
    PRACTICE_NUMBER: str = "PR. NO 0929484"
    PRACTICE_ADDRESS: str = "5/87 Dunswart Apartments, Dunswart, Boksburg, 1459"
    PRACTICE_POSTAL: str = "PO Box 18131, Actonville, Benoni, 1501"
    PRACTICE_TEL: str = "010 493 3544"
    PRACTICE_FAX: str = "011 914 3093"
    PRACTICE_CELL: str = "069 711 0731"
    PRACTICE_EMAIL: str = "info@drhirainc.com"
    PRACTICE_CONTACT_NAME: str = "Dr P Hira"
    SIGNATURE_PATH: str | None = None


settings = Settings()

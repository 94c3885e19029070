"""Build the bundled ICD-10 artifact from a `;` separated CSV export.

Expected columns: code, description and optionally code3, code3_description,
chapter, group_code, valid_primary, valid_clinical.

    python scripts/build_icd10_dataset.py path/to/icd10.csv --version 2024.1
"""

import argparse
import json
import sys
import os
from pathlib import Path

# Add project root to PYTHONPATH
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(BASE_DIR)

import pandas as pd

from rxpad.clinical.icd10.service import parse_entries
from rxpad.core.config import settings

COLUMN_ALIASES = {
    "code3_description": "code3Description",
    "group_code": "groupCode",
    "valid_primary": "validPrimary",
    "valid_clinical": "validClinical",
}


def build_dataset(csv_path: Path, version: str) -> dict:
    df = pd.read_csv(csv_path, sep=";", dtype=str, keep_default_na=False)
    df = df.rename(columns=COLUMN_ALIASES)

    records = []
    seen = set()
    for _, row in df.iterrows():
        code = str(row.get("code", "")).strip()
        description = str(row.get("description", "")).strip()
        if not code or not description or code in seen:
            continue
        seen.add(code)
        record = {k: str(v).strip() for k, v in row.items()}
        record.setdefault("code3", code[:3])
        records.append(record)

    codes = [entry.to_record() for entry in parse_entries(records)]
    return {"version": version, "totalCodes": len(codes), "codes": codes}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--version", required=True, help="Opaque dataset version; a new value invalidates app caches")
    parser.add_argument("--output", type=Path, default=Path(settings.ICD10_DATASET_PATH))
    args = parser.parse_args()

    print(f"Reading: {args.csv_path.resolve()}")
    dataset = build_dataset(args.csv_path, args.version)
    args.output.write_text(json.dumps(dataset, ensure_ascii=False, indent=1), encoding="utf-8")
    print(f"ICD-10 dataset written: {args.output} codes={dataset['totalCodes']} version={args.version}")


if __name__ == "__main__":
    main()

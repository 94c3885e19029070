from fastapi import HTTPException, Request, status

from rxpad.clinical.icd10.models import BundledDataset
from rxpad.core.kv_store import KeyValueStore
from rxpad.services.share_service import ShareTarget


def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def get_icd10_dataset(request: Request) -> BundledDataset:
    dataset = getattr(request.app.state, "icd10", None)
    if dataset is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="ICD-10 dataset not loaded")
    return dataset


def get_share_target(request: Request) -> ShareTarget:
    return request.app.state.share_target

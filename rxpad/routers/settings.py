from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from rxpad.core.deps import get_store
from rxpad.core.errors import ConfirmationRequired
from rxpad.core.kv_store import KeyValueStore
from rxpad.services import data_admin

router = APIRouter(prefix="/settings", tags=["settings"])


class DeleteAllIn(BaseModel):
    confirmation: str


@router.get("/summary")
def summary(store: KeyValueStore = Depends(get_store)):
    return data_admin.data_summary(store)


@router.get("/info")
def info():
    return data_admin.app_info()


@router.post("/delete-all")
def delete_all(payload: DeleteAllIn, store: KeyValueStore = Depends(get_store)):
    try:
        data_admin.delete_all_data(store, payload.confirmation)
    except ConfirmationRequired as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"message": "All data has been deleted successfully."}

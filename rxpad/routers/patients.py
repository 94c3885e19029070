from fastapi import APIRouter, Depends, HTTPException, Query, status

from rxpad.core.deps import get_store
from rxpad.core.errors import RecordNotFound
from rxpad.core.kv_store import KeyValueStore
from rxpad.schemas.patient import PatientCreate, PatientOut
from rxpad.services import patient_registry

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientOut])
def list_patients(q: str = Query(default=""), store: KeyValueStore = Depends(get_store)):
    return patient_registry.filter_patients(patient_registry.list_patients(store), q)


@router.post("", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
def create_patient(payload: PatientCreate, store: KeyValueStore = Depends(get_store)):
    return patient_registry.add_patient(store, payload)


@router.get("/{patient_id}", response_model=PatientOut)
def get_patient(patient_id: int, store: KeyValueStore = Depends(get_store)):
    try:
        return patient_registry.get_patient(store, patient_id)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")


@router.put("/{patient_id}", response_model=PatientOut)
def update_patient(patient_id: int, payload: PatientCreate, store: KeyValueStore = Depends(get_store)):
    try:
        return patient_registry.update_patient(store, patient_id, payload)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(patient_id: int, store: KeyValueStore = Depends(get_store)):
    try:
        patient_registry.delete_patient(store, patient_id)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")

from fastapi import APIRouter, Depends, HTTPException, Query, status

from rxpad.core.deps import get_store
from rxpad.core.errors import RecordNotFound
from rxpad.core.kv_store import KeyValueStore
from rxpad.schemas.preset import PresetCreate, PresetOut
from rxpad.services import preset_registry

router = APIRouter(prefix="/presets", tags=["presets"])


@router.get("", response_model=list[PresetOut])
def list_presets(q: str = Query(default=""), store: KeyValueStore = Depends(get_store)):
    return preset_registry.filter_presets(preset_registry.list_presets(store), q)


@router.post("", response_model=PresetOut, status_code=status.HTTP_201_CREATED)
def create_preset(payload: PresetCreate, store: KeyValueStore = Depends(get_store)):
    return preset_registry.add_preset(store, payload)


@router.get("/{preset_id}", response_model=PresetOut)
def get_preset(preset_id: int, store: KeyValueStore = Depends(get_store)):
    try:
        return preset_registry.get_preset(store, preset_id)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.put("/{preset_id}", response_model=PresetOut)
def update_preset(preset_id: int, payload: PresetCreate, store: KeyValueStore = Depends(get_store)):
    try:
        return preset_registry.update_preset(store, preset_id, payload)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preset(preset_id: int, store: KeyValueStore = Depends(get_store)):
    try:
        preset_registry.delete_preset(store, preset_id)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")

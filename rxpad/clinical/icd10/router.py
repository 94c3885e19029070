"""FastAPI router for ICD-10 lookup, favorites and recent searches.

The module is domain-agnostic and should not depend on patients, presets or
prescriptions.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from rxpad.clinical.icd10 import user_data
from rxpad.clinical.icd10.models import BundledDataset, CodeEntry
from rxpad.clinical.icd10.service import lookup, search_page
from rxpad.core.config import settings
from rxpad.core.deps import get_icd10_dataset, get_store
from rxpad.core.kv_store import KeyValueStore

router = APIRouter(prefix="/icd10", tags=["Clinical: ICD10"])


class FavoriteIn(BaseModel):
    code: str


def _entry_out(entry: CodeEntry, favorites: set[str] | None = None) -> Dict[str, Any]:
    out = {
        "code": entry.code,
        "description": entry.description,
        "parent_code": entry.parent_code,
        "parent_description": entry.parent_description,
        "category": entry.category,
        "group_code": entry.group_code,
        "valid_primary": entry.valid_primary,
        "valid_clinical": entry.valid_clinical,
    }
    if favorites is not None:
        out["favorite"] = entry.code in favorites
    return out


@router.get("/search")
def search(
    q: str = Query(default=""),
    limit: int = Query(default=settings.ICD10_SEARCH_LIMIT, ge=1, le=settings.ICD10_SEARCH_LIMIT),
    dataset: BundledDataset = Depends(get_icd10_dataset),
    store: KeyValueStore = Depends(get_store),
) -> Dict[str, Any]:
    page = search_page(dataset.codes, q, limit=limit)
    if q.strip():
        user_data.record_search(store, q)
    favorites = {fav.code for fav in user_data.list_favorites(store)}
    return {
        "query": q,
        "version": dataset.version,
        "total": page.total,
        "truncated": page.truncated,
        "results": [_entry_out(r, favorites) for r in page.results],
    }


@router.get("/favorites")
def list_favorites(store: KeyValueStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return [_entry_out(f) for f in user_data.list_favorites(store)]


@router.post("/favorites", status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteIn,
    dataset: BundledDataset = Depends(get_icd10_dataset),
    store: KeyValueStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    entry = lookup(dataset.codes, payload.code)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="ICD10 code not found")
    return [_entry_out(f) for f in user_data.add_favorite(store, entry)]


@router.delete("/favorites/{code}")
def remove_favorite(code: str, store: KeyValueStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return [_entry_out(f) for f in user_data.remove_favorite(store, code)]


@router.get("/recent")
def list_recent(store: KeyValueStore = Depends(get_store)) -> List[str]:
    return user_data.list_recent(store)


@router.get("/{code}")
def get_by_code(code: str, dataset: BundledDataset = Depends(get_icd10_dataset)) -> Dict[str, Any]:
    item = lookup(dataset.codes, code)
    if not item:
        raise HTTPException(status_code=404, detail="ICD10 code not found")
    return _entry_out(item)

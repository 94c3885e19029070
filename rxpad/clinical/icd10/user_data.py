"""Favorite codes and recent search terms, kept in the local key-value store.

These are conveniences: when the store misbehaves the failure is logged and
the caller gets an empty list or an unchanged state.
"""

from __future__ import annotations

import logging
from typing import List

from rxpad.clinical.icd10.models import CodeEntry
from rxpad.clinical.icd10.service import parse_entries
from rxpad.core.config import settings
from rxpad.core.kv_store import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

FAVORITES_KEY = "@icd10_favorites"
RECENT_SEARCHES_KEY = "@icd10_recent"


def list_favorites(store: KeyValueStore) -> List[CodeEntry]:
    try:
        records = read_json(store, FAVORITES_KEY)
    except Exception:
        logger.warning("Error loading ICD-10 favorites", exc_info=True)
        return []
    if not isinstance(records, list):
        return []
    return parse_entries(records)


def _save_favorites(store: KeyValueStore, favorites: List[CodeEntry]) -> bool:
    try:
        write_json(store, FAVORITES_KEY, [entry.to_record() for entry in favorites])
        return True
    except Exception:
        logger.warning("Could not save ICD-10 favorites", exc_info=True)
        return False


def is_favorite(store: KeyValueStore, code: str) -> bool:
    return any(fav.code == code for fav in list_favorites(store))


def add_favorite(store: KeyValueStore, entry: CodeEntry) -> List[CodeEntry]:
    favorites = list_favorites(store)
    if any(fav.code == entry.code for fav in favorites):
        return favorites
    favorites.append(entry)
    _save_favorites(store, favorites)
    return favorites


def remove_favorite(store: KeyValueStore, code: str) -> List[CodeEntry]:
    favorites = [fav for fav in list_favorites(store) if fav.code != code]
    _save_favorites(store, favorites)
    return favorites


def toggle_favorite(store: KeyValueStore, entry: CodeEntry) -> bool:
    """Flip the favorite state of `entry`; returns the new state."""
    if is_favorite(store, entry.code):
        remove_favorite(store, entry.code)
        return False
    add_favorite(store, entry)
    return True


def list_recent(store: KeyValueStore) -> List[str]:
    try:
        terms = read_json(store, RECENT_SEARCHES_KEY)
    except Exception:
        logger.warning("Error loading recent ICD-10 searches", exc_info=True)
        return []
    if not isinstance(terms, list):
        return []
    return [t for t in terms if isinstance(t, str)]


def record_search(store: KeyValueStore, term: str, limit: int | None = None) -> List[str]:
    """Push `term` to the front of the recent list, de-duplicated and capped."""
    if not term or not term.strip():
        return list_recent(store)
    limit = limit if limit is not None else settings.RECENT_SEARCHES_LIMIT
    recent = [term] + [t for t in list_recent(store) if t != term]
    recent = recent[:limit]
    try:
        write_json(store, RECENT_SEARCHES_KEY, recent)
    except Exception:
        logger.warning("Could not save recent ICD-10 search", exc_info=True)
    return recent

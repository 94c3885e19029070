"""ICD-10 service layer.

The public API of this module should remain stable even if the search strategy
changes. Everything here works over an in-memory, read-only dataset that is
loaded once at startup (`load_dataset`) and passed explicitly to `search`.
"""

from __future__ import annotations

import json
import locale
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from rxpad.clinical.icd10.models import BundledDataset, CodeEntry
from rxpad.core.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 100

CACHE_VERSION_KEY = "@icd10_version"
CACHE_DATA_KEY = "@icd10_codes"

# Ranking tiers (lower is better)
_TIER_EXACT_CODE = 0
_TIER_CODE_PREFIX = 1
_TIER_DESCRIPTION_PREFIX = 2
_TIER_OTHER = 3


@dataclass(frozen=True)
class SearchPage:
    results: List[CodeEntry]
    total: int

    @property
    def truncated(self) -> bool:
        return self.total > len(self.results)


def _searchable_fields(entry: CodeEntry) -> tuple[str, ...]:
    return (
        entry.code,
        entry.description,
        entry.parent_code,
        entry.parent_description,
        entry.category,
    )


def _matches(entry: CodeEntry, folded_query: str) -> bool:
    return any(folded_query in field.casefold() for field in _searchable_fields(entry))


def _rank_key(entry: CodeEntry, folded_query: str) -> tuple:
    code = entry.code.casefold()
    if code == folded_query:
        tier = _TIER_EXACT_CODE
    elif code.startswith(folded_query):
        tier = _TIER_CODE_PREFIX
    elif entry.description.casefold().startswith(folded_query):
        tier = _TIER_DESCRIPTION_PREFIX
    else:
        tier = _TIER_OTHER
    # Raw code as the last element keeps the order total when two codes collate equal.
    return (tier, locale.strxfrm(code), entry.code)


def _ranked_matches(dataset: Iterable[CodeEntry], query: str) -> List[CodeEntry]:
    q = (query or "").strip().casefold()
    if not q:
        return []
    matched = [entry for entry in dataset if _matches(entry, q)]
    matched.sort(key=lambda entry: _rank_key(entry, q))
    return matched


def search(dataset: Sequence[CodeEntry], query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[CodeEntry]:
    """Return the entries matching `query`, best first, at most `limit` of them.

    An entry matches when the trimmed, case-folded query is a substring of its
    code, description, parent code, parent description or category. Results
    are ordered exact code match first, then code prefix, then description
    prefix, then everything else; ties are broken by code. A blank query
    returns nothing.
    """
    return _ranked_matches(dataset, query)[:limit]


def search_page(dataset: Sequence[CodeEntry], query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> SearchPage:
    """Like `search`, but also reports how many entries matched before truncation."""
    matched = _ranked_matches(dataset, query)
    return SearchPage(results=matched[:limit], total=len(matched))


def lookup(dataset: Sequence[CodeEntry], code: str) -> Optional[CodeEntry]:
    """Get an entry by its exact code (case-insensitive)."""
    c = (code or "").strip().casefold()
    if not c:
        return None
    for entry in dataset:
        if entry.code.casefold() == c:
            return entry
    return None


def parse_entries(records: Iterable[Any]) -> List[CodeEntry]:
    """Build entries from raw records, defaulting missing fields instead of failing the batch."""
    entries: List[CodeEntry] = []
    for index, record in enumerate(records):
        if isinstance(record, CodeEntry):
            entries.append(record)
            continue
        if not isinstance(record, dict):
            logger.warning("Skipping ICD-10 record %d: expected an object, got %s", index, type(record).__name__)
            continue
        try:
            entries.append(CodeEntry.model_validate(record))
        except ValidationError:
            logger.warning("Skipping malformed ICD-10 record %d", index, exc_info=True)
    return entries


def read_bundled_dataset(path: str | Path) -> BundledDataset:
    """Read the read-only dataset artifact shipped with the app."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    version = str(raw.get("version") or "")
    codes = parse_entries(raw.get("codes") or [])
    logger.info("Bundled ICD-10 dataset read: version=%s codes=%d", version, len(codes))
    return BundledDataset(version=version, codes=codes)


def _read_cached(cache: KeyValueStore, bundled_version: str) -> Optional[List[CodeEntry]]:
    cached_version = cache.get(CACHE_VERSION_KEY)
    if cached_version != bundled_version:
        return None
    raw = cache.get(CACHE_DATA_KEY)
    if raw is None:
        return None
    records = json.loads(raw)
    if not isinstance(records, list):
        raise ValueError("cached ICD-10 data is not a list")
    # One bad record invalidates the whole cached generation.
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"cached ICD-10 record {index} is not an object")
    return [CodeEntry.model_validate(record) for record in records]


def load_dataset(
    bundled_version: str,
    bundled_entries: Sequence[CodeEntry],
    cache: KeyValueStore,
) -> List[CodeEntry]:
    """Return the dataset, going through the local cache keyed by version.

    The cache holds exactly one generation: when its version tag matches
    `bundled_version` the cached entries are returned, otherwise the bundled
    entries replace it wholesale. The cache is never required for correctness:
    if it cannot be read the bundled entries are returned and nothing is
    written; if it cannot be written the bundled entries are still returned.
    """
    bundled = list(bundled_entries)
    try:
        cached = _read_cached(cache, bundled_version)
    except Exception:
        logger.warning("ICD-10 cache unavailable, using bundled dataset", exc_info=True)
        return bundled

    if cached is not None:
        logger.info("ICD-10 dataset loaded from cache (version=%s, codes=%d)", bundled_version, len(cached))
        return cached

    try:
        # Data first: a version tag must never point at an older generation.
        cache.set(CACHE_DATA_KEY, json.dumps([entry.to_record() for entry in bundled]))
        cache.set(CACHE_VERSION_KEY, bundled_version)
        logger.info("ICD-10 cache refreshed (version=%s, codes=%d)", bundled_version, len(bundled))
    except Exception:
        logger.warning("Could not write ICD-10 cache", exc_info=True)
    return bundled

"""Local key-value store.

Every persisted record of the app (patients, presets, ICD-10 cache, favorites,
recent searches) lives under a string key as a serialized JSON blob. There are
no transactional guarantees across keys: each `set` commits on its own.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from rxpad.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, keys: Iterable[str]) -> None: ...


class SqlKeyValueStore:
    """KeyValueStore backed by the `kv_store` table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            return db.execute(select(KeyValueEntry.value).where(KeyValueEntry.key == key)).scalar_one_or_none()

    def set(self, key: str, value: str) -> None:
        db: Session = self._session_factory()
        try:
            db.merge(KeyValueEntry(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        db: Session = self._session_factory()
        try:
            db.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class MemoryKeyValueStore:
    """Dict-backed store, used when no database is configured and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


def read_json(store: KeyValueStore, key: str) -> Any:
    """Return the decoded JSON under `key`, or None when missing. Decode errors propagate."""
    raw = store.get(key)
    if raw is None:
        return None
    return json.loads(raw)


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, default=str))

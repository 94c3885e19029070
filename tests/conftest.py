import pytest
from fastapi.testclient import TestClient

from rxpad.clinical.icd10.models import CodeEntry
from rxpad.clinical.icd10.service import read_bundled_dataset
from rxpad.core.config import settings
from rxpad.core.kv_store import MemoryKeyValueStore
from rxpad.main import create_app
from rxpad.services.share_service import OutboxShareTarget


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture(scope="session")
def bundled():
    return read_bundled_dataset(settings.ICD10_DATASET_PATH)


@pytest.fixture
def make_entry():
    def _make(code, description="", **fields):
        return CodeEntry(code=code, description=description, **fields)

    return _make


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    path = tmp_path / "exports"
    monkeypatch.setattr(settings, "EXPORT_DIR", str(path))
    return path


@pytest.fixture
def outbox(tmp_path):
    return tmp_path / "outbox"


@pytest.fixture
def client(store, export_dir, outbox):
    app = create_app(store=store, share_target=OutboxShareTarget(outbox))
    with TestClient(app) as c:
        yield c

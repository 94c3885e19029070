import locale
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from rxpad.clinical.icd10.models import BundledDataset
from rxpad.clinical.icd10.router import router as icd10_router
from rxpad.clinical.icd10.service import load_dataset, read_bundled_dataset
from rxpad.core.config import settings
from rxpad.core.db import Base, SessionLocal, engine
from rxpad.core.kv_store import KeyValueStore, SqlKeyValueStore
from rxpad.routers import health
from rxpad.routers.patients import router as patients_router
from rxpad.routers.prescriptions import router as prescriptions_router
from rxpad.routers.presets import router as presets_router
from rxpad.routers.settings import router as settings_router
from rxpad.services.share_service import OutboxShareTarget, ShareTarget

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def configure_collation(name: str | None = None) -> str:
    """Set LC_COLLATE for code ordering; returns the locale in effect.

    An unknown locale is logged and the current collation is kept.
    """
    requested = settings.ICD10_COLLATION_LOCALE if name is None else name
    try:
        return locale.setlocale(locale.LC_COLLATE, requested)
    except locale.Error:
        current = locale.setlocale(locale.LC_COLLATE)
        logger.warning("Collation locale %r unavailable, keeping %s", requested, current)
        return current


def load_icd10(store: KeyValueStore, dataset_path: str | None = None) -> BundledDataset:
    """Read the bundled artifact and resolve it through the versioned cache."""
    bundled = read_bundled_dataset(dataset_path or settings.ICD10_DATASET_PATH)
    codes = load_dataset(bundled.version, bundled.codes, store)
    return BundledDataset(version=bundled.version, codes=codes)


def create_app(
    store: KeyValueStore | None = None,
    share_target: ShareTarget | None = None,
    dataset_path: str | None = None,
) -> FastAPI:
    app = FastAPI(
        title=f"{settings.PROJECT_NAME} API",
        description="Prescriptions, patients, presets and ICD-10 lookup for a medical practice",
        version=settings.APP_VERSION,
    )

    @app.exception_handler(Exception)
    def global_exception_handler(request: Request, exc: Exception):
        """Unhandled errors: log them and return a generic 500."""
        if isinstance(exc, HTTPException):
            raise exc
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(health.router, tags=["health"])
    app.include_router(icd10_router)
    app.include_router(patients_router)
    app.include_router(presets_router)
    app.include_router(prescriptions_router)
    app.include_router(settings_router)

    @app.on_event("startup")
    def on_startup() -> None:
        app_store = store
        if app_store is None:
            Base.metadata.create_all(bind=engine)
            app_store = SqlKeyValueStore(SessionLocal)
        configure_collation()
        app.state.store = app_store
        app.state.share_target = share_target or OutboxShareTarget(settings.SHARE_OUTBOX_DIR)
        app.state.icd10 = load_icd10(app_store, dataset_path)
        logger.info("App version: %s", settings.APP_VERSION)

    return app


app = create_app()

# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.database import Base, create_db_engine, create_session_factory
from core.exceptions import (
    IncidentNotFoundError,
    InvalidStatusError,
    PhotoNotFoundError,
    PhotoRejectedError,
    StorageError,
)
from services.config_service import (
    get_database_url,
    get_log_level,
    get_max_upload_bytes,
    get_orphan_grace_minutes,
    get_photo_max_size_kb,
    get_upload_dir,
    is_photo_sweep_enabled,
)
from services.identifier_service import utc_now_iso
from services.incident_service import IncidentLifecycleService
from services.photo_storage import PhotoStorage

# Import all models to register them
from models.incident import Incident  # noqa: F401
from models.audit_log import AuditLogEntry  # noqa: F401

# Import routers
from api import audit, incidents

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger(__name__)

SERVICE_NAME = "EishAlert Fire Reporting System"
SERVICE_VERSION = "1.0.0"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IncidentNotFoundError)
    async def incident_not_found_handler(request: Request, exc: IncidentNotFoundError):
        return _error_response(404, "Incident not found")

    @app.exception_handler(PhotoNotFoundError)
    async def photo_not_found_handler(request: Request, exc: PhotoNotFoundError):
        return _error_response(404, str(exc))

    @app.exception_handler(InvalidStatusError)
    async def invalid_status_handler(request: Request, exc: InvalidStatusError):
        return _error_response(400, str(exc))

    @app.exception_handler(PhotoRejectedError)
    async def photo_rejected_handler(request: Request, exc: PhotoRejectedError):
        log.warning("Photo upload rejected on %s: %s", request.url.path, exc)
        return _error_response(400, str(exc))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        log.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _error_response(500, "Failed to save incident data")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log.error("Unhandled exception: %s", exc, exc_info=True)
        return _error_response(500, "Internal server error")


def _sweep_orphaned_photos(app: FastAPI) -> None:
    db = app.state.session_factory()
    try:
        service = IncidentLifecycleService(db, app.state.photo_storage)
        removed = service.reconcile_photos(get_orphan_grace_minutes())
        log.info("Startup photo sweep removed %d file(s)", len(removed))
    except Exception as exc:
        log.error("Startup photo sweep failed: %s", exc, exc_info=True)
    finally:
        db.close()


def create_app(database_url: Optional[str] = None, upload_dir: Optional[Path] = None) -> FastAPI:
    """Build the API. The engine is created at startup and lives on app.state."""
    resolved_url = database_url or get_database_url()
    photo_storage = PhotoStorage(upload_dir or get_upload_dir(), get_max_upload_bytes())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_db_engine(resolved_url)
        Base.metadata.create_all(bind=engine)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        photo_storage.ensure_root()
        log.info("%s ready (photos in %s)", SERVICE_NAME, photo_storage.root)

        if is_photo_sweep_enabled():
            _sweep_orphaned_photos(app)
        else:
            log.info("Photo sweep disabled. Set PHOTO_SWEEP_ON_STARTUP=true to enable.")

        yield

        engine.dispose()
        log.info("%s shut down", SERVICE_NAME)

    app = FastAPI(
        title="EishAlert",
        description="Fire and incident reporting with an append-only audit trail",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.photo_storage = photo_storage
    app.state.photo_max_size_kb = get_photo_max_size_kb()

    register_exception_handlers(app)

    # Register routers
    app.include_router(incidents.router, prefix="/api")
    app.include_router(audit.router, prefix="/api")

    # ==================== API: HEALTH CHECK ====================
    @app.get("/api/health")
    def api_health():
        """API health check endpoint."""
        return {
            "success": True,
            "status": "healthy",
            "timestamp": utc_now_iso(),
        }

    @app.get("/")
    def root():
        """Service info."""
        return {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

import logging
from io import BytesIO

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from fastapi.staticfiles import StaticFiles

from .api import activities, attachments, backup, classification, fiscal_years, ledger, narrative, reports, village
from .config import Base, engine, settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .core.version import get_version, get_version_info
from .services.backup import perform_sqlite_backup
from .services.fiscal_years import Workspace
from .services.storage import StorageBackend, storage_service

configure_logging(settings.log_level, json_output=settings.log_json)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=get_version())
app.state.workspace = Workspace()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

uploads_route = "/" + settings.uploads_public_prefix.strip("/")
if storage_service.backend == StorageBackend.LOCAL:
    uploads_dir = settings.uploads_root_path
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(uploads_route, StaticFiles(directory=str(uploads_dir)), name="uploads")
else:

    @app.get(f"{uploads_route}/{{path:path}}", include_in_schema=False)
    def proxy_uploads(path: str):
        file_data = storage_service.fetch(path)
        return StreamingResponse(BytesIO(file_data.content), media_type=file_data.content_type)


app.include_router(village.router)
app.include_router(fiscal_years.router)
app.include_router(classification.router)
app.include_router(activities.router)
app.include_router(ledger.router)
app.include_router(attachments.router)
app.include_router(narrative.router)
app.include_router(reports.router)
app.include_router(backup.router)


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready; storage backend %s", storage_service.backend.value)


@app.on_event("shutdown")
def shutdown() -> None:
    """Create a SQLite backup when the application stops."""
    try:
        backup_path = perform_sqlite_backup()
        if backup_path:
            logger.info("SQLite backup created at %s", backup_path)
    except Exception:
        logger.exception("Failed to create SQLite backup during shutdown.")


@app.get("/health")
def health() -> dict:
    workspace: Workspace = app.state.workspace
    return {
        "status": "ok",
        **get_version_info(),
        "active_year": workspace.year if workspace.loaded else None,
    }

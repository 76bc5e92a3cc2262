from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config import SessionLocal
from ..core.errors import NotFoundError
from ..services.fiscal_years import Workspace, list_available_years
from ..services.record_store import RecordStore
from ..services.storage import StorageService, storage_service


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_records(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace


def get_active_workspace(
    workspace: Workspace = Depends(get_workspace),
    records: RecordStore = Depends(get_records),
) -> Workspace:
    """The workspace with a year loaded; the latest year is opened on first use."""
    if not workspace.loaded:
        years = list_available_years(records)
        if not years:
            raise NotFoundError("Belum ada tahun anggaran; buat tahun anggaran terlebih dahulu")
        workspace.switch_year(records, years[-1])
    return workspace


def get_storage() -> StorageService:
    return storage_service

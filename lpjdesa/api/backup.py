import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ..core.errors import DomainValidationError
from ..schemas.schemas import RestoreSummary
from ..services import backup as backup_service
from ..services.fiscal_years import Workspace
from ..services.record_store import RecordStore
from ..utils.formatting import safe_file_stem
from .dependencies import get_active_workspace, get_records, get_workspace

router = APIRouter(prefix="/backup", tags=["backup"])


@router.post("/sqlite")
def create_sqlite_backup() -> Dict[str, Optional[str]]:
    path = backup_service.perform_sqlite_backup()
    return {"path": str(path) if path else None}


@router.get("/snapshot")
def download_snapshot(
    year: Optional[int] = None,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> JSONResponse:
    target = year if year is not None else workspace.year
    snapshot = backup_service.export_year_snapshot(records, target)
    village = safe_file_stem(snapshot["_meta"]["village_name"], fallback="Desa")
    filename = f"Backup_LPJ_{village}_{target}.json"
    return JSONResponse(
        content=snapshot,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/restore", response_model=RestoreSummary)
async def restore_snapshot(
    file: UploadFile = File(...),
    year: Optional[int] = None,
    workspace: Workspace = Depends(get_workspace),
    records: RecordStore = Depends(get_records),
) -> RestoreSummary:
    contents = await file.read()
    try:
        data: Any = json.loads(contents)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DomainValidationError(f"File backup bukan JSON yang valid: {exc}", field="file") from exc
    return backup_service.restore_year_snapshot(records, data, year=year, workspace=workspace)

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..schemas.schemas import AttachmentCreate, AttachmentRead
from ..services import attachments as attachment_service
from ..services.fiscal_years import Workspace
from ..services.record_store import RecordStore
from ..services.storage import StorageService
from .dependencies import get_active_workspace, get_records, get_storage

router = APIRouter(prefix="/attachments", tags=["attachments"])


@router.get("", response_model=List[AttachmentRead])
def list_attachments(
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    workspace: Workspace = Depends(get_active_workspace),
) -> List[AttachmentRead]:
    rows = workspace.snapshot().attachments
    if entity_type:
        rows = [row for row in rows if row.entity_type == entity_type]
    if entity_id is not None:
        rows = [row for row in rows if row.entity_id == entity_id]
    return list(rows)


@router.post("/upload", response_model=AttachmentRead, status_code=201)
async def upload_attachment(
    entity_type: str = Form(...),
    entity_id: int = Form(...),
    caption: Optional[str] = Form(None),
    file: UploadFile = File(...),
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
    storage: StorageService = Depends(get_storage),
) -> AttachmentRead:
    contents = await file.read()
    return attachment_service.attach_file(
        workspace,
        records,
        storage,
        entity_type,
        entity_id,
        file.filename or "lampiran",
        contents,
        content_type=file.content_type,
        caption=caption,
    )


@router.post("", response_model=AttachmentRead, status_code=201)
def link_attachment(
    payload: AttachmentCreate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> AttachmentRead:
    return attachment_service.attach_link(workspace, records, payload)


@router.delete("/{attachment_id}")
def delete_attachment(
    attachment_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
    storage: StorageService = Depends(get_storage),
) -> Dict[str, List[str]]:
    return {"failures": attachment_service.detach(workspace, records, storage, attachment_id)}

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..documents.view import ReportScope
from ..schemas.schemas import ExportReadinessRead
from ..services import documents
from ..services.export_validation import check_export_readiness
from ..services.fiscal_years import Workspace
from ..services.ledger import get_village_profile
from ..services.record_store import RecordStore
from .dependencies import get_active_workspace, get_records

router = APIRouter(prefix="/reports", tags=["reports"])

ScopeKind = Literal["year", "activity", "field", "sub_field", "ledger", "income", "expense", "financing"]
Locale = Optional[Literal["id", "en"]]


def _download(document: documents.RenderedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


def _scope(
    scope: ScopeKind = Query("year"),
    activity_id: Optional[int] = None,
    field_name: Optional[str] = None,
    sub_field_id: Optional[int] = None,
) -> ReportScope:
    return ReportScope(kind=scope, activity_id=activity_id, field_name=field_name, sub_field_id=sub_field_id)


@router.get("/readiness", response_model=ExportReadinessRead)
def readiness(
    report_scope: ReportScope = Depends(_scope),
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> ExportReadinessRead:
    result = check_export_readiness(
        get_village_profile(records),
        workspace.snapshot(),
        require_activities=not report_scope.is_ledger,
    )
    return result.as_read()


@router.get("/receipts")
def export_receipts(
    locale: Locale = None,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    return _download(documents.export_receipts(workspace, records, locale=locale))


@router.get("/worker-days")
def export_worker_days(
    locale: Locale = None,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    return _download(documents.export_worker_days(workspace, records, locale=locale))


@router.get("/activities/{activity_id}/bundle")
def export_activity_bundle(
    activity_id: int,
    locale: Locale = None,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    return _download(documents.export_activity_bundle(workspace, records, activity_id, locale=locale))


@router.get("/{fmt}")
def export_report(
    fmt: Literal["xlsx", "docx", "pdf"],
    locale: Locale = None,
    report_scope: ReportScope = Depends(_scope),
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    return _download(documents.export_document(workspace, records, fmt, scope=report_scope, locale=locale))

"""Export orchestration: readiness check, view assembly and rendering."""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Optional

from ..config import settings
from ..core.errors import DomainValidationError
from ..documents import print_pages, spreadsheet, word
from ..documents.blocks import document_filename
from ..documents.view import SCOPE_ACTIVITY, ReportScope, ReportView, build_report_view
from .attachments import Manifest
from .export_validation import ensure_exportable
from .fiscal_years import Workspace
from .ledger import get_village_profile
from .record_store import RecordStore

logger = logging.getLogger(__name__)

FORMAT_XLSX = "xlsx"
FORMAT_DOCX = "docx"
FORMAT_PDF = "pdf"

MEDIA_TYPES = {
    FORMAT_XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    FORMAT_DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    FORMAT_PDF: "application/pdf",
}

RENDERERS: Dict[str, Callable[[ReportView], bytes]] = {
    FORMAT_XLSX: spreadsheet.render_workbook,
    FORMAT_DOCX: word.render_document,
    FORMAT_PDF: print_pages.render_pdf,
}


@dataclass
class RenderedDocument:
    filename: str
    content: bytes
    media_type: str

    @property
    def size(self) -> int:
        return len(self.content)


def prepare_view(
    workspace: Workspace,
    records: RecordStore,
    scope: Optional[ReportScope] = None,
    manifest: Optional[Manifest] = None,
    locale: Optional[str] = None,
    today: Optional[date] = None,
    require_activities: Optional[bool] = None,
) -> ReportView:
    scope = scope or ReportScope()
    if require_activities is None:
        require_activities = not scope.is_ledger
    store = workspace.snapshot()
    profile = get_village_profile(records)
    ensure_exportable(profile, store, require_activities=require_activities)
    return build_report_view(store, profile, manifest=manifest, scope=scope, locale=locale, today=today)


def export_document(
    workspace: Workspace,
    records: RecordStore,
    fmt: str,
    scope: Optional[ReportScope] = None,
    manifest: Optional[Manifest] = None,
    locale: Optional[str] = None,
    today: Optional[date] = None,
) -> RenderedDocument:
    """Render one report in ``fmt`` (xlsx, docx or pdf) for the active year."""
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise DomainValidationError(f"Format '{fmt}' tidak didukung", field="format")
    view = prepare_view(workspace, records, scope=scope, manifest=manifest, locale=locale, today=today)
    content = renderer(view)
    filename = document_filename(view, fmt)
    logger.info(
        "Rendered report",
        extra={"file_name": filename, "fiscal_year": view.year, "scope": view.scope.kind, "bytes": len(content)},
    )
    return RenderedDocument(filename=filename, content=content, media_type=MEDIA_TYPES[fmt])


def _supporting(workspace, records, kind, renderer, locale, today) -> RenderedDocument:
    # Worker-day lists resolve activities from the year scope.
    view = prepare_view(workspace, records, locale=locale, today=today, require_activities=False)
    content = renderer(view)
    filename = document_filename(view, FORMAT_DOCX, kind=kind)
    logger.info("Rendered %s bundle", kind, extra={"file_name": filename, "fiscal_year": view.year})
    return RenderedDocument(filename=filename, content=content, media_type=MEDIA_TYPES[FORMAT_DOCX])


def export_receipts(
    workspace: Workspace, records: RecordStore, locale: Optional[str] = None, today: Optional[date] = None
) -> RenderedDocument:
    return _supporting(workspace, records, "receipts", word.render_receipts, locale, today)


def export_worker_days(
    workspace: Workspace, records: RecordStore, locale: Optional[str] = None, today: Optional[date] = None
) -> RenderedDocument:
    return _supporting(workspace, records, "worker_days", word.render_worker_days, locale, today)


def export_activity_bundle(
    workspace: Workspace,
    records: RecordStore,
    activity_id: int,
    locale: Optional[str] = None,
    today: Optional[date] = None,
) -> RenderedDocument:
    """The activity's letter bundle; its report type picks the physical or non-physical set."""
    scope = ReportScope(kind=SCOPE_ACTIVITY, activity_id=activity_id)
    view = prepare_view(workspace, records, scope=scope, locale=locale, today=today)
    content = word.render_activity_bundle(view)
    filename = document_filename(view, FORMAT_DOCX, kind="bundle")
    logger.info(
        "Rendered activity bundle",
        extra={"file_name": filename, "fiscal_year": view.year, "activity_id": activity_id, "bytes": len(content)},
    )
    return RenderedDocument(filename=filename, content=content, media_type=MEDIA_TYPES[FORMAT_DOCX])


def write_document(document: RenderedDocument, output_dir: Optional[str] = None) -> Path:
    base = Path(output_dir or settings.export_output_dir)
    base.mkdir(parents=True, exist_ok=True)
    path = base / document.filename
    path.write_bytes(document.content)
    logger.info("Wrote %s (%d bytes)", path, document.size)
    return path

from typing import List

from fastapi import APIRouter, Depends

from ..core.errors import NotFoundError
from ..schemas.schemas import FiscalYearCreate, FiscalYearSummary, FiscalYearSwitch, YearSummaryRead
from ..services.aggregation import field_rollups, rollup, year_totals
from ..services.fiscal_years import Workspace, list_available_years
from ..services.record_store import RecordStore
from .dependencies import get_active_workspace, get_records, get_workspace

router = APIRouter(prefix="/fiscal-years", tags=["fiscal-years"])


def _summary(records: RecordStore, workspace: Workspace, year: int) -> FiscalYearSummary:
    return FiscalYearSummary(
        year=year,
        active=workspace.loaded and workspace.year == year,
        sub_field_count=len(records.list_by_year("budget_sub_fields", year)),
        activity_count=len(records.list_by_year("activities", year)),
    )


@router.get("", response_model=List[FiscalYearSummary])
def list_years(
    records: RecordStore = Depends(get_records),
    workspace: Workspace = Depends(get_workspace),
) -> List[FiscalYearSummary]:
    return [_summary(records, workspace, year) for year in list_available_years(records)]


@router.post("", response_model=FiscalYearSummary, status_code=201)
def create_year(
    payload: FiscalYearCreate,
    records: RecordStore = Depends(get_records),
    workspace: Workspace = Depends(get_workspace),
) -> FiscalYearSummary:
    store = workspace.create_year(records, template_year=payload.template_year, year=payload.year)
    return _summary(records, workspace, store.year)


@router.put("/active", response_model=FiscalYearSummary)
def switch_year(
    payload: FiscalYearSwitch,
    records: RecordStore = Depends(get_records),
    workspace: Workspace = Depends(get_workspace),
) -> FiscalYearSummary:
    if payload.year not in list_available_years(records):
        raise NotFoundError(f"Tahun anggaran {payload.year} belum dibuat")
    workspace.switch_year(records, payload.year)
    return _summary(records, workspace, payload.year)


@router.get("/active/summary", response_model=YearSummaryRead)
def active_summary(workspace: Workspace = Depends(get_active_workspace)) -> YearSummaryRead:
    store = workspace.snapshot()
    return YearSummaryRead(
        fiscal_year=store.year,
        fields=[summary.as_read() for summary in field_rollups(store.tree, store.activities)],
        activities=rollup(store.activities).as_read(),
        totals=year_totals(store.incomes, store.expenses, store.financings).as_read(),
    )

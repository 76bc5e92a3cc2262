from fastapi import APIRouter, Depends

from ..schemas.schemas import NarrativeRead, NarrativeUpdate
from ..services.fiscal_years import Workspace
from ..services.ledger import save_narrative
from ..services.record_store import RecordStore
from .dependencies import get_active_workspace, get_records

router = APIRouter(prefix="/narrative", tags=["narrative"])


@router.get("", response_model=NarrativeRead)
def read_narrative(workspace: Workspace = Depends(get_active_workspace)) -> NarrativeRead:
    store = workspace.snapshot()
    return store.narrative or NarrativeRead(fiscal_year=store.year)


@router.put("", response_model=NarrativeRead)
def update_narrative(
    payload: NarrativeUpdate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> NarrativeRead:
    return save_narrative(workspace, records, payload)

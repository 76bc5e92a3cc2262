from typing import List, Optional

from fastapi import APIRouter, Depends

from ..schemas.schemas import ActivityCreate, ActivityDetail, ActivitySaved, ActivityUpdate, CascadeReportRead
from ..services import cascade, ledger
from ..services.fiscal_years import Workspace
from ..services.record_store import RecordStore
from ..services.storage import StorageService
from ..utils.account_codes import sort_by_account_code
from .classification import cascade_read
from .dependencies import get_active_workspace, get_records, get_storage

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=List[ActivityDetail])
def list_activities(
    field_name: Optional[str] = None,
    sub_field_id: Optional[int] = None,
    workspace: Workspace = Depends(get_active_workspace),
) -> List[ActivityDetail]:
    store = workspace.snapshot()
    if sub_field_id is not None:
        activities = store.activities_for_sub_field(sub_field_id)
    elif field_name:
        activities = store.activities_for_field(field_name)
    else:
        activities = list(store.activities)
    details = [ledger.activity_detail(store.tree, activity) for activity in activities]
    return sort_by_account_code(details, code=lambda detail: store.tree.activity_context(detail).account_code)


@router.get("/{activity_id}", response_model=ActivityDetail)
def read_activity(activity_id: int, workspace: Workspace = Depends(get_active_workspace)) -> ActivityDetail:
    store = workspace.snapshot()
    return ledger.activity_detail(store.tree, store.activity(activity_id))


@router.post("", response_model=ActivitySaved, status_code=201)
def create_activity(
    payload: ActivityCreate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> ActivitySaved:
    return ledger.create_activity(workspace, records, payload)


@router.patch("/{activity_id}", response_model=ActivitySaved)
def update_activity(
    activity_id: int,
    payload: ActivityUpdate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> ActivitySaved:
    return ledger.update_activity(workspace, records, activity_id, payload)


@router.delete("/{activity_id}", response_model=CascadeReportRead)
def delete_activity(
    activity_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
    storage: StorageService = Depends(get_storage),
) -> CascadeReportRead:
    return cascade_read(cascade.remove_activity(workspace, records, activity_id, storage=storage))

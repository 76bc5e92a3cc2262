from typing import Dict, List

from fastapi import APIRouter, Depends

from ..schemas.schemas import (
    BudgetFieldRead,
    CascadeReportRead,
    RollupRead,
    SubFieldCreate,
    SubFieldRead,
    SubFieldRename,
)
from ..services import cascade
from ..services.aggregation import sub_field_rollups
from ..services.fiscal_years import Workspace
from ..services.record_store import RecordStore
from ..services.storage import StorageService
from .dependencies import get_active_workspace, get_records, get_storage

router = APIRouter(prefix="/sub-fields", tags=["classification"])


def cascade_read(report: cascade.CascadeReport) -> CascadeReportRead:
    return CascadeReportRead(
        target_type=report.target_type,
        target_id=report.target_id,
        activities_removed=report.activities_removed,
        items_removed=report.items_removed,
        attachments_removed=report.attachments_removed,
        attachment_failures=report.attachment_failures,
    )


@router.get("", response_model=List[BudgetFieldRead])
def list_tree(workspace: Workspace = Depends(get_active_workspace)) -> List[BudgetFieldRead]:
    tree = workspace.snapshot().tree
    return [
        BudgetFieldRead(
            name=budget_field.name,
            code=budget_field.code,
            icon=budget_field.icon,
            color=budget_field.color,
            description=budget_field.description,
            sub_fields=tree.list_sub_fields(budget_field.name),
        )
        for budget_field in tree.fields
    ]


@router.get("/suggest-code")
def suggest_code(field_name: str, workspace: Workspace = Depends(get_active_workspace)) -> Dict[str, str]:
    return {"account_code": workspace.snapshot().tree.suggest_code(field_name)}


@router.get("/rollups", response_model=List[RollupRead])
def rollups(field_name: str, workspace: Workspace = Depends(get_active_workspace)) -> List[RollupRead]:
    store = workspace.snapshot()
    return [summary.as_read() for summary in sub_field_rollups(store.tree, store.activities, field_name)]


@router.post("", response_model=SubFieldRead, status_code=201)
def create_sub_field(
    payload: SubFieldCreate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> SubFieldRead:
    return cascade.add_sub_field(workspace, records, payload.field_name, payload.name, payload.account_code)


@router.patch("/{sub_field_id}", response_model=SubFieldRead)
def rename_sub_field(
    sub_field_id: int,
    payload: SubFieldRename,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> SubFieldRead:
    field_name = workspace.snapshot().tree.get_sub_field(sub_field_id).field_name
    return cascade.rename_sub_field(workspace, records, field_name, sub_field_id, payload.name, payload.account_code)


@router.delete("/{sub_field_id}", response_model=CascadeReportRead)
def delete_sub_field(
    sub_field_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
    storage: StorageService = Depends(get_storage),
) -> CascadeReportRead:
    field_name = workspace.snapshot().tree.get_sub_field(sub_field_id).field_name
    return cascade_read(cascade.remove_sub_field(workspace, records, field_name, sub_field_id, storage=storage))

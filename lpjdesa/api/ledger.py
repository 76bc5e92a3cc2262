from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from ..schemas.schemas import CascadeReportRead, ExpenseItemCreate, ExpenseItemRead
from ..services import cascade, ledger
from ..services.fiscal_years import Workspace
from ..services.record_store import RecordStore
from ..services.storage import StorageService
from .classification import cascade_read
from .dependencies import get_active_workspace, get_records, get_storage

router = APIRouter(tags=["ledger"])


@router.get("/ledger/{kind}")
def list_entries(kind: str, workspace: Workspace = Depends(get_active_workspace)) -> List[Dict[str, Any]]:
    return [row.model_dump(mode="json") for row in ledger.list_entries(workspace.snapshot(), kind)]


@router.post("/ledger/{kind}", status_code=201)
def create_entry(
    kind: str,
    data: Dict[str, Any] = Body(...),
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Dict[str, Any]:
    return ledger.create_entry(workspace, records, kind, data).model_dump(mode="json")


@router.patch("/ledger/{kind}/{entry_id}")
def update_entry(
    kind: str,
    entry_id: int,
    data: Dict[str, Any] = Body(...),
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Dict[str, Any]:
    return ledger.update_entry(workspace, records, kind, entry_id, data).model_dump(mode="json")


@router.delete("/ledger/{kind}/{entry_id}", status_code=204)
def delete_entry(
    kind: str,
    entry_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    ledger.delete_entry(workspace, records, kind, entry_id)
    return Response(status_code=204)


@router.delete("/expenses/{expense_id}", response_model=CascadeReportRead)
def delete_expense(
    expense_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
    storage: StorageService = Depends(get_storage),
) -> CascadeReportRead:
    return cascade_read(cascade.remove_expense(workspace, records, expense_id, storage=storage))


@router.get("/expenses/{expense_id}/items", response_model=List[ExpenseItemRead])
def list_expense_items(
    expense_id: int, workspace: Workspace = Depends(get_active_workspace)
) -> List[ExpenseItemRead]:
    store = workspace.snapshot()
    store.expense(expense_id)
    return store.items_for_expense(expense_id)


@router.post("/expenses/{expense_id}/items", response_model=ExpenseItemRead, status_code=201)
def add_expense_item(
    expense_id: int,
    payload: ExpenseItemCreate,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> ExpenseItemRead:
    return ledger.add_expense_item(workspace, records, expense_id, payload)


@router.delete("/expense-items/{item_id}", status_code=204)
def delete_expense_item(
    item_id: int,
    workspace: Workspace = Depends(get_active_workspace),
    records: RecordStore = Depends(get_records),
) -> Response:
    ledger.delete_expense_item(workspace, records, item_id)
    return Response(status_code=204)

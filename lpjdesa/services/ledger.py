"""Validated writes for activities, ledgers, narratives, and the village profile."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from ..core.errors import DomainValidationError, NotFoundError
from ..schemas.schemas import (
    ActivityCreate,
    ActivityDetail,
    ActivityRead,
    ActivitySaved,
    ActivityUpdate,
    ExpenseCreate,
    ExpenseItemCreate,
    ExpenseItemRead,
    ExpenseRead,
    FinancingCreate,
    FinancingRead,
    IncomeCreate,
    IncomeRead,
    NarrativeRead,
    NarrativeUpdate,
    OfficialRead,
    VillageProfileRead,
    VillageProfileUpdate,
)
from ..utils.account_codes import sort_by_account_code
from .audit import audit_log
from .classification import ClassificationTree
from .fiscal_years import Workspace, YearScopedStore
from .record_store import RecordStore

logger = logging.getLogger(__name__)

OVER_BUDGET_WARNING = "Realisasi melebihi anggaran"

# kind -> (create schema, read schema, collection == store attribute)
LEDGER_KINDS: Dict[str, Tuple[Type[BaseModel], Type[BaseModel], str]] = {
    "incomes": (IncomeCreate, IncomeRead, "incomes"),
    "expenses": (ExpenseCreate, ExpenseRead, "expenses"),
    "financings": (FinancingCreate, FinancingRead, "financings"),
}


def _validated(schema: Type[BaseModel], data: Mapping[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        first = exc.errors()[0]
        message = str(first.get("msg", "Data tidak valid")).removeprefix("Value error, ")
        location = ".".join(str(part) for part in first.get("loc", ())) or None
        raise DomainValidationError(message, field=location) from exc


def _kind(kind: str) -> Tuple[Type[BaseModel], Type[BaseModel], str]:
    try:
        return LEDGER_KINDS[kind]
    except KeyError:
        raise NotFoundError(f"Jenis buku '{kind}' tidak dikenal") from None


def list_entries(store: YearScopedStore, kind: str) -> List[BaseModel]:
    _, _, collection = _kind(kind)
    return sort_by_account_code(getattr(store, collection))


# --- Activities ---


def activity_detail(tree: ClassificationTree, activity: ActivityRead) -> ActivityDetail:
    context = tree.activity_context(activity)
    return ActivityDetail(
        **activity.model_dump(),
        field_name=context.field_name,
        sub_field_name=context.sub_field_name,
    )


def activity_warnings(activity: ActivityRead) -> List[str]:
    warnings = []
    if activity.realized_amount > activity.budget_amount:
        warnings.append(OVER_BUDGET_WARNING)
    return warnings


def _replace_activity(activities: tuple, activity: ActivityRead) -> tuple:
    kept = [row for row in activities if row.id != activity.id]
    kept.append(activity)
    return tuple(sorted(kept, key=lambda row: row.id))


def create_activity(workspace: Workspace, records: RecordStore, payload: ActivityCreate) -> ActivitySaved:
    with workspace.mutation() as store:
        store.tree.get_sub_field(payload.sub_field_id)
        row = records.insert("activities", {"fiscal_year": store.year, **payload.model_dump()})
        activity = ActivityRead.model_validate(row)
        workspace.commit(store.replace(activities=_replace_activity(store.activities, activity)))
        audit_log(
            records.session,
            action="activity.create",
            fiscal_year=store.year,
            target_entity_type="Activity",
            target_entity_id=str(activity.id),
            after=activity.model_dump(mode="json"),
        )
    return ActivitySaved(activity=activity_detail(store.tree, activity), warnings=activity_warnings(activity))


def update_activity(
    workspace: Workspace, records: RecordStore, activity_id: int, payload: ActivityUpdate
) -> ActivitySaved:
    with workspace.mutation() as store:
        before = store.activity(activity_id)
        merged = before.model_dump(exclude={"id", "fiscal_year"})
        merged.update(payload.model_dump(exclude_unset=True))
        validated = _validated(ActivityCreate, merged)
        store.tree.get_sub_field(validated.sub_field_id)
        row = records.update_by_id("activities", activity_id, validated.model_dump())
        activity = ActivityRead.model_validate(row)
        workspace.commit(store.replace(activities=_replace_activity(store.activities, activity)))
        audit_log(
            records.session,
            action="activity.update",
            fiscal_year=store.year,
            target_entity_type="Activity",
            target_entity_id=str(activity_id),
            before=before.model_dump(mode="json"),
            after=activity.model_dump(mode="json"),
        )
    return ActivitySaved(activity=activity_detail(store.tree, activity), warnings=activity_warnings(activity))


# --- Incomes, expenses, financings ---


def create_entry(workspace: Workspace, records: RecordStore, kind: str, data: Mapping[str, Any]) -> BaseModel:
    create_schema, read_schema, collection = _kind(kind)
    payload = _validated(create_schema, data)
    with workspace.mutation() as store:
        row = records.insert(collection, {"fiscal_year": store.year, **payload.model_dump()})
        entry = read_schema.model_validate(row)
        workspace.commit(store.replace(**{collection: getattr(store, collection) + (entry,)}))
        audit_log(
            records.session,
            action=f"{kind}.create",
            fiscal_year=store.year,
            target_entity_type=kind,
            target_entity_id=str(entry.id),
            after=entry.model_dump(mode="json"),
        )
    logger.debug("Created %s #%s for %s", kind, entry.id, store.year)
    return entry


def update_entry(
    workspace: Workspace, records: RecordStore, kind: str, entry_id: int, data: Mapping[str, Any]
) -> BaseModel:
    create_schema, read_schema, collection = _kind(kind)
    with workspace.mutation() as store:
        current = next((row for row in getattr(store, collection) if row.id == entry_id), None)
        if current is None:
            raise NotFoundError(f"Data {kind} #{entry_id} tidak ditemukan")
        merged = current.model_dump(exclude={"id", "fiscal_year"})
        merged.update(data)
        payload = _validated(create_schema, merged)
        row = records.update_by_id(collection, entry_id, payload.model_dump())
        entry = read_schema.model_validate(row)
        workspace.commit(
            store.replace(
                **{collection: tuple(entry if row.id == entry_id else row for row in getattr(store, collection))}
            )
        )
        audit_log(
            records.session,
            action=f"{kind}.update",
            fiscal_year=store.year,
            target_entity_type=kind,
            target_entity_id=str(entry_id),
            before=current.model_dump(mode="json"),
            after=entry.model_dump(mode="json"),
        )
    return entry


def delete_entry(workspace: Workspace, records: RecordStore, kind: str, entry_id: int) -> None:
    """Delete an income or financing row. Expenses go through the cascade service."""
    _, _, collection = _kind(kind)
    if kind == "expenses":
        raise DomainValidationError("Belanja dihapus beserta rinciannya melalui penghapusan belanja")
    with workspace.mutation() as store:
        rows = getattr(store, collection)
        before = next((row for row in rows if row.id == entry_id), None)
        if before is None:
            raise NotFoundError(f"Data {kind} #{entry_id} tidak ditemukan")
        records.delete_by_id(collection, entry_id)
        workspace.commit(store.replace(**{collection: tuple(row for row in rows if row.id != entry_id)}))
        audit_log(
            records.session,
            action=f"{kind}.delete",
            fiscal_year=store.year,
            target_entity_type=kind,
            target_entity_id=str(entry_id),
            before=before.model_dump(mode="json"),
        )


# --- Expense items (receipts and worker days) ---


def add_expense_item(
    workspace: Workspace, records: RecordStore, expense_id: int, payload: ExpenseItemCreate
) -> ExpenseItemRead:
    with workspace.mutation() as store:
        store.expense(expense_id)
        if payload.activity_id is not None:
            store.activity(payload.activity_id)
        row = records.insert(
            "expense_items",
            {"fiscal_year": store.year, "expense_id": expense_id, **payload.model_dump()},
        )
        item = ExpenseItemRead.model_validate(row)
        workspace.commit(store.replace(expense_items=store.expense_items + (item,)))
        audit_log(
            records.session,
            action="expense_item.create",
            fiscal_year=store.year,
            target_entity_type="ExpenseItem",
            target_entity_id=str(item.id),
            after=item.model_dump(mode="json"),
        )
    return item


def delete_expense_item(workspace: Workspace, records: RecordStore, item_id: int) -> None:
    with workspace.mutation() as store:
        before = next((item for item in store.expense_items if item.id == item_id), None)
        if before is None:
            raise NotFoundError(f"Rincian belanja #{item_id} tidak ditemukan")
        records.delete_by_id("expense_items", item_id)
        workspace.commit(
            store.replace(expense_items=tuple(item for item in store.expense_items if item.id != item_id))
        )
        audit_log(
            records.session,
            action="expense_item.delete",
            fiscal_year=store.year,
            target_entity_type="ExpenseItem",
            target_entity_id=str(item_id),
            before=before.model_dump(mode="json"),
        )


# --- Narrative ---


def save_narrative(workspace: Workspace, records: RecordStore, payload: NarrativeUpdate) -> NarrativeRead:
    """Upsert the year's narrative; only the sections present in ``payload`` change."""
    values = payload.model_dump(exclude_unset=True)
    with workspace.mutation() as store:
        before = store.narrative
        if before is not None and before.id is not None:
            row = records.update_by_id("narrative_content", before.id, values)
        else:
            row = records.insert("narrative_content", {"fiscal_year": store.year, **values})
        narrative = NarrativeRead.model_validate(row)
        workspace.commit(store.replace(narrative=narrative))
        audit_log(
            records.session,
            action="narrative.update",
            fiscal_year=store.year,
            target_entity_type="NarrativeContent",
            target_entity_id=str(narrative.id),
            before=before,
            after=narrative,
        )
    return narrative


# --- Village profile (global, not year-scoped) ---


def _profile_row(records: RecordStore) -> Optional[Any]:
    rows = records.list_all("village_info")
    return rows[0] if rows else None


def get_village_profile(records: RecordStore) -> VillageProfileRead:
    row = _profile_row(records)
    officials = sorted(records.list_all("officials"), key=lambda official: (official.sort_order, official.id))
    values: Dict[str, Any] = {}
    if row is not None:
        values = {name: getattr(row, name) for name in VillageProfileRead.model_fields if name != "officials"}
    return VillageProfileRead(
        **values,
        officials=[OfficialRead.model_validate(official) for official in officials],
    )


def save_village_profile(records: RecordStore, payload: VillageProfileUpdate) -> VillageProfileRead:
    before = get_village_profile(records)
    values = payload.model_dump(exclude_unset=True, exclude={"officials"})
    row = _profile_row(records)
    if row is None:
        records.insert("village_info", values)
    elif values:
        records.update_by_id("village_info", row.id, values)

    if payload.officials is not None:
        records.replace_all(
            "officials",
            (
                {"role": official.role, "name": official.name, "sort_order": index}
                for index, official in enumerate(payload.officials)
            ),
        )

    profile = get_village_profile(records)
    audit_log(
        records.session,
        action="village.update",
        target_entity_type="VillageInfo",
        before=before.model_dump(),
        after=profile.model_dump(),
    )
    return profile

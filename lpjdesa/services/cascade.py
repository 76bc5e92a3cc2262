"""Mutations whose effects reach past a single row.

Each operation validates against the active year's tree, persists, and only
then commits a new :class:`YearScopedStore`. Attachment cleanup is advisory
(failures are logged and reported); row deletion is authoritative (a failure
aborts with :class:`PartialCascadeError` after reconciling the local store to
what the record store actually removed).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..constants import ENTITY_ACTIVITY, ENTITY_EXPENSE
from ..core.errors import NotFoundError, PartialCascadeError, PersistenceError
from ..schemas.schemas import ActivityRead, SubFieldRead
from .attachments import purge_attachments
from .audit import audit_log
from .classification import ClassificationTree
from .fiscal_years import Workspace, YearScopedStore, load_year
from .record_store import RecordStore
from .storage import StorageService, storage_service

logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    target_type: str
    target_id: int
    activities_removed: int = 0
    items_removed: int = 0
    attachments_removed: int = 0
    attachment_failures: List[str] = field(default_factory=list)


def add_sub_field(
    workspace: Workspace,
    records: RecordStore,
    field_name: str,
    name: str,
    account_code: Optional[str] = None,
) -> SubFieldRead:
    with workspace.mutation() as store:
        tree = store.tree
        tree.field(field_name)
        tree.ensure_unique_name(field_name, name)
        code = (account_code or "").strip() or tree.suggest_code(field_name)
        row = records.insert(
            "budget_sub_fields",
            {"fiscal_year": store.year, "field_name": field_name, "name": name.strip(), "account_code": code},
        )
        sub_field = SubFieldRead.model_validate(row)
        workspace.commit(store.replace(tree=tree.with_sub_field(sub_field)))
        audit_log(
            records.session,
            action="sub_field.create",
            fiscal_year=store.year,
            target_entity_type="BudgetSubField",
            target_entity_id=str(sub_field.id),
            after=sub_field.model_dump(),
        )
    return sub_field


def rename_sub_field(
    workspace: Workspace,
    records: RecordStore,
    field_name: str,
    sub_field_id: int,
    new_name: str,
    new_code: Optional[str] = None,
) -> SubFieldRead:
    """Rename a sub-field. Activities point at it by id, so only its own row changes."""
    with workspace.mutation() as store:
        tree = store.tree
        before = _sub_field_in(tree, field_name, sub_field_id)
        tree.ensure_unique_name(field_name, new_name, exclude_id=sub_field_id)
        values = {"name": new_name.strip()}
        if new_code is not None and new_code.strip():
            values["account_code"] = new_code.strip()
        row = records.update_by_id("budget_sub_fields", sub_field_id, values)
        sub_field = SubFieldRead.model_validate(row)
        workspace.commit(store.replace(tree=tree.with_sub_field(sub_field)))
        audit_log(
            records.session,
            action="sub_field.rename",
            fiscal_year=store.year,
            target_entity_type="BudgetSubField",
            target_entity_id=str(sub_field_id),
            before=before.model_dump(),
            after=sub_field.model_dump(),
        )
    logger.info("Renamed sub-field #%s to %r", sub_field_id, sub_field.name)
    return sub_field


def _sub_field_in(tree: ClassificationTree, field_name: str, sub_field_id: int) -> SubFieldRead:
    tree.field(field_name)
    sub_field = tree.get_sub_field(sub_field_id)
    if sub_field.field_name != field_name:
        raise NotFoundError(f"Sub bidang #{sub_field_id} tidak termasuk bidang {field_name}")
    return sub_field


def _without_activities(store: YearScopedStore, removed_ids: set) -> YearScopedStore:
    return store.replace(
        activities=tuple(a for a in store.activities if a.id not in removed_ids),
        expense_items=tuple(i for i in store.expense_items if i.activity_id not in removed_ids),
        attachments=tuple(
            att
            for att in store.attachments
            if not (att.entity_type == ENTITY_ACTIVITY and att.entity_id in removed_ids)
        ),
    )


def _without_expense(store: YearScopedStore, expense_id: int) -> YearScopedStore:
    return store.replace(
        expenses=tuple(e for e in store.expenses if e.id != expense_id),
        expense_items=tuple(i for i in store.expense_items if i.expense_id != expense_id),
        attachments=tuple(
            att
            for att in store.attachments
            if not (att.entity_type == ENTITY_EXPENSE and att.entity_id == expense_id)
        ),
    )


def _reconcile(workspace: Workspace, records: RecordStore, fallback: YearScopedStore) -> YearScopedStore:
    """Publish what the record store now holds after a cascade stopped midway.

    ``fallback`` is the local store with the confirmed removals applied; it is
    used only when the year cannot be reloaded.
    """
    try:
        fresh = load_year(records, fallback.year, workspace.catalog)
    except PersistenceError:
        logger.warning("Reload after partial cascade failed; dropping removed rows locally", exc_info=True)
        fresh = fallback
    return workspace.commit(fresh)


def _remove_worker_days(records: RecordStore, activity_ids: Iterable[int]) -> int:
    return records.delete_by_parent_ids("expense_items", activity_ids, parent_key="activity_id")


def remove_sub_field(
    workspace: Workspace,
    records: RecordStore,
    field_name: str,
    sub_field_id: int,
    storage: StorageService = storage_service,
) -> CascadeReport:
    """Delete a sub-field with every activity under it, their attachments and worker-day rows."""
    report = CascadeReport(target_type="sub_field", target_id=sub_field_id)
    with workspace.mutation() as store:
        sub_field = _sub_field_in(store.tree, field_name, sub_field_id)
        dependents: List[ActivityRead] = store.activities_for_sub_field(sub_field_id)
        dependent_ids = [a.id for a in dependents]

        removed_attachments, failures = purge_attachments(
            records, storage, store.attachments_for(ENTITY_ACTIVITY, dependent_ids)
        )
        report.attachments_removed = removed_attachments
        report.attachment_failures = failures

        try:
            report.items_removed = _remove_worker_days(records, dependent_ids)
        except PersistenceError as exc:
            _reconcile(workspace, records, _without_activities(store, set()))
            raise PartialCascadeError(
                f"Rincian HOK kegiatan gagal dihapus: {exc.message}", removed=0, step="expense_items"
            ) from exc

        removed_ids: set = set()
        for activity in dependents:
            try:
                records.delete_by_id("activities", activity.id)
            except PersistenceError as exc:
                _reconcile(workspace, records, _without_activities(store, removed_ids))
                logger.error(
                    "Sub-field #%s delete stopped after %d of %d activities",
                    sub_field_id,
                    len(removed_ids),
                    len(dependents),
                )
                raise PartialCascadeError(
                    f"Penghapusan sub bidang terhenti setelah {len(removed_ids)} kegiatan: {exc.message}",
                    removed=len(removed_ids),
                    step="activities",
                ) from exc
            removed_ids.add(activity.id)
        report.activities_removed = len(removed_ids)

        try:
            records.delete_by_id("budget_sub_fields", sub_field_id)
        except PersistenceError as exc:
            _reconcile(workspace, records, _without_activities(store, removed_ids))
            raise PartialCascadeError(
                f"Kegiatan terhapus tetapi sub bidang gagal dihapus: {exc.message}",
                removed=len(removed_ids),
                step="sub_field",
            ) from exc

        workspace.commit(
            _without_activities(store, removed_ids).replace(tree=store.tree.without_sub_field(sub_field_id))
        )
        audit_log(
            records.session,
            action="sub_field.delete",
            fiscal_year=store.year,
            target_entity_type="BudgetSubField",
            target_entity_id=str(sub_field_id),
            before=sub_field.model_dump(),
            after={
                "activities_removed": report.activities_removed,
                "items_removed": report.items_removed,
                "attachments_removed": removed_attachments,
            },
        )
    logger.info(
        "Deleted sub-field #%s (%d activities, %d worker-day rows, %d attachments)",
        sub_field_id,
        report.activities_removed,
        report.items_removed,
        report.attachments_removed,
    )
    return report


def remove_activity(
    workspace: Workspace,
    records: RecordStore,
    activity_id: int,
    storage: StorageService = storage_service,
) -> CascadeReport:
    report = CascadeReport(target_type="activity", target_id=activity_id)
    with workspace.mutation() as store:
        activity = store.activity(activity_id)
        report.attachments_removed, report.attachment_failures = purge_attachments(
            records, storage, store.attachments_for(ENTITY_ACTIVITY, [activity_id])
        )
        try:
            report.items_removed = _remove_worker_days(records, [activity_id])
            records.delete_by_id("activities", activity_id)
        except PersistenceError as exc:
            _reconcile(workspace, records, _without_activities(store, set()))
            raise PartialCascadeError(
                f"Kegiatan gagal dihapus setelah lampirannya dibersihkan: {exc.message}",
                removed=0,
                step="activities",
            ) from exc
        report.activities_removed = 1
        workspace.commit(_without_activities(store, {activity_id}))
        audit_log(
            records.session,
            action="activity.delete",
            fiscal_year=store.year,
            target_entity_type="Activity",
            target_entity_id=str(activity_id),
            before=activity.model_dump(mode="json"),
            after={"items_removed": report.items_removed},
        )
    return report


def remove_expense(
    workspace: Workspace,
    records: RecordStore,
    expense_id: int,
    storage: StorageService = storage_service,
) -> CascadeReport:
    """Delete an expense with its receipt/worker-day items and attachments."""
    report = CascadeReport(target_type="expense", target_id=expense_id)
    with workspace.mutation() as store:
        expense = store.expense(expense_id)
        report.attachments_removed, report.attachment_failures = purge_attachments(
            records, storage, store.attachments_for(ENTITY_EXPENSE, [expense_id])
        )
        try:
            report.items_removed = records.delete_by_parent_ids("expense_items", [expense_id])
        except PersistenceError as exc:
            _reconcile(workspace, records, store)
            raise PartialCascadeError(
                f"Rincian belanja gagal dihapus: {exc.message}", removed=0, step="expense_items"
            ) from exc
        try:
            records.delete_by_id("expenses", expense_id)
        except PersistenceError as exc:
            _reconcile(
                workspace,
                records,
                store.replace(expense_items=tuple(i for i in store.expense_items if i.expense_id != expense_id)),
            )
            raise PartialCascadeError(
                f"Rincian terhapus tetapi belanja gagal dihapus: {exc.message}",
                removed=report.items_removed,
                step="expenses",
            ) from exc
        workspace.commit(_without_expense(store, expense_id))
        audit_log(
            records.session,
            action="expense.delete",
            fiscal_year=store.year,
            target_entity_type="Expense",
            target_entity_id=str(expense_id),
            before=expense.model_dump(mode="json"),
            after={"items_removed": report.items_removed},
        )
    return report

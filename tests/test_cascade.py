from decimal import Decimal

import pytest

from lpjdesa.core.errors import DomainValidationError, NotFoundError, PartialCascadeError, PersistenceError
from lpjdesa.schemas.schemas import ExpenseItemCreate
from lpjdesa.services import cascade, ledger
from lpjdesa.services.attachments import attach_file
from lpjdesa.services.fiscal_years import load_year

FIELD = "Pembangunan Desa"


def test_add_sub_field_suggests_code_and_rejects_duplicates(records, workspace):
    sub_field = cascade.add_sub_field(workspace, records, FIELD, "Perhubungan Desa")
    assert sub_field.account_code == "2.4"
    assert workspace.snapshot().tree.get_sub_field(sub_field.id).name == "Perhubungan Desa"

    with pytest.raises(DomainValidationError):
        cascade.add_sub_field(workspace, records, FIELD, "perhubungan desa")
    with pytest.raises(NotFoundError):
        cascade.add_sub_field(workspace, records, "Bidang Fiktif", "Apa Saja")


def test_rename_keeps_activities_attached(records, workspace, create_activity, sub_field_id):
    target = sub_field_id(FIELD, "Kesehatan")
    activity = create_activity(sub_field=target, name="Posyandu")

    renamed = cascade.rename_sub_field(workspace, records, FIELD, target, "Kesehatan Masyarakat", "2.3.1")
    assert renamed.name == "Kesehatan Masyarakat"
    assert renamed.account_code == "2.3.1"

    store = workspace.snapshot()
    context = store.tree.activity_context(store.activity(activity.id))
    assert context.sub_field_name == "Kesehatan Masyarakat"
    assert load_year(records, 2026).tree.get_sub_field(target).name == "Kesehatan Masyarakat"


def test_rename_to_existing_name_rejected(records, workspace, sub_field_id):
    with pytest.raises(DomainValidationError):
        cascade.rename_sub_field(workspace, records, FIELD, sub_field_id(FIELD, "Kesehatan"), "Pendidikan")


def test_remove_sub_field_removes_activities_and_attachments(
    records, workspace, storage, create_activity, sub_field_id
):
    target = sub_field_id(FIELD, "Kesehatan")
    kept = create_activity(name="Sekolah", sub_field=sub_field_id(FIELD, "Pendidikan"))
    doomed = [create_activity(name=f"Posyandu {n}", sub_field=target) for n in range(3)]
    attachment = attach_file(
        workspace, records, storage, "activity", doomed[0].id, "foto.jpg", b"jpeg-bytes", "image/jpeg"
    )
    stored = storage.upload_root / attachment.stored_path
    assert stored.exists()

    report = cascade.remove_sub_field(workspace, records, FIELD, target, storage=storage)

    assert report.activities_removed == 3
    assert report.attachments_removed == 1
    assert report.attachment_failures == []
    assert not stored.exists()

    store = workspace.snapshot()
    assert not store.tree.has_sub_field(target)
    assert [a.id for a in store.activities] == [kept.id]
    assert store.attachments == ()

    fresh = load_year(records, 2026)
    assert [a.id for a in fresh.activities] == [kept.id]
    assert not fresh.tree.has_sub_field(target)


def test_attachment_cleanup_failure_does_not_block_delete(
    records, workspace, storage, create_activity, sub_field_id, monkeypatch
):
    target = sub_field_id(FIELD, "Kesehatan")
    activity = create_activity(sub_field=target)
    attach_file(workspace, records, storage, "activity", activity.id, "scan.pdf", b"%PDF", "application/pdf")

    def broken_delete(path):
        raise OSError("disk unavailable")

    monkeypatch.setattr(storage, "remove", broken_delete)
    report = cascade.remove_sub_field(workspace, records, FIELD, target, storage=storage)

    assert report.activities_removed == 1
    assert len(report.attachment_failures) == 1
    assert "disk unavailable" in report.attachment_failures[0]
    assert not workspace.snapshot().tree.has_sub_field(target)


def test_partial_cascade_reconciles_active_year(records, workspace, storage, create_activity, sub_field_id, monkeypatch):
    target = sub_field_id(FIELD, "Kesehatan")
    activities = [create_activity(sub_field=target) for _ in range(3)]
    original = records.delete_by_id
    calls = {"count": 0}

    def flaky_delete(collection, record_id):
        if collection == "activities":
            calls["count"] += 1
            if calls["count"] == 2:
                raise PersistenceError("database is locked")
        return original(collection, record_id)

    monkeypatch.setattr(records, "delete_by_id", flaky_delete)
    with pytest.raises(PartialCascadeError) as excinfo:
        cascade.remove_sub_field(workspace, records, FIELD, target, storage=storage)

    assert excinfo.value.removed == 1
    assert excinfo.value.step == "activities"

    store = workspace.snapshot()
    remaining = {a.id for a in store.activities}
    assert activities[0].id not in remaining
    assert {activities[1].id, activities[2].id} <= remaining
    # The sub-field itself survived because the cascade stopped before it.
    assert store.tree.has_sub_field(target)


def test_remove_activity(records, workspace, storage, create_activity):
    activity = create_activity()
    report = cascade.remove_activity(workspace, records, activity.id, storage=storage)
    assert report.activities_removed == 1
    assert workspace.snapshot().activities == ()
    with pytest.raises(NotFoundError):
        cascade.remove_activity(workspace, records, activity.id, storage=storage)


def test_remove_expense_deletes_items(records, workspace, storage):
    expense = ledger.create_entry(
        workspace, records, "expenses", {"description": "Belanja Semen", "amount": "1500000"}
    )
    for _ in range(2):
        ledger.add_expense_item(
            workspace,
            records,
            expense.id,
            ExpenseItemCreate(description="Semen", quantity=Decimal("10"), unit="sak", unit_price=Decimal("75000")),
        )

    report = cascade.remove_expense(workspace, records, expense.id, storage=storage)

    assert report.items_removed == 2
    store = workspace.snapshot()
    assert store.expenses == ()
    assert store.expense_items == ()
    assert records.list_by_year("expense_items", 2026) == []


def _worker_day(workspace, records, expense_id, activity_id, paid_to="Asep"):
    return ledger.add_expense_item(
        workspace,
        records,
        expense_id,
        ExpenseItemCreate(
            item_type="worker_day", activity_id=activity_id, paid_to=paid_to, unit_price=Decimal("100000")
        ),
    )


def test_remove_sub_field_drops_worker_days_of_its_activities(
    records, workspace, storage, create_activity, sub_field_id
):
    target = sub_field_id(FIELD, "Kesehatan")
    doomed = create_activity(name="Posyandu", sub_field=target)
    kept = create_activity(name="Sekolah", sub_field=sub_field_id(FIELD, "Pendidikan"))
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Upah", "amount": "600000"})
    _worker_day(workspace, records, expense.id, doomed.id)
    _worker_day(workspace, records, expense.id, doomed.id, paid_to="Ujang")
    survivor = _worker_day(workspace, records, expense.id, kept.id)

    report = cascade.remove_sub_field(workspace, records, FIELD, target, storage=storage)

    assert report.items_removed == 2
    assert [item.id for item in workspace.snapshot().expense_items] == [survivor.id]
    assert [item.id for item in records.list_by_year("expense_items", 2026)] == [survivor.id]
    assert workspace.snapshot().expenses[0].id == expense.id


def test_remove_activity_drops_its_worker_days(records, workspace, storage, create_activity):
    activity = create_activity()
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Upah", "amount": "200000"})
    _worker_day(workspace, records, expense.id, activity.id)

    report = cascade.remove_activity(workspace, records, activity.id, storage=storage)

    assert report.items_removed == 1
    assert workspace.snapshot().expense_items == ()
    assert records.list_by_year("expense_items", 2026) == []


def test_sub_field_must_belong_to_the_named_field(records, workspace, storage, sub_field_id):
    health = sub_field_id(FIELD, "Kesehatan")
    with pytest.raises(NotFoundError):
        cascade.rename_sub_field(workspace, records, "Penyelenggaraan Pemerintahan", health, "Pendidikan")
    with pytest.raises(NotFoundError):
        cascade.remove_sub_field(workspace, records, "Penyelenggaraan Pemerintahan", health, storage=storage)

    names = [sub.name for sub in workspace.snapshot().tree.list_sub_fields(FIELD)]
    assert names.count("Pendidikan") == 1
    assert "Kesehatan" in names
    assert load_year(records, 2026).tree.get_sub_field(health).name == "Kesehatan"


def test_failed_activity_delete_reconciles_worker_days(records, workspace, storage, create_activity, monkeypatch):
    activity = create_activity()
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Upah", "amount": "200000"})
    _worker_day(workspace, records, expense.id, activity.id)
    original = records.delete_by_id

    def failing_delete(collection, record_id):
        if collection == "activities":
            raise PersistenceError("database is locked")
        return original(collection, record_id)

    monkeypatch.setattr(records, "delete_by_id", failing_delete)
    with pytest.raises(PartialCascadeError) as excinfo:
        cascade.remove_activity(workspace, records, activity.id, storage=storage)

    assert excinfo.value.step == "activities"
    store = workspace.snapshot()
    assert [a.id for a in store.activities] == [activity.id]
    assert store.expense_items == ()


def test_failed_expense_delete_reconciles_items(records, workspace, storage, monkeypatch):
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Belanja Pasir", "amount": "900000"})
    ledger.add_expense_item(
        workspace, records, expense.id, ExpenseItemCreate(description="Pasir", unit_price=Decimal("900000"))
    )
    original = records.delete_by_id

    def failing_delete(collection, record_id):
        if collection == "expenses":
            raise PersistenceError("database is locked")
        return original(collection, record_id)

    monkeypatch.setattr(records, "delete_by_id", failing_delete)
    with pytest.raises(PartialCascadeError) as excinfo:
        cascade.remove_expense(workspace, records, expense.id, storage=storage)

    assert excinfo.value.step == "expenses"
    assert excinfo.value.removed == 1
    store = workspace.snapshot()
    assert [e.id for e in store.expenses] == [expense.id]
    assert store.expense_items == ()

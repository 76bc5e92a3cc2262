from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from lpjdesa.core.errors import DomainValidationError, NotFoundError, PersistenceError
from lpjdesa.models.models import AuditLog, Official
from lpjdesa.schemas.schemas import (
    ActivityUpdate,
    ExpenseItemCreate,
    NarrativeUpdate,
    OfficialPayload,
    VillageProfileUpdate,
)
from lpjdesa.services import ledger
from lpjdesa.services.fiscal_years import load_year


def test_create_activity_reports_context_and_overrun(records, workspace, create_activity, sub_field_id):
    saved = ledger.update_activity(
        workspace,
        records,
        create_activity(budget="1000000").id,
        ActivityUpdate(realized_amount=Decimal("1500000"), status="completed"),
    )
    assert saved.activity.field_name == "Pembangunan Desa"
    assert saved.activity.sub_field_name == "Pekerjaan Umum & Penataan Ruang"
    assert saved.warnings == [ledger.OVER_BUDGET_WARNING]
    assert load_year(records, 2026).activities[0].status == "completed"


def test_activity_requires_known_sub_field(records, workspace, create_activity):
    with pytest.raises(NotFoundError):
        create_activity(sub_field=424242)


def test_update_activity_validates_merged_values(records, workspace, create_activity):
    activity = create_activity(start_date=date(2026, 3, 1), end_date=date(2026, 3, 31))
    with pytest.raises(DomainValidationError) as excinfo:
        ledger.update_activity(workspace, records, activity.id, ActivityUpdate(end_date=date(2026, 2, 1)))
    assert "Tanggal selesai" in excinfo.value.message
    with pytest.raises(DomainValidationError):
        ledger.update_activity(workspace, records, activity.id, ActivityUpdate(budget_amount=Decimal("0")))


def test_ledger_entries_are_listed_by_account_code(records, workspace):
    entries = (("4.2.3", "ADD"), ("4.1.1", "PADes"), ("4.2.10", "Bantuan Provinsi"), ("4.2.1", "Dana Desa"))
    for code, source in entries:
        ledger.create_entry(workspace, records, "incomes", {"account_code": code, "source": source, "amount": "1000000"})

    listed = ledger.list_entries(workspace.snapshot(), "incomes")
    assert [entry.account_code for entry in listed] == ["4.1.1", "4.2.1", "4.2.3", "4.2.10"]


def test_invalid_entries_rejected_before_write(records, workspace):
    with pytest.raises(DomainValidationError) as excinfo:
        ledger.create_entry(workspace, records, "incomes", {"source": "Dana Desa", "amount": "-5"})
    assert excinfo.value.field == "amount"
    with pytest.raises(DomainValidationError):
        ledger.create_entry(
            workspace, records, "financings", {"description": "SiLPA", "category": "Lainnya", "amount": "10"}
        )
    with pytest.raises(NotFoundError):
        ledger.create_entry(workspace, records, "hutang", {"amount": "10"})
    assert records.list_by_year("incomes", 2026) == []


def test_update_and_delete_entry(records, workspace, db_session):
    income = ledger.create_entry(workspace, records, "incomes", {"source": "Dana Desa", "amount": "1000000"})
    updated = ledger.update_entry(workspace, records, "incomes", income.id, {"amount": "2500000"})
    assert updated.amount == Decimal("2500000.00")
    assert updated.source == "Dana Desa"

    ledger.delete_entry(workspace, records, "incomes", income.id)
    assert workspace.snapshot().incomes == ()
    assert db_session.query(AuditLog).filter(AuditLog.action == "incomes.delete").count() == 1

    with pytest.raises(NotFoundError):
        ledger.delete_entry(workspace, records, "incomes", income.id)


def test_expenses_are_not_deleted_through_the_plain_ledger(records, workspace):
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "ATK", "amount": "100000"})
    with pytest.raises(DomainValidationError):
        ledger.delete_entry(workspace, records, "expenses", expense.id)


def test_expense_item_amount_derived_from_quantity(records, workspace, create_activity):
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Upah", "amount": "3600000"})
    activity = create_activity()
    item = ledger.add_expense_item(
        workspace,
        records,
        expense.id,
        ExpenseItemCreate(
            item_type="worker_day",
            activity_id=activity.id,
            paid_to="Asep",
            quantity=Decimal("12"),
            unit_price=Decimal("150000"),
        ),
    )
    assert item.amount == Decimal("1800000.00")
    assert workspace.snapshot().items_for_expense(expense.id) == [item]

    with pytest.raises(NotFoundError):
        ledger.add_expense_item(
            workspace, records, expense.id, ExpenseItemCreate(activity_id=99999, unit_price=Decimal("1"))
        )

    ledger.delete_expense_item(workspace, records, item.id)
    assert workspace.snapshot().expense_items == ()


def test_narrative_upsert_only_touches_given_sections(records, workspace):
    ledger.save_narrative(workspace, records, NarrativeUpdate(background="Latar belakang."))
    narrative = ledger.save_narrative(workspace, records, NarrativeUpdate(obstacles="Hujan."))
    assert narrative.background == "Latar belakang."
    assert narrative.obstacles == "Hujan."
    assert len(records.list_by_year("narrative_content", 2026)) == 1


def test_village_profile_replaces_officials(records):
    ledger.save_village_profile(
        records,
        VillageProfileUpdate(name="Sukamaju", officials=[OfficialPayload(role="Kepala Desa", name="Ahmad")]),
    )
    profile = ledger.save_village_profile(
        records,
        VillageProfileUpdate(
            district="Bogor",
            officials=[
                OfficialPayload(role="Bendahara Desa", name="Budi"),
                OfficialPayload(role="Kepala Desa", name="Ahmad"),
            ],
        ),
    )
    assert profile.name == "Sukamaju"
    assert profile.district == "Bogor"
    assert [official.role for official in profile.officials] == ["Bendahara Desa", "Kepala Desa"]


def test_failed_officials_replacement_keeps_previous_officials(records, db_session, profile, monkeypatch):
    original_commit = db_session.commit

    def failing_commit():
        if any(isinstance(obj, Official) for obj in db_session.new):
            raise SQLAlchemyError("disk I/O error")
        return original_commit()

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(PersistenceError):
        ledger.save_village_profile(
            records, VillageProfileUpdate(officials=[OfficialPayload(role="Kepala Desa", name="Baru")])
        )
    monkeypatch.undo()

    names = [official.name for official in ledger.get_village_profile(records).officials]
    assert names == ["H. Ahmad", "Siti", "Budi"]


def test_every_ledger_write_is_audited(records, workspace, db_session):
    income = ledger.create_entry(workspace, records, "incomes", {"source": "Dana Desa", "amount": "1000000"})
    ledger.update_entry(workspace, records, "incomes", income.id, {"amount": "1250000"})
    expense = ledger.create_entry(workspace, records, "expenses", {"description": "Belanja ATK", "amount": "50000"})
    item = ledger.add_expense_item(
        workspace, records, expense.id, ExpenseItemCreate(description="Kertas", unit_price=Decimal("50000"))
    )
    ledger.delete_expense_item(workspace, records, item.id)
    ledger.save_narrative(workspace, records, NarrativeUpdate(foreword="Puji syukur."))

    actions = [row.action for row in db_session.query(AuditLog).order_by(AuditLog.id)]
    assert actions[-6:] == [
        "incomes.create",
        "incomes.update",
        "expenses.create",
        "expense_item.create",
        "expense_item.delete",
        "narrative.update",
    ]
    update = db_session.query(AuditLog).filter(AuditLog.action == "incomes.update").one()
    assert '"1000000.00"' in update.before
    assert '"1250000.00"' in update.after

import copy
import sqlite3
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lpjdesa.config import settings
from lpjdesa.core.errors import DomainValidationError
from lpjdesa.schemas.schemas import AttachmentCreate, ExpenseItemCreate, NarrativeUpdate
from lpjdesa.services import backup, ledger
from lpjdesa.services.attachments import attach_link

EXPORTED_AT = datetime(2026, 12, 31, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def filled_year(records, workspace, profile, create_activity):
    activity = create_activity(name="Jalan Desa", budget="10000000", realized="6000000")
    expense = ledger.create_entry(
        workspace, records, "expenses", {"description": "Belanja Material", "amount": "6000000"}
    )
    ledger.create_entry(workspace, records, "incomes", {"source": "Dana Desa", "amount": "9000000"})
    ledger.create_entry(
        workspace, records, "financings", {"description": "SiLPA 2025", "category": "Penerimaan Pembiayaan", "amount": "500000"}
    )
    ledger.add_expense_item(
        workspace,
        records,
        expense.id,
        ExpenseItemCreate(item_type="worker_day", activity_id=activity.id, paid_to="Asep", unit_price=Decimal("100000")),
    )
    attach_link(
        workspace,
        records,
        AttachmentCreate(entity_type="activity", entity_id=activity.id, file_name="foto.jpg", file_url="https://x/foto.jpg"),
    )
    ledger.save_narrative(workspace, records, NarrativeUpdate(foreword="Puji syukur"))
    return activity, expense


def test_snapshot_contains_year_and_profile(records, filled_year):
    snapshot = backup.export_year_snapshot(records, 2026, now=EXPORTED_AT)

    meta = snapshot["_meta"]
    assert meta["fiscal_year"] == 2026
    assert meta["village_name"] == "Sukamaju"
    assert meta["exported_at"] == "2026-12-31T09:00:00+00:00"
    assert snapshot["village_info"]["name"] == "Sukamaju"
    assert {official["role"] for official in snapshot["officials"]} == {"Kepala Desa", "Sekretaris Desa", "Bendahara Desa"}
    assert len(snapshot["sub_fields"]) == 14
    assert [row["name"] for row in snapshot["activities"]] == ["Jalan Desa"]
    assert snapshot["narrative"]["foreword"] == "Puji syukur"
    assert meta["total_records"] == 14 + 1 + 1 + 1 + 1 + 1 + 1


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"activities": []},
        {"_meta": {"version": ""}, "activities": []},
        {"_meta": {"version": "1.0"}},
    ],
)
def test_validate_snapshot_rejects_malformed_data(data):
    with pytest.raises(DomainValidationError):
        backup.validate_snapshot(data)


def test_restore_into_new_year_remaps_ids(records, workspace, filled_year):
    activity, expense = filled_year
    snapshot = backup.export_year_snapshot(records, 2026)

    summary = backup.restore_year_snapshot(records, snapshot, year=2027, backup_first=False)

    assert summary.fiscal_year == 2027
    assert summary.inserted["activities"] == 1
    assert summary.inserted["expense_items"] == 1
    assert summary.inserted["attachments"] == 1
    assert summary.inserted["narrative"] == 1
    assert summary.backup_path is None

    store = workspace.switch_year(records, 2027)
    restored = store.activities[0]
    assert restored.id != activity.id
    sub_field = store.tree.get_sub_field(restored.sub_field_id)
    assert sub_field.fiscal_year == 2027
    assert sub_field.name == "Pekerjaan Umum & Penataan Ruang"

    item = store.expense_items[0]
    assert item.expense_id == store.expenses[0].id != expense.id
    assert item.activity_id == restored.id
    assert store.attachments[0].entity_id == restored.id
    assert store.narrative.foreword == "Puji syukur"

    # The source year is untouched.
    assert [row.id for row in records.list_by_year("activities", 2026)] == [activity.id]


def test_restore_skips_rows_with_missing_parents(records, filled_year):
    snapshot = copy.deepcopy(backup.export_year_snapshot(records, 2026))
    orphan = dict(snapshot["activities"][0], id=999, sub_field_id=424242, name="Yatim")
    snapshot["activities"].append(orphan)
    snapshot["expense_items"].append(dict(snapshot["expense_items"][0], id=998, expense_id=31337))

    summary = backup.restore_year_snapshot(records, snapshot, backup_first=False)

    assert summary.fiscal_year == 2026
    assert summary.inserted["activities"] == 1
    assert summary.inserted["expense_items"] == 1
    assert [row.name for row in records.list_by_year("activities", 2026)] == ["Jalan Desa"]


def test_restore_replaces_loaded_year(records, workspace, filled_year, create_activity):
    snapshot = backup.export_year_snapshot(records, 2026)
    create_activity(name="Setelah Backup")
    assert len(workspace.snapshot().activities) == 2

    backup.restore_year_snapshot(records, snapshot, workspace=workspace, backup_first=False)

    assert [row.name for row in workspace.snapshot().activities] == ["Jalan Desa"]


def test_restore_rejects_invalid_rows(records, filled_year):
    snapshot = backup.export_year_snapshot(records, 2026)
    snapshot["incomes"][0]["amount"] = "banyak"
    with pytest.raises(DomainValidationError):
        backup.restore_year_snapshot(records, snapshot, backup_first=False)
    # Nothing was deleted.
    assert len(records.list_by_year("incomes", 2026)) == 1


def test_sqlite_backup_copies_database(tmp_path, monkeypatch):
    db_path = tmp_path / "lpj.db"
    connection = sqlite3.connect(str(db_path))
    connection.execute("CREATE TABLE marker (value TEXT)")
    connection.execute("INSERT INTO marker VALUES ('ok')")
    connection.commit()
    connection.close()
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{db_path}")

    backup_path = backup.perform_sqlite_backup(tmp_path / "backups")

    assert backup_path is not None and backup_path.parent == tmp_path / "backups"
    assert backup_path.name.startswith("lpj_")
    copied = sqlite3.connect(str(backup_path))
    try:
        assert copied.execute("SELECT value FROM marker").fetchall() == [("ok",)]
    finally:
        copied.close()


def test_sqlite_backup_skips_other_databases(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", "postgresql://localhost/lpj")
    assert backup.perform_sqlite_backup(tmp_path) is None
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{tmp_path / 'missing.db'}")
    assert backup.perform_sqlite_backup(tmp_path) is None

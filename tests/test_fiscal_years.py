import threading
from datetime import date

import pytest
from sqlalchemy.exc import SAWarning

from lpjdesa.core.errors import DomainValidationError, NotFoundError
from lpjdesa.models.models import AuditLog
from lpjdesa.services import cascade
from lpjdesa.services.fiscal_years import (
    Workspace,
    YearLocks,
    create_year,
    list_available_years,
    load_year,
    next_fiscal_year,
)


def test_next_fiscal_year():
    assert next_fiscal_year([2024, 2026, 2025]) == 2027
    assert next_fiscal_year([], today=date(2025, 6, 1)) == 2026


def test_new_year_uses_default_catalog_sub_fields(records):
    store = create_year(records, year=2026)
    assert store.year == 2026
    assert len(store.tree.all_sub_fields()) == 14
    names = [row.name for row in store.tree.list_sub_fields("Penanggulangan Bencana")]
    assert names == ["Tanggap Darurat", "Pencegahan & Mitigasi"]
    assert store.activities == ()
    assert list_available_years(records) == [2026]


def test_year_listing_includes_years_known_only_from_rows(records, workspace, create_activity, recwarn):
    create_activity(name="Jalan Desa")
    records.insert("incomes", {"fiscal_year": 2024, "source": "Dana Desa", "amount": 1000000})
    assert list_available_years(records) == [2024, 2026]
    distinct_warnings = [
        warning
        for warning in recwarn
        if issubclass(warning.category, SAWarning) and "distinct" in str(warning.message)
    ]
    assert distinct_warnings == []


def test_new_year_copies_template_sub_fields(records, workspace, create_activity):
    create_activity()
    cascade.add_sub_field(workspace, records, "Pembangunan Desa", "Perhubungan Desa")

    store = workspace.create_year(records)
    assert store.year == 2027
    assert store.tree.find_sub_field("Pembangunan Desa", "Perhubungan Desa") is not None
    assert len(store.tree.all_sub_fields()) == 15
    # Activities and ledgers are not carried over.
    assert store.activities == ()
    # Creating a year does not switch to it.
    assert workspace.year == 2026

    template_ids = {row.id for row in load_year(records, 2026).tree.all_sub_fields()}
    assert template_ids.isdisjoint(row.id for row in store.tree.all_sub_fields())


def test_duplicate_year_rejected(records, workspace):
    with pytest.raises(DomainValidationError):
        workspace.create_year(records, year=2026)


def test_create_year_is_audited(records, db_session):
    create_year(records, year=2030, template_year=None)
    entry = db_session.query(AuditLog).filter(AuditLog.action == "fiscal_year.create").one()
    assert entry.fiscal_year == 2030


def test_switch_year_replaces_the_whole_store(records, workspace, create_activity):
    create_activity(name="Jalan Usaha Tani")
    workspace.create_year(records, year=2027)

    before = workspace.snapshot()
    after = workspace.switch_year(records, 2027)
    assert after.year == 2027
    assert after.activities == ()
    # A reader holding the old snapshot still sees all of 2026.
    assert before.year == 2026
    assert [a.name for a in before.activities] == ["Jalan Usaha Tani"]

    back = workspace.switch_year(records, 2026)
    assert [a.name for a in back.activities] == ["Jalan Usaha Tani"]


def test_empty_workspace_has_no_active_year():
    workspace = Workspace(locks=YearLocks())
    assert not workspace.loaded
    with pytest.raises(NotFoundError):
        workspace.snapshot()


def test_commit_rejects_store_from_another_year(records, workspace):
    other = create_year(records, year=2031)
    with pytest.raises(DomainValidationError):
        workspace.commit(other)
    assert workspace.year == 2026


def test_mutation_holds_the_year_lock(workspace):
    lock = workspace.locks.for_year(2026)
    with workspace.mutation() as store:
        assert store.year == 2026
        # Re-entrant for the same thread.
        assert lock.acquire(blocking=False)
        lock.release()
    assert workspace.locks.for_year(2026) is lock


def test_switch_waits_for_mutation_on_the_current_year(records, workspace):
    create_year(records, year=2027)
    held = threading.Event()
    release = threading.Event()
    events = []

    def busy_cascade():
        with workspace.locks.for_year(2026):
            held.set()
            release.wait(5)
            events.append("released")

    worker = threading.Thread(target=busy_cascade)
    worker.start()
    held.wait(5)
    threading.Timer(0.2, release.set).start()

    workspace.switch_year(records, 2027)
    events.append("switched")
    worker.join(5)

    assert events == ["released", "switched"]
    assert workspace.year == 2027

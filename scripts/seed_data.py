#!/usr/bin/env python
"""
Seed script to populate the database with a sample village and fiscal year.

Usage:
    python scripts/seed_data.py --year 2026 --activities 2
"""

import argparse
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lpjdesa.config import Base, SessionLocal, engine  # noqa: E402
from lpjdesa.schemas.schemas import (  # noqa: E402
    ActivityCreate,
    ExpenseItemCreate,
    NarrativeUpdate,
    OfficialPayload,
    VillageProfileUpdate,
)
from lpjdesa.services import ledger  # noqa: E402
from lpjdesa.services.fiscal_years import Workspace, list_available_years  # noqa: E402
from lpjdesa.services.record_store import RecordStore  # noqa: E402


def seed_profile(records: RecordStore) -> None:
    if ledger.get_village_profile(records).name:
        return
    ledger.save_village_profile(
        records,
        VillageProfileUpdate(
            name="Sukamaju",
            code="32.01.02.2001",
            address="Jl. Raya Sukamaju No. 1",
            postal_code="16710",
            sub_district="Cibinong",
            district="Bogor",
            province="Jawa Barat",
            reporting_period="Semester II",
            officials=[
                OfficialPayload(role="Kepala Desa", name="H. Ahmad Sudrajat"),
                OfficialPayload(role="Sekretaris Desa", name="Siti Rahmawati"),
                OfficialPayload(role="Bendahara Desa", name="Budi Santoso"),
            ],
        ),
    )


def seed_year(records: RecordStore, year: int, activities_per_sub_field: int) -> None:
    workspace = Workspace()
    if year in list_available_years(records):
        print(f"Fiscal year {year} already exists; skipping.")
        return
    workspace.create_year(records, year=year)
    workspace.switch_year(records, year)
    store = workspace.snapshot()

    start = date(year, 3, 1)
    for budget_field in store.tree.fields[:2]:
        for sub_field in store.tree.list_sub_fields(budget_field.name)[:2]:
            for index in range(1, activities_per_sub_field + 1):
                budget = Decimal("10000000") * index
                ledger.create_activity(
                    workspace,
                    records,
                    ActivityCreate(
                        sub_field_id=sub_field.id,
                        name=f"{sub_field.name} Tahap {index}",
                        account_code=f"{sub_field.account_code}.{index:02d}",
                        status="completed" if index == 1 else "ongoing",
                        progress=100 if index == 1 else 50,
                        budget_amount=budget,
                        realized_amount=budget if index == 1 else budget / 2,
                        executor="TPK Desa Sukamaju",
                        start_date=start,
                        end_date=start + timedelta(days=30),
                    ),
                )

    for code, source, amount in (
        ("4.2.1", "Dana Desa", "800000000"),
        ("4.2.3", "Alokasi Dana Desa", "350000000"),
        ("4.1.4", "Pendapatan Asli Desa", "25000000"),
    ):
        ledger.create_entry(workspace, records, "incomes", {"account_code": code, "source": source, "amount": amount})

    expense = ledger.create_entry(
        workspace,
        records,
        "expenses",
        {
            "account_code": "5.2.1",
            "description": "Belanja Material Jalan Desa",
            "amount": "12500000",
            "spent_on": date(year, 4, 10),
            "recipient": "TB Maju Jaya",
        },
    )
    activity_id = workspace.snapshot().activities[0].id
    ledger.add_expense_item(
        workspace,
        records,
        expense.id,
        ExpenseItemCreate(description="Semen 50kg", quantity=Decimal("100"), unit="sak", unit_price=Decimal("75000")),
    )
    for worker in ("Asep", "Dedi", "Ujang"):
        ledger.add_expense_item(
            workspace,
            records,
            expense.id,
            ExpenseItemCreate(
                item_type="worker_day",
                activity_id=activity_id,
                paid_to=worker,
                quantity=Decimal("10"),
                unit="HOK",
                unit_price=Decimal("120000"),
            ),
        )
    ledger.create_entry(
        workspace,
        records,
        "financings",
        {
            "account_code": "6.1.1",
            "description": "SiLPA Tahun Sebelumnya",
            "category": "Penerimaan Pembiayaan",
            "amount": "40000000",
        },
    )
    ledger.save_narrative(
        workspace,
        records,
        NarrativeUpdate(obstacles="Curah hujan tinggi menunda pekerjaan fisik selama dua minggu."),
    )
    print(f"Seeded fiscal year {year} with {len(workspace.snapshot().activities)} activities.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a sample village and fiscal year.")
    parser.add_argument("--year", type=int, default=date.today().year, help="Fiscal year to create")
    parser.add_argument("--activities", type=int, default=2, help="Activities per seeded sub-field")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        records = RecordStore(session)
        seed_profile(records)
        seed_year(records, args.year, args.activities)


if __name__ == "__main__":
    main()

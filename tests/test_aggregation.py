from decimal import Decimal

from lpjdesa.schemas.schemas import ActivityRead, ExpenseRead, FinancingRead, IncomeRead
from lpjdesa.services.aggregation import field_rollups, percent_realized, rollup, sub_field_rollups, year_totals


def _activity(id_, sub_field_id, budget, realized, status="ongoing"):
    return ActivityRead(
        id=id_,
        fiscal_year=2026,
        sub_field_id=sub_field_id,
        name=f"Kegiatan {id_}",
        status=status,
        budget_amount=Decimal(budget),
        realized_amount=Decimal(realized),
    )


def test_percent_realized_rounds_half_up_to_one_decimal():
    assert percent_realized(Decimal("6000000"), Decimal("10000000")) == Decimal("60.0")
    assert percent_realized(Decimal("1"), Decimal("3")) == Decimal("33.3")
    assert percent_realized(Decimal("2"), Decimal("3")) == Decimal("66.7")
    assert percent_realized(Decimal("5"), Decimal("0")) == Decimal("0.0")


def test_rollup_counts_statuses_and_sums():
    summary = rollup(
        [
            _activity(1, 1, "10000000", "10000000", "completed"),
            _activity(2, 1, "5000000", "1000000", "ongoing"),
            _activity(3, 2, "2500000", "0", "planned"),
        ]
    )
    assert summary.count == 3
    assert (summary.completed, summary.ongoing, summary.planned) == (1, 1, 1)
    assert summary.total_budget == Decimal("17500000.00")
    assert summary.total_realized == Decimal("11000000.00")
    assert summary.remaining == Decimal("6500000.00")
    assert summary.percent_realized == Decimal("62.9")


def test_empty_rollup_is_zero():
    summary = rollup([])
    assert summary.count == 0
    assert summary.total_budget == Decimal("0.00")
    assert summary.percent_realized == Decimal("0.0")


def test_field_rollups_cover_every_field(workspace):
    tree = workspace.snapshot().tree
    health = tree.find_sub_field("Pembangunan Desa", "Kesehatan")
    office = tree.find_sub_field("Penyelenggaraan Pemerintahan", "Operasional Perkantoran")
    activities = [
        _activity(1, health.id, "4000000", "2000000"),
        _activity(2, health.id, "6000000", "4000000"),
        _activity(3, office.id, "1000000", "1000000", "completed"),
        _activity(4, 9999, "7000000", "7000000"),
    ]

    summaries = {summary.label: summary for summary in field_rollups(tree, activities)}

    assert len(summaries) == 5
    assert summaries["Pembangunan Desa"].total_budget == Decimal("10000000.00")
    assert summaries["Pembangunan Desa"].percent_realized == Decimal("60.0")
    assert summaries["Penyelenggaraan Pemerintahan"].completed == 1
    assert summaries["Penanggulangan Bencana"].count == 0
    # An activity whose sub-field is gone belongs to no field.
    assert sum(summary.count for summary in summaries.values()) == 3

    per_sub_field = sub_field_rollups(tree, activities, "Pembangunan Desa")
    assert [summary.label for summary in per_sub_field] == [
        "Pekerjaan Umum & Penataan Ruang",
        "Pendidikan",
        "Kesehatan",
    ]
    assert per_sub_field[2].count == 2


def test_year_totals_and_remaining_balance():
    incomes = [
        IncomeRead(id=1, fiscal_year=2026, source="Dana Desa", amount=Decimal("800000000")),
        IncomeRead(id=2, fiscal_year=2026, source="ADD", amount=Decimal("200000000")),
    ]
    expenses = [ExpenseRead(id=3, fiscal_year=2026, description="Belanja", amount=Decimal("900000000"))]
    financings = [
        FinancingRead(
            id=1, fiscal_year=2026, description="SiLPA", category="Penerimaan Pembiayaan", amount=Decimal("50000000")
        ),
        FinancingRead(
            id=2,
            fiscal_year=2026,
            description="Modal BUMDes",
            category="Pengeluaran Pembiayaan",
            amount=Decimal("30000000"),
        ),
    ]

    totals = year_totals(incomes, expenses, financings)

    assert totals.income == Decimal("1000000000.00")
    assert totals.surplus == Decimal("100000000.00")
    assert totals.financing_net == Decimal("20000000.00")
    assert totals.remaining_balance == Decimal("120000000.00")
    assert totals.as_read().remaining_balance == Decimal("120000000.00")

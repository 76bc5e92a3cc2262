from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from ..constants import FINANCING_IN, FINANCING_OUT
from ..schemas.schemas import ActivityRead, FinancingRead, RollupRead, YearTotalsRead
from ..utils.formatting import as_decimal
from .classification import ClassificationTree

ZERO = Decimal("0.00")


def sum_amounts(rows: Iterable, attribute: str = "amount") -> Decimal:
    total = ZERO
    for row in rows:
        total += as_decimal(getattr(row, attribute, None))
    return total.quantize(Decimal("0.01"))


def percent_realized(realized: Decimal, budget: Decimal) -> Decimal:
    """Realization percentage with one decimal; zero when nothing was budgeted."""
    budget = as_decimal(budget)
    if budget == 0:
        return Decimal("0.0")
    ratio = as_decimal(realized) * 100 / budget
    return ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Rollup:
    label: str
    code: Optional[str]
    count: int
    completed: int
    ongoing: int
    planned: int
    total_budget: Decimal
    total_realized: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.total_realized

    @property
    def percent_realized(self) -> Decimal:
        return percent_realized(self.total_realized, self.total_budget)

    def as_read(self) -> RollupRead:
        return RollupRead(
            label=self.label,
            code=self.code,
            count=self.count,
            completed=self.completed,
            ongoing=self.ongoing,
            planned=self.planned,
            total_budget=self.total_budget,
            total_realized=self.total_realized,
            remaining=self.remaining,
            percent_realized=self.percent_realized,
        )


def rollup(activities: Iterable[ActivityRead], label: str = "Total", code: Optional[str] = None) -> Rollup:
    activities = list(activities)
    statuses = [activity.status for activity in activities]
    return Rollup(
        label=label,
        code=code,
        count=len(activities),
        completed=statuses.count("completed"),
        ongoing=statuses.count("ongoing"),
        planned=statuses.count("planned"),
        total_budget=sum_amounts(activities, "budget_amount"),
        total_realized=sum_amounts(activities, "realized_amount"),
    )


def field_rollups(tree: ClassificationTree, activities: Iterable[ActivityRead]) -> List[Rollup]:
    """One rollup per catalog field, in catalog order, including empty fields."""
    grouped = {budget_field.name: [] for budget_field in tree.fields}
    for activity in activities:
        budget_field = tree.field_of(activity)
        if budget_field is not None:
            grouped[budget_field.name].append(activity)
    return [
        rollup(grouped[budget_field.name], label=budget_field.name, code=budget_field.code)
        for budget_field in tree.fields
    ]


def sub_field_rollups(tree: ClassificationTree, activities: Iterable[ActivityRead], field_name: str) -> List[Rollup]:
    activities = list(activities)
    return [
        rollup(
            [a for a in activities if a.sub_field_id == sub_field.id],
            label=sub_field.name,
            code=sub_field.account_code,
        )
        for sub_field in tree.list_sub_fields(field_name)
    ]


@dataclass(frozen=True)
class YearTotals:
    income: Decimal
    expense: Decimal
    financing_in: Decimal
    financing_out: Decimal

    @property
    def surplus(self) -> Decimal:
        return self.income - self.expense

    @property
    def financing_net(self) -> Decimal:
        return self.financing_in - self.financing_out

    @property
    def remaining_balance(self) -> Decimal:
        """SiLPA: surplus plus net financing."""
        return self.surplus + self.financing_net

    def as_read(self) -> YearTotalsRead:
        return YearTotalsRead(
            income=self.income,
            expense=self.expense,
            surplus=self.surplus,
            financing_in=self.financing_in,
            financing_out=self.financing_out,
            financing_net=self.financing_net,
            remaining_balance=self.remaining_balance,
        )


def year_totals(incomes: Iterable, expenses: Iterable, financings: Iterable[FinancingRead]) -> YearTotals:
    financings = list(financings)
    return YearTotals(
        income=sum_amounts(incomes),
        expense=sum_amounts(expenses),
        financing_in=sum_amounts(f for f in financings if f.category == FINANCING_IN),
        financing_out=sum_amounts(f for f in financings if f.category == FINANCING_OUT),
    )

"""The computed view every renderer reads from.

:func:`build_report_view` runs the ordering, aggregation and wording once per
export. Renderers only lay the resulting values out, so the three encodings
of one export cannot disagree on a total, an order or a phrase.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..config import settings
from ..constants import (
    DOTTED,
    ROLE_SECRETARY,
    ROLE_TREASURER,
    ROLE_VILLAGE_HEAD,
    SIGNER_PLACEHOLDER,
)
from ..core.errors import DomainValidationError
from ..schemas.schemas import (
    ActivityRead,
    ExpenseItemRead,
    ExpenseRead,
    FinancingRead,
    IncomeRead,
    SubFieldRead,
    VillageProfileRead,
)
from ..services.aggregation import Rollup, YearTotals, percent_realized, rollup, year_totals
from ..services.attachments import Manifest, build_manifest
from ..services.classification import BudgetField
from ..services.fiscal_years import YearScopedStore
from ..utils.account_codes import sort_by_account_code
from ..utils.formatting import safe_file_stem
from ..utils.number_words import amount_to_words
from .narratives import ResolvedNarrative, resolve_narrative

SCOPE_YEAR = "year"
SCOPE_ACTIVITY = "activity"
SCOPE_FIELD = "field"
SCOPE_SUB_FIELD = "sub_field"
SCOPE_LEDGER = "ledger"
SCOPE_INCOME = "income"
SCOPE_EXPENSE = "expense"
SCOPE_FINANCING = "financing"
LEDGER_TYPE_LABELS = {
    SCOPE_INCOME: "Pendapatan",
    SCOPE_EXPENSE: "Belanja",
    SCOPE_FINANCING: "Pembiayaan",
}
SCOPE_KINDS = (SCOPE_YEAR, SCOPE_ACTIVITY, SCOPE_FIELD, SCOPE_SUB_FIELD, SCOPE_LEDGER, *LEDGER_TYPE_LABELS)

UNCLASSIFIED_FIELD = BudgetField(name="Belum Terklasifikasi", code="-")


@dataclass(frozen=True)
class ReportScope:
    kind: str = SCOPE_YEAR
    activity_id: Optional[int] = None
    field_name: Optional[str] = None
    sub_field_id: Optional[int] = None

    @property
    def is_level(self) -> bool:
        return self.kind in (SCOPE_FIELD, SCOPE_SUB_FIELD)

    @property
    def is_ledger(self) -> bool:
        """Ledger-only reports: every book at once, or one ledger type."""
        return self.kind == SCOPE_LEDGER or self.kind in LEDGER_TYPE_LABELS


@dataclass(frozen=True)
class Signers:
    village_head: str
    secretary: str
    treasurer: str


@dataclass(frozen=True)
class ActivityLine:
    activity: ActivityRead
    field_name: str
    sub_field_name: str
    account_code: str

    @property
    def percent(self) -> Decimal:
        return percent_realized(self.activity.realized_amount, self.activity.budget_amount)

    @property
    def remaining(self) -> Decimal:
        return self.activity.budget_amount - self.activity.realized_amount


@dataclass(frozen=True)
class SubFieldSection:
    sub_field: SubFieldRead
    rollup: Rollup
    lines: Tuple[ActivityLine, ...]


@dataclass(frozen=True)
class FieldSection:
    field: BudgetField
    rollup: Rollup
    sub_sections: Tuple[SubFieldSection, ...]

    @property
    def lines(self) -> List[ActivityLine]:
        return [line for section in self.sub_sections for line in section.lines]


@dataclass(frozen=True)
class ReportView:
    year: int
    profile: VillageProfileRead
    scope: ReportScope
    scope_label: str
    signers: Signers
    narrative: ResolvedNarrative
    incomes: Tuple[IncomeRead, ...]
    expenses: Tuple[ExpenseRead, ...]
    financings: Tuple[FinancingRead, ...]
    expense_items: Tuple[ExpenseItemRead, ...]
    lines: Tuple[ActivityLine, ...]
    field_sections: Tuple[FieldSection, ...]
    activity_rollup: Rollup
    totals: YearTotals
    manifest: Manifest
    locale: str
    currency: str
    generated_on: date
    words: Dict[str, str] = field(default_factory=dict)

    @property
    def village_name(self) -> str:
        return self.profile.name or DOTTED

    @property
    def year_label(self) -> str:
        return self.profile.fiscal_year_label or str(self.year)

    @property
    def file_stem(self) -> str:
        return safe_file_stem(self.profile.name, fallback="Desa", max_length=20)

    def words_for(self, amount: Decimal) -> str:
        return amount_to_words(amount, currency=self.currency, locale=self.locale)

    def expense(self, expense_id: int) -> Optional[ExpenseRead]:
        return next((expense for expense in self.expenses if expense.id == expense_id), None)

    def line(self, activity_id: int) -> Optional[ActivityLine]:
        return next((line for line in self.lines if line.activity.id == activity_id), None)


def find_signers(profile: VillageProfileRead) -> Signers:
    """Signer names by role, matched case-insensitively; dotted placeholder when missing."""
    by_role: Dict[str, str] = {}
    for official in profile.officials:
        role = (official.role or "").strip().casefold()
        if official.name and official.name.strip() and role not in by_role:
            by_role[role] = official.name.strip()
    return Signers(
        village_head=by_role.get(ROLE_VILLAGE_HEAD, SIGNER_PLACEHOLDER),
        secretary=by_role.get(ROLE_SECRETARY, SIGNER_PLACEHOLDER),
        treasurer=by_role.get(ROLE_TREASURER, SIGNER_PLACEHOLDER),
    )


def _activity_lines(store: YearScopedStore, activities) -> List[ActivityLine]:
    lines = []
    for activity in activities:
        context = store.tree.activity_context(activity)
        lines.append(
            ActivityLine(
                activity=activity,
                field_name=context.field_name or "-",
                sub_field_name=context.sub_field_name or "-",
                account_code=context.account_code,
            )
        )
    return sort_by_account_code(lines, code=lambda line: line.account_code)


def _field_sections(store: YearScopedStore, lines: List[ActivityLine], scope: ReportScope) -> List[FieldSection]:
    sections: List[FieldSection] = []
    if scope.is_ledger:
        return sections
    for budget_field in store.tree.fields:
        if scope.kind == SCOPE_FIELD and budget_field.name != scope.field_name:
            continue
        sub_sections = []
        for sub_field in store.tree.list_sub_fields(budget_field.name):
            if scope.kind == SCOPE_SUB_FIELD and sub_field.id != scope.sub_field_id:
                continue
            members = tuple(line for line in lines if line.activity.sub_field_id == sub_field.id)
            if scope.kind == SCOPE_ACTIVITY and not members:
                continue
            sub_sections.append(
                SubFieldSection(
                    sub_field=sub_field,
                    rollup=rollup(
                        (line.activity for line in members), label=sub_field.name, code=sub_field.account_code
                    ),
                    lines=members,
                )
            )
        if sub_sections:
            sections.append(_section(budget_field, sub_sections))

    placed = {line.activity.id for section in sections for line in section.lines}
    stray = [line for line in lines if line.activity.id not in placed]
    if stray:
        sections.append(_unclassified_section(store, stray))
    return sections


def _section(budget_field: BudgetField, sub_sections: List[SubFieldSection]) -> FieldSection:
    field_lines = [line.activity for section in sub_sections for line in section.lines]
    return FieldSection(
        field=budget_field,
        rollup=rollup(field_lines, label=budget_field.name, code=budget_field.code),
        sub_sections=tuple(sub_sections),
    )


def _unclassified_section(store: YearScopedStore, lines: List[ActivityLine]) -> FieldSection:
    """Activities whose sub-field sits outside the field catalog, or is gone altogether."""
    groups: Dict[int, List[ActivityLine]] = {}
    for line in lines:
        groups.setdefault(line.activity.sub_field_id, []).append(line)
    sub_sections = []
    for sub_field_id, members in groups.items():
        if store.tree.has_sub_field(sub_field_id):
            sub_field = store.tree.get_sub_field(sub_field_id)
        else:
            sub_field = SubFieldRead(
                id=sub_field_id,
                fiscal_year=store.year,
                field_name=UNCLASSIFIED_FIELD.name,
                name=f"Sub bidang #{sub_field_id}",
            )
        sub_sections.append(
            SubFieldSection(
                sub_field=sub_field,
                rollup=rollup((line.activity for line in members), label=sub_field.name, code=sub_field.account_code),
                lines=tuple(members),
            )
        )
    return _section(UNCLASSIFIED_FIELD, sub_sections)


def _scoped_activities(store: YearScopedStore, scope: ReportScope) -> Tuple[List[ActivityRead], str]:
    if scope.kind == SCOPE_ACTIVITY:
        if scope.activity_id is None:
            raise DomainValidationError("Kegiatan wajib dipilih", field="activity_id")
        activity = store.activity(scope.activity_id)
        return [activity], activity.name
    if scope.kind == SCOPE_FIELD:
        budget_field = store.tree.field(scope.field_name or "")
        return store.activities_for_field(budget_field.name), budget_field.name
    if scope.kind == SCOPE_SUB_FIELD:
        if scope.sub_field_id is None:
            raise DomainValidationError("Sub bidang wajib dipilih", field="sub_field_id")
        sub_field = store.tree.get_sub_field(scope.sub_field_id)
        return store.activities_for_sub_field(sub_field.id), sub_field.name
    if scope.kind == SCOPE_LEDGER:
        return [], "Buku Kas"
    if scope.kind in LEDGER_TYPE_LABELS:
        return [], LEDGER_TYPE_LABELS[scope.kind]
    if scope.kind == SCOPE_YEAR:
        return list(store.activities), "Semua Bidang"
    raise DomainValidationError(f"Cakupan laporan '{scope.kind}' tidak dikenal", field="scope")


def build_report_view(
    store: YearScopedStore,
    profile: VillageProfileRead,
    manifest: Optional[Manifest] = None,
    scope: Optional[ReportScope] = None,
    locale: Optional[str] = None,
    currency: Optional[str] = None,
    today: Optional[date] = None,
) -> ReportView:
    scope = scope or ReportScope()
    activities, label = _scoped_activities(store, scope)
    lines = _activity_lines(store, activities)
    totals = year_totals(store.incomes, store.expenses, store.financings)
    activity_rollup = rollup(activities, label="JUMLAH TOTAL")
    locale = locale or settings.words_locale
    currency = currency or settings.currency_name

    view = ReportView(
        year=store.year,
        profile=profile,
        scope=scope,
        scope_label=label,
        signers=find_signers(profile),
        narrative=resolve_narrative(store.narrative, profile, store.year),
        incomes=tuple(sort_by_account_code(store.incomes)),
        expenses=tuple(sort_by_account_code(store.expenses)),
        financings=tuple(sort_by_account_code(store.financings)),
        expense_items=store.expense_items,
        lines=tuple(lines),
        field_sections=tuple(_field_sections(store, lines, scope)),
        activity_rollup=activity_rollup,
        totals=totals,
        manifest=manifest if manifest is not None else build_manifest(store.attachments),
        locale=locale,
        currency=currency,
        generated_on=today or date.today(),
    )
    view.words.update(
        {
            "income": view.words_for(totals.income),
            "expense": view.words_for(totals.expense),
            "balance": view.words_for(totals.remaining_balance),
            "budget": view.words_for(activity_rollup.total_budget),
            "realized": view.words_for(activity_rollup.total_realized),
        }
    )
    return view

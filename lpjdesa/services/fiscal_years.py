"""Fiscal-year scoping.

Every year-scoped collection is loaded together into one immutable
:class:`YearScopedStore`. The :class:`Workspace` holds the active store and
replaces it as a single reference, so a reader either sees the whole of year N
or the whole of year N+1, and a reader during a cascade sees the store from
before or after it.
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.errors import DomainValidationError, NotFoundError
from ..schemas.schemas import (
    ActivityRead,
    AttachmentRead,
    ExpenseItemRead,
    ExpenseRead,
    FinancingRead,
    IncomeRead,
    NarrativeRead,
    SubFieldRead,
)
from .audit import audit_log
from .classification import DEFAULT_CATALOG, BudgetField, ClassificationTree
from .record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearScopedStore:
    year: int
    tree: ClassificationTree
    activities: Tuple[ActivityRead, ...] = ()
    incomes: Tuple[IncomeRead, ...] = ()
    expenses: Tuple[ExpenseRead, ...] = ()
    expense_items: Tuple[ExpenseItemRead, ...] = ()
    financings: Tuple[FinancingRead, ...] = ()
    attachments: Tuple[AttachmentRead, ...] = ()
    narrative: Optional[NarrativeRead] = None

    def replace(self, **changes) -> "YearScopedStore":
        return replace(self, **changes)

    def activity(self, activity_id: int) -> ActivityRead:
        for activity in self.activities:
            if activity.id == activity_id:
                return activity
        raise NotFoundError(f"Kegiatan #{activity_id} tidak ditemukan")

    def expense(self, expense_id: int) -> ExpenseRead:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        raise NotFoundError(f"Belanja #{expense_id} tidak ditemukan")

    def activities_for_sub_field(self, sub_field_id: int) -> List[ActivityRead]:
        return [activity for activity in self.activities if activity.sub_field_id == sub_field_id]

    def activities_for_field(self, field_name: str) -> List[ActivityRead]:
        matches = []
        for activity in self.activities:
            budget_field = self.tree.field_of(activity)
            if budget_field is not None and budget_field.name == field_name:
                matches.append(activity)
        return matches

    def items_for_expense(self, expense_id: int) -> List[ExpenseItemRead]:
        return [item for item in self.expense_items if item.expense_id == expense_id]

    def attachments_for(self, entity_type: str, entity_ids: Iterable[int]) -> List[AttachmentRead]:
        wanted = set(entity_ids)
        return [
            attachment
            for attachment in self.attachments
            if attachment.entity_type == entity_type and attachment.entity_id in wanted
        ]


def _rows(records: RecordStore, collection: str, year: int, schema) -> Tuple:
    return tuple(schema.model_validate(row) for row in records.list_by_year(collection, year))


def load_year(
    records: RecordStore,
    year: int,
    catalog: Sequence[BudgetField] = DEFAULT_CATALOG,
) -> YearScopedStore:
    """Read every year-scoped collection for ``year`` into a fresh store."""
    sub_fields = _rows(records, "budget_sub_fields", year, SubFieldRead)
    narratives = records.list_by_year("narrative_content", year)
    store = YearScopedStore(
        year=year,
        tree=ClassificationTree(catalog, sub_fields),
        activities=_rows(records, "activities", year, ActivityRead),
        incomes=_rows(records, "incomes", year, IncomeRead),
        expenses=_rows(records, "expenses", year, ExpenseRead),
        expense_items=_rows(records, "expense_items", year, ExpenseItemRead),
        financings=_rows(records, "financings", year, FinancingRead),
        attachments=_rows(records, "attachments", year, AttachmentRead),
        narrative=NarrativeRead.model_validate(narratives[0]) if narratives else None,
    )
    logger.debug(
        "Loaded fiscal year %s: %d sub-fields, %d activities",
        year,
        len(sub_fields),
        len(store.activities),
    )
    return store


def list_available_years(records: RecordStore) -> List[int]:
    return sorted(records.distinct_years())


def next_fiscal_year(existing: Iterable[int], today: Optional[date] = None) -> int:
    years = list(existing)
    if years:
        return max(years) + 1
    return (today or date.today()).year + 1


def _template_rows(
    records: RecordStore,
    template_year: Optional[int],
    catalog: Sequence[BudgetField],
) -> List[Tuple[str, str, Optional[str]]]:
    if template_year is not None:
        template = records.list_by_year("budget_sub_fields", template_year)
        if template:
            return [(row.field_name, row.name, row.account_code) for row in template]
    return [
        (budget_field.name, name, code)
        for budget_field in catalog
        for code, name in budget_field.default_sub_fields
    ]


def create_year(
    records: RecordStore,
    template_year: Optional[int] = None,
    year: Optional[int] = None,
    catalog: Sequence[BudgetField] = DEFAULT_CATALOG,
) -> YearScopedStore:
    """Create ``year`` (default: the year after the latest one) from a sub-field template.

    The template year's sub-fields are copied; when it has none, the catalog's
    default sub-fields are used. Activities and ledgers start empty.
    """
    existing = set(list_available_years(records))
    target = year if year is not None else next_fiscal_year(existing)
    if target in existing:
        raise DomainValidationError(f"Tahun anggaran {target} sudah ada", field="year")

    rows = _template_rows(records, template_year, catalog)
    records.insert("fiscal_years", {"year": target, "template_year": template_year})
    records.insert_many(
        "budget_sub_fields",
        (
            {"fiscal_year": target, "field_name": field_name, "name": name, "account_code": code}
            for field_name, name, code in rows
        ),
    )
    audit_log(
        records.session,
        action="fiscal_year.create",
        fiscal_year=target,
        target_entity_type="FiscalYear",
        target_entity_id=str(target),
        after={"template_year": template_year, "sub_fields": len(rows)},
    )
    logger.info("Created fiscal year %s from template %s (%d sub-fields)", target, template_year, len(rows))
    return load_year(records, target, catalog)


class YearLocks:
    """One re-entrant mutation lock per fiscal year."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = {}

    def for_year(self, year: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(year)
            if lock is None:
                lock = self._locks[year] = threading.RLock()
            return lock


year_locks = YearLocks()


@dataclass
class Workspace:
    """The active fiscal year of one logical session."""

    catalog: Sequence[BudgetField] = DEFAULT_CATALOG
    locks: YearLocks = field(default_factory=lambda: year_locks)
    _store: Optional[YearScopedStore] = field(default=None, init=False, repr=False)

    @property
    def loaded(self) -> bool:
        return self._store is not None

    @property
    def year(self) -> int:
        return self.snapshot().year

    def snapshot(self) -> YearScopedStore:
        store = self._store
        if store is None:
            raise NotFoundError("Belum ada tahun anggaran aktif")
        return store

    def list_available_years(self, records: RecordStore) -> List[int]:
        return list_available_years(records)

    def switch_year(self, records: RecordStore, year: int) -> YearScopedStore:
        store = load_year(records, year, self.catalog)
        with ExitStack() as held:
            # Both years, lowest first, so an in-flight mutation finishes before the swap.
            years = {year} if self._store is None else {year, self._store.year}
            for locked_year in sorted(years):
                held.enter_context(self.locks.for_year(locked_year))
            self._store = store
        logger.info("Switched active fiscal year to %s", year)
        return store

    def refresh(self, records: RecordStore) -> YearScopedStore:
        return self.switch_year(records, self.year)

    def create_year(
        self,
        records: RecordStore,
        template_year: Optional[int] = None,
        year: Optional[int] = None,
    ) -> YearScopedStore:
        if template_year is None and self._store is not None:
            template_year = self._store.year
        return create_year(records, template_year=template_year, year=year, catalog=self.catalog)

    @contextmanager
    def mutation(self) -> Iterator[YearScopedStore]:
        """Hold the active year's lock and yield the store current under it."""
        year = self.year
        with self.locks.for_year(year):
            store = self.snapshot()
            if store.year != year:
                raise DomainValidationError("Tahun anggaran aktif berubah selama proses; ulangi")
            yield store

    def commit(self, store: YearScopedStore) -> YearScopedStore:
        current = self.snapshot()
        if store.year != current.year:
            raise DomainValidationError("Tidak dapat menyimpan data lintas tahun anggaran")
        self._store = store
        return store

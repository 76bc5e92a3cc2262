"""Generic per-collection access to the backing store.

The reporting core only ever talks to persistence through :class:`RecordStore`:
list a collection by fiscal year, insert, update by id, delete by id, and delete
by parent ids for cascades. Every write commits immediately so callers can
sequence persist-then-commit against their in-memory state.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, PersistenceError
from ..models.models import (
    Activity,
    Attachment,
    BudgetSubField,
    Expense,
    ExpenseItem,
    Financing,
    FiscalYear,
    Income,
    NarrativeContent,
    Official,
    VillageInfo,
)

logger = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Type[Any]] = {
    "village_info": VillageInfo,
    "officials": Official,
    "fiscal_years": FiscalYear,
    "budget_sub_fields": BudgetSubField,
    "incomes": Income,
    "expenses": Expense,
    "expense_items": ExpenseItem,
    "activities": Activity,
    "financings": Financing,
    "attachments": Attachment,
    "narrative_content": NarrativeContent,
}

GLOBAL_COLLECTIONS = frozenset({"village_info", "officials", "fiscal_years"})

# Column holding the parent id for delete-by-parent-ids.
PARENT_KEYS = {
    "activities": "sub_field_id",
    "expense_items": "expense_id",
    "attachments": "entity_id",
}

YEAR_SCOPED_COLLECTIONS = tuple(name for name in COLLECTIONS if name not in GLOBAL_COLLECTIONS)


class RecordStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _model(self, collection: str) -> Type[Any]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection {collection!r}") from None

    def _commit(self, action: str, collection: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning("Store %s on %s failed: %s", action, collection, exc)
            raise PersistenceError(f"Gagal menyimpan data ({collection}): {exc}") from exc

    def list_by_year(self, collection: str, year: int) -> List[Any]:
        model = self._model(collection)
        if collection in GLOBAL_COLLECTIONS:
            raise ValueError(f"{collection} is not scoped by fiscal year")
        try:
            return self.session.query(model).filter(model.fiscal_year == year).order_by(model.id.asc()).all()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Gagal memuat data ({collection}): {exc}") from exc

    def list_all(self, collection: str) -> List[Any]:
        model = self._model(collection)
        try:
            return self.session.query(model).order_by(model.id.asc()).all()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Gagal memuat data ({collection}): {exc}") from exc

    def get(self, collection: str, record_id: int) -> Any:
        record = self.session.get(self._model(collection), record_id)
        if record is None:
            raise NotFoundError(f"Data {collection} #{record_id} tidak ditemukan")
        return record

    def insert(self, collection: str, values: Mapping[str, Any]) -> Any:
        record = self._model(collection)(**dict(values))
        self.session.add(record)
        self._commit("insert", collection)
        self.session.refresh(record)
        return record

    def insert_many(self, collection: str, rows: Iterable[Mapping[str, Any]]) -> List[Any]:
        model = self._model(collection)
        records = [model(**dict(row)) for row in rows]
        if not records:
            return []
        self.session.add_all(records)
        self._commit("insert", collection)
        for record in records:
            self.session.refresh(record)
        return records

    def replace_all(self, collection: str, rows: Iterable[Mapping[str, Any]]) -> List[Any]:
        """Swap every row of a global collection for ``rows`` in one transaction."""
        if collection not in GLOBAL_COLLECTIONS:
            raise ValueError(f"{collection} is scoped by fiscal year")
        model = self._model(collection)
        records = [model(**dict(row)) for row in rows]
        try:
            self.session.query(model).delete(synchronize_session=False)
            self.session.add_all(records)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Gagal mengganti data ({collection}): {exc}") from exc
        self._commit("replace", collection)
        for record in records:
            self.session.refresh(record)
        return records

    def update_by_id(self, collection: str, record_id: int, values: Mapping[str, Any]) -> Any:
        record = self.get(collection, record_id)
        for key, value in values.items():
            setattr(record, key, value)
        self.session.add(record)
        self._commit("update", collection)
        self.session.refresh(record)
        return record

    def delete_by_id(self, collection: str, record_id: int) -> None:
        record = self.get(collection, record_id)
        self.session.delete(record)
        self._commit("delete", collection)

    def delete_by_parent_ids(
        self,
        collection: str,
        parent_ids: Iterable[int],
        parent_key: Optional[str] = None,
        **filters: Any,
    ) -> int:
        """Delete rows whose ``parent_key`` column (default: the collection's parent) is in ``parent_ids``."""
        ids = list(parent_ids)
        if not ids:
            return 0
        model = self._model(collection)
        key = parent_key or PARENT_KEYS.get(collection)
        if key is None or not hasattr(model, key):
            raise ValueError(f"{collection} has no parent key {key!r}")
        parent_column = getattr(model, key)
        query = self.session.query(model).filter(parent_column.in_(ids))
        for key, value in filters.items():
            query = query.filter(getattr(model, key) == value)
        try:
            removed = query.delete(synchronize_session=False)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Gagal menghapus data ({collection}): {exc}") from exc
        self._commit("delete", collection)
        return removed

    def delete_by_year(self, collection: str, year: int) -> int:
        model = self._model(collection)
        try:
            removed = self.session.query(model).filter(model.fiscal_year == year).delete(synchronize_session=False)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Gagal menghapus data ({collection}): {exc}") from exc
        self._commit("delete", collection)
        return removed

    def distinct_years(self, collections: Optional[Iterable[str]] = None) -> Set[int]:
        years: Set[int] = {row.year for row in self.list_all("fiscal_years")}
        for collection in collections or ("budget_sub_fields", "activities", "incomes", "expenses"):
            model = self._model(collection)
            years.update(self.session.scalars(select(model.fiscal_year).distinct()).all())
        return years

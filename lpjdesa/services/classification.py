"""Budget classification tree: fields (bidang) and their sub-fields for one year.

The field catalog is fixed per deployment. Sub-fields are user-defined per
fiscal year and are held here as immutable lists keyed by field name; every
change produces a new :class:`ClassificationTree` so readers holding the old
one never observe a half-applied edit.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..constants import DEFAULT_BUDGET_FIELDS
from ..core.errors import DomainValidationError, NotFoundError
from ..schemas.schemas import ActivityRead, SubFieldRead
from ..utils.account_codes import sort_by_account_code


@dataclass(frozen=True)
class BudgetField:
    name: str
    code: str
    icon: str = "Folder"
    color: str = "#64748b"
    description: str = ""
    default_sub_fields: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ActivityContext:
    field: Optional[BudgetField]
    sub_field: Optional[SubFieldRead]
    account_code: str

    @property
    def field_name(self) -> Optional[str]:
        return self.field.name if self.field else None

    @property
    def sub_field_name(self) -> Optional[str]:
        return self.sub_field.name if self.sub_field else None


def build_catalog(entries: Iterable[dict]) -> Tuple[BudgetField, ...]:
    return tuple(
        BudgetField(
            name=entry["name"],
            code=entry["code"],
            icon=entry.get("icon", "Folder"),
            color=entry.get("color", "#64748b"),
            description=entry.get("description", ""),
            default_sub_fields=tuple(entry.get("sub_fields", ())),
        )
        for entry in entries
    )


DEFAULT_CATALOG = build_catalog(DEFAULT_BUDGET_FIELDS)


def _normalized(name: str) -> str:
    return (name or "").strip().casefold()


class ClassificationTree:
    def __init__(self, catalog: Sequence[BudgetField], sub_fields: Iterable[SubFieldRead] = ()) -> None:
        self.catalog: Tuple[BudgetField, ...] = tuple(catalog)
        self._fields: Dict[str, BudgetField] = {field.name: field for field in self.catalog}
        grouped: Dict[str, List[SubFieldRead]] = {field.name: [] for field in self.catalog}
        for sub_field in sub_fields:
            # Rows for fields no longer in the catalog are kept addressable by id.
            grouped.setdefault(sub_field.field_name, []).append(sub_field)
        self._sub_fields: Dict[str, Tuple[SubFieldRead, ...]] = {
            name: tuple(sort_by_account_code(rows)) for name, rows in grouped.items()
        }
        self._by_id: Dict[int, SubFieldRead] = {
            row.id: row for rows in self._sub_fields.values() for row in rows
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClassificationTree):
            return NotImplemented
        return self.catalog == other.catalog and self._sub_fields == other._sub_fields

    def __repr__(self) -> str:
        counts = ", ".join(f"{name}={len(rows)}" for name, rows in self._sub_fields.items())
        return f"ClassificationTree({counts})"

    @property
    def fields(self) -> Tuple[BudgetField, ...]:
        return self.catalog

    def field(self, field_name: str) -> BudgetField:
        try:
            return self._fields[field_name]
        except KeyError:
            raise NotFoundError(f"Bidang '{field_name}' tidak dikenal") from None

    def list_sub_fields(self, field_name: str) -> List[SubFieldRead]:
        self.field(field_name)
        return list(self._sub_fields.get(field_name, ()))

    def all_sub_fields(self) -> List[SubFieldRead]:
        rows: List[SubFieldRead] = []
        for rows_for_field in self._sub_fields.values():
            rows.extend(rows_for_field)
        return rows

    def get_sub_field(self, sub_field_id: int) -> SubFieldRead:
        try:
            return self._by_id[sub_field_id]
        except KeyError:
            raise NotFoundError(f"Sub bidang #{sub_field_id} tidak ditemukan") from None

    def has_sub_field(self, sub_field_id: int) -> bool:
        return sub_field_id in self._by_id

    def find_sub_field(self, field_name: str, name: str) -> Optional[SubFieldRead]:
        wanted = _normalized(name)
        for row in self._sub_fields.get(field_name, ()):
            if _normalized(row.name) == wanted:
                return row
        return None

    def ensure_unique_name(self, field_name: str, name: str, exclude_id: Optional[int] = None) -> None:
        if not (name or "").strip():
            raise DomainValidationError("Nama sub bidang wajib diisi", field="name")
        existing = self.find_sub_field(field_name, name)
        if existing is not None and existing.id != exclude_id:
            raise DomainValidationError(
                f"Sub bidang '{name.strip()}' sudah ada di bidang {field_name}", field="name"
            )

    def suggest_code(self, field_name: str) -> str:
        field = self.field(field_name)
        return f"{field.code}.{len(self._sub_fields.get(field_name, ())) + 1}"

    def field_of(self, activity: ActivityRead) -> Optional[BudgetField]:
        sub_field = self._by_id.get(activity.sub_field_id)
        if sub_field is None:
            return None
        return self._fields.get(sub_field.field_name)

    def activity_context(self, activity: ActivityRead) -> ActivityContext:
        sub_field = self._by_id.get(activity.sub_field_id)
        field = self._fields.get(sub_field.field_name) if sub_field else None
        code = activity.account_code or (sub_field.account_code if sub_field else None) or ""
        return ActivityContext(field=field, sub_field=sub_field, account_code=code)

    def with_sub_field(self, sub_field: SubFieldRead) -> "ClassificationTree":
        """Return a tree where ``sub_field`` is added, or replaces the row with its id."""
        rows = [row for row in self.all_sub_fields() if row.id != sub_field.id]
        rows.append(sub_field)
        return ClassificationTree(self.catalog, rows)

    def without_sub_field(self, sub_field_id: int) -> "ClassificationTree":
        rows = [row for row in self.all_sub_fields() if row.id != sub_field_id]
        return ClassificationTree(self.catalog, rows)

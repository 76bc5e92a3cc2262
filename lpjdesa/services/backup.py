"""SQLite file backups and per-year JSON snapshots."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from ..config import settings
from ..constants import ENTITY_ACTIVITY, ENTITY_EXPENSE, SNAPSHOT_VERSION
from ..core.errors import DomainValidationError
from ..schemas.schemas import (
    ActivityRead,
    AttachmentRead,
    ExpenseItemRead,
    ExpenseRead,
    FinancingRead,
    IncomeRead,
    NarrativeRead,
    OfficialPayload,
    RestoreSummary,
    SubFieldRead,
    VillageProfileBase,
    VillageProfileUpdate,
)
from .audit import audit_log
from .fiscal_years import Workspace
from .ledger import get_village_profile, save_village_profile
from .record_store import RecordStore

logger = logging.getLogger(__name__)

SNAPSHOT_SECTIONS: Dict[str, Tuple[str, Type[BaseModel]]] = {
    "sub_fields": ("budget_sub_fields", SubFieldRead),
    "activities": ("activities", ActivityRead),
    "incomes": ("incomes", IncomeRead),
    "expenses": ("expenses", ExpenseRead),
    "expense_items": ("expense_items", ExpenseItemRead),
    "financings": ("financings", FinancingRead),
    "attachments": ("attachments", AttachmentRead),
}

# Children before parents.
RESTORE_DELETE_ORDER = (
    "expense_items",
    "attachments",
    "activities",
    "budget_sub_fields",
    "incomes",
    "expenses",
    "financings",
    "narrative_content",
)


def _resolve_sqlite_path(database_url: str) -> Optional[Path]:
    if not database_url.startswith("sqlite:///"):
        return None
    return Path(database_url.replace("sqlite:///", "", 1))


def perform_sqlite_backup(destination_dir: Optional[Path] = None) -> Optional[Path]:
    """Create a timestamped backup of the configured SQLite database."""
    db_path = _resolve_sqlite_path(settings.database_url)
    if db_path is None:
        logger.info("Database URL is not SQLite; skipping backup.")
        return None

    if not db_path.exists():
        logger.warning("SQLite database file %s does not exist; skipping backup.", db_path)
        return None

    target_dir = Path(destination_dir or settings.backup_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    backup_path = target_dir / f"{db_path.stem}_{timestamp}.sqlite3"

    logger.info("Backing up SQLite database %s -> %s", db_path, backup_path)

    source = sqlite3.connect(str(db_path))
    dest = sqlite3.connect(str(backup_path))

    try:
        source.backup(dest)
    finally:
        dest.close()
        source.close()

    return backup_path


# --- Year snapshots ---


def export_year_snapshot(records: RecordStore, year: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Every year-scoped record of ``year`` plus the village profile, as JSON-ready data."""
    profile = get_village_profile(records)
    snapshot: Dict[str, Any] = {
        "_meta": {
            "version": SNAPSHOT_VERSION,
            "app": settings.app_name,
            "fiscal_year": year,
            "village_name": profile.name,
            "exported_at": (now or datetime.now(timezone.utc)).isoformat(),
        },
        "village_info": profile.model_dump(mode="json", exclude={"officials"}),
        "officials": [official.model_dump(mode="json") for official in profile.officials],
    }
    for key, (collection, schema) in SNAPSHOT_SECTIONS.items():
        snapshot[key] = [
            schema.model_validate(row).model_dump(mode="json") for row in records.list_by_year(collection, year)
        ]
    narratives = records.list_by_year("narrative_content", year)
    snapshot["narrative"] = NarrativeRead.model_validate(narratives[0]).model_dump(mode="json") if narratives else None
    snapshot["_meta"]["total_records"] = sum(len(snapshot[key]) for key in SNAPSHOT_SECTIONS)
    logger.info("Exported snapshot of fiscal year %s (%d records)", year, snapshot["_meta"]["total_records"])
    return snapshot


def validate_snapshot(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DomainValidationError("Format file backup tidak valid", field="snapshot")
    meta = data.get("_meta")
    if not isinstance(meta, dict) or not meta.get("version"):
        raise DomainValidationError("File backup tidak memiliki informasi versi", field="_meta")
    if not any(isinstance(data.get(key), list) for key in ("incomes", "expenses", "activities")):
        raise DomainValidationError("File backup tidak berisi data keuangan", field="snapshot")
    return data


def _target_year(data: Mapping[str, Any], year: Optional[int]) -> int:
    target = year if year is not None else data["_meta"].get("fiscal_year")
    try:
        return int(target)
    except (TypeError, ValueError):
        raise DomainValidationError("Tahun anggaran pada file backup tidak valid", field="fiscal_year") from None


def _rows(data: Mapping[str, Any], key: str, schema: Type[BaseModel], year: int) -> List[BaseModel]:
    rows = []
    for position, raw in enumerate(data.get(key) or [], start=1):
        if not isinstance(raw, dict):
            raise DomainValidationError(f"Baris {position} pada bagian {key} tidak valid", field=key)
        values = {**raw, "fiscal_year": year}
        values.setdefault("id", 0)
        try:
            rows.append(schema.model_validate(values))
        except ValidationError as exc:
            raise DomainValidationError(f"Baris {position} pada bagian {key} tidak valid: {exc}", field=key) from exc
    return rows


def _values(row: BaseModel, **overrides: Any) -> Dict[str, Any]:
    values = row.model_dump(exclude={"id"}, exclude_none=True)
    values.update(overrides)
    return values


def _insert_remapped(
    records: RecordStore, collection: str, rows: List[BaseModel], values: List[Dict[str, Any]]
) -> Dict[int, int]:
    inserted = records.insert_many(collection, values)
    return {row.id: record.id for row, record in zip(rows, inserted)}


def _restore_profile(records: RecordStore, data: Mapping[str, Any]) -> None:
    village_info = data.get("village_info")
    if not isinstance(village_info, dict) or not village_info.get("name"):
        return
    fields = {key: village_info.get(key) for key in VillageProfileBase.model_fields}
    officials = [
        OfficialPayload(role=official["role"], name=official.get("name"))
        for official in data.get("officials") or []
        if isinstance(official, dict) and official.get("role")
    ]
    save_village_profile(records, VillageProfileUpdate(**fields, officials=officials))


def restore_year_snapshot(
    records: RecordStore,
    data: Any,
    year: Optional[int] = None,
    workspace: Optional[Workspace] = None,
    backup_first: Optional[bool] = None,
) -> RestoreSummary:
    """Replace one fiscal year with the contents of a snapshot.

    Rows get fresh ids; sub-field, activity and expense references are remapped
    to the new ids. Rows whose parent is missing from the snapshot are skipped.
    """
    data = validate_snapshot(data)
    target = _target_year(data, year)
    parsed = {key: _rows(data, key, schema, target) for key, (_, schema) in SNAPSHOT_SECTIONS.items()}
    narrative = data.get("narrative")
    narrative_row = _rows({"narrative": [narrative]}, "narrative", NarrativeRead, target) if narrative else []

    backup_path = None
    if settings.backup_before_restore if backup_first is None else backup_first:
        backup_path = perform_sqlite_backup()

    def restore() -> Dict[str, int]:
        for collection in RESTORE_DELETE_ORDER:
            records.delete_by_year(collection, target)

        inserted: Dict[str, int] = {}
        sub_fields = parsed["sub_fields"]
        sub_field_ids = _insert_remapped(records, "budget_sub_fields", sub_fields, [_values(row) for row in sub_fields])

        activities = [row for row in parsed["activities"] if row.sub_field_id in sub_field_ids]
        activity_ids = _insert_remapped(
            records,
            "activities",
            activities,
            [_values(row, sub_field_id=sub_field_ids[row.sub_field_id]) for row in activities],
        )

        expenses = parsed["expenses"]
        expense_ids = _insert_remapped(records, "expenses", expenses, [_values(row) for row in expenses])

        items = [row for row in parsed["expense_items"] if row.expense_id in expense_ids]
        records.insert_many(
            "expense_items",
            [
                _values(row, expense_id=expense_ids[row.expense_id], activity_id=activity_ids.get(row.activity_id))
                for row in items
            ],
        )

        owners = {ENTITY_ACTIVITY: activity_ids, ENTITY_EXPENSE: expense_ids}
        attachments = [
            row for row in parsed["attachments"] if row.entity_id in owners.get(row.entity_type, {})
        ]
        records.insert_many(
            "attachments",
            [_values(row, entity_id=owners[row.entity_type][row.entity_id]) for row in attachments],
        )

        for key in ("incomes", "financings"):
            records.insert_many(SNAPSHOT_SECTIONS[key][0], [_values(row) for row in parsed[key]])
        records.insert_many("narrative_content", [_values(row) for row in narrative_row])

        inserted.update(
            sub_fields=len(sub_fields),
            activities=len(activities),
            incomes=len(parsed["incomes"]),
            expenses=len(expenses),
            expense_items=len(items),
            financings=len(parsed["financings"]),
            attachments=len(attachments),
            narrative=len(narrative_row),
        )
        return inserted

    if workspace is not None and workspace.loaded and workspace.year == target:
        with workspace.locks.for_year(target):
            inserted = restore()
    else:
        inserted = restore()

    if not any(row.year == target for row in records.list_all("fiscal_years")):
        records.insert("fiscal_years", {"year": target, "template_year": None})
    _restore_profile(records, data)

    skipped = sum(len(parsed[key]) for key in SNAPSHOT_SECTIONS) - sum(
        inserted[key] for key in SNAPSHOT_SECTIONS
    )
    if skipped:
        logger.warning("Skipped %d snapshot rows with missing parents for fiscal year %s", skipped, target)

    audit_log(
        records.session,
        action="snapshot.restore",
        fiscal_year=target,
        target_entity_type="FiscalYear",
        target_entity_id=str(target),
        after={"inserted": inserted, "source_year": data["_meta"].get("fiscal_year")},
    )
    if workspace is not None and workspace.loaded and workspace.year == target:
        workspace.refresh(records)
    logger.info("Restored fiscal year %s from snapshot: %s", target, inserted)
    return RestoreSummary(
        fiscal_year=target,
        inserted=inserted,
        backup_path=str(backup_path) if backup_path else None,
    )

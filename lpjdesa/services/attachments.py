"""Attachment records, their binaries, and the manifest handed to renderers."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..constants import ATTACHMENT_ENTITY_TYPES, ENTITY_ACTIVITY
from ..core.errors import DomainValidationError, NotFoundError, PersistenceError
from ..schemas.schemas import AttachmentCreate, AttachmentRead
from .fiscal_years import Workspace, YearScopedStore
from .record_store import RecordStore
from .storage import StorageService

logger = logging.getLogger(__name__)

Manifest = Dict[str, Dict[int, List["ManifestEntry"]]]


@dataclass(frozen=True)
class ManifestEntry:
    file_name: str
    url: Optional[str] = None
    caption: Optional[str] = None


def build_manifest(attachments: Iterable[AttachmentRead]) -> Manifest:
    manifest: Manifest = {}
    for attachment in attachments:
        per_entity = manifest.setdefault(attachment.entity_type, {})
        per_entity.setdefault(attachment.entity_id, []).append(
            ManifestEntry(
                file_name=attachment.file_name,
                url=attachment.file_url,
                caption=attachment.caption,
            )
        )
    return manifest


def _check_entity_type(entity_type: str) -> None:
    if entity_type not in ATTACHMENT_ENTITY_TYPES:
        raise DomainValidationError(f"Jenis lampiran '{entity_type}' tidak dikenal", field="entity_type")


def upload_attachment(
    records: RecordStore,
    storage: StorageService,
    fiscal_year: int,
    entity_type: str,
    entity_id: int,
    file_name: str,
    content: bytes,
    content_type: Optional[str] = None,
    caption: Optional[str] = None,
) -> AttachmentRead:
    _check_entity_type(entity_type)
    if not content:
        raise DomainValidationError("File lampiran kosong", field="file")
    stored = storage.put(
        storage.attachment_key(fiscal_year, entity_type, entity_id, file_name),
        content,
        content_type,
    )
    try:
        row = records.insert(
            "attachments",
            {
                "fiscal_year": fiscal_year,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "file_name": file_name,
                "file_url": stored.url,
                "stored_path": stored.key,
                "file_size": stored.size,
                "content_type": stored.content_type,
                "caption": caption,
            },
        )
    except PersistenceError:
        storage.remove(stored.key)
        raise
    logger.info("Stored attachment %s for %s #%s", stored.key, entity_type, entity_id)
    return AttachmentRead.model_validate(row)


def register_external(records: RecordStore, fiscal_year: int, payload: AttachmentCreate) -> AttachmentRead:
    """Record an attachment whose binary already lives elsewhere (only its URL is kept)."""
    _check_entity_type(payload.entity_type)
    row = records.insert("attachments", {"fiscal_year": fiscal_year, **payload.model_dump()})
    return AttachmentRead.model_validate(row)


def purge_attachments(
    records: RecordStore,
    storage: StorageService,
    attachments: Iterable[AttachmentRead],
) -> Tuple[int, List[str]]:
    """Remove binaries then metadata for ``attachments``.

    Failures are logged and reported back, never raised: a dangling binary or
    record must not block deleting the entity it belonged to.
    """
    attachments = list(attachments)
    failures: List[str] = []
    for attachment in attachments:
        target = attachment.stored_path or storage.key_from_url(attachment.file_url)
        if not target:
            continue
        try:
            storage.remove(target)
        except Exception as exc:
            logger.warning("Could not delete attachment binary %s", target, exc_info=True)
            failures.append(f"{attachment.file_name}: {exc}")

    removed = 0
    by_type: Dict[str, List[int]] = {}
    for attachment in attachments:
        by_type.setdefault(attachment.entity_type, []).append(attachment.entity_id)
    for entity_type, entity_ids in by_type.items():
        try:
            removed += records.delete_by_parent_ids("attachments", set(entity_ids), entity_type=entity_type)
        except PersistenceError as exc:
            logger.warning("Could not delete %s attachment records %s", entity_type, entity_ids, exc_info=True)
            failures.append(str(exc))
    return removed, failures


def delete_attachment(records: RecordStore, storage: StorageService, attachment: AttachmentRead) -> List[str]:
    """Delete one attachment; the binary is best-effort, the record is not."""
    failures: List[str] = []
    target = attachment.stored_path or storage.key_from_url(attachment.file_url)
    if target:
        try:
            storage.remove(target)
        except Exception as exc:
            logger.warning("Could not delete attachment binary %s", target, exc_info=True)
            failures.append(f"{attachment.file_name}: {exc}")
    records.delete_by_id("attachments", attachment.id)
    return failures


# --- Operations on the active year ---


def _check_owner(store: YearScopedStore, entity_type: str, entity_id: int) -> None:
    _check_entity_type(entity_type)
    if entity_type == ENTITY_ACTIVITY:
        store.activity(entity_id)
    else:
        store.expense(entity_id)


def attach_file(
    workspace: Workspace,
    records: RecordStore,
    storage: StorageService,
    entity_type: str,
    entity_id: int,
    file_name: str,
    content: bytes,
    content_type: Optional[str] = None,
    caption: Optional[str] = None,
) -> AttachmentRead:
    with workspace.mutation() as store:
        _check_owner(store, entity_type, entity_id)
        attachment = upload_attachment(
            records, storage, store.year, entity_type, entity_id, file_name, content, content_type, caption
        )
        workspace.commit(store.replace(attachments=store.attachments + (attachment,)))
    return attachment


def attach_link(workspace: Workspace, records: RecordStore, payload: AttachmentCreate) -> AttachmentRead:
    with workspace.mutation() as store:
        _check_owner(store, payload.entity_type, payload.entity_id)
        attachment = register_external(records, store.year, payload)
        workspace.commit(store.replace(attachments=store.attachments + (attachment,)))
    return attachment


def detach(workspace: Workspace, records: RecordStore, storage: StorageService, attachment_id: int) -> List[str]:
    with workspace.mutation() as store:
        attachment = next((row for row in store.attachments if row.id == attachment_id), None)
        if attachment is None:
            raise NotFoundError(f"Lampiran #{attachment_id} tidak ditemukan")
        failures = delete_attachment(records, storage, attachment)
        workspace.commit(
            store.replace(attachments=tuple(row for row in store.attachments if row.id != attachment_id))
        )
    return failures

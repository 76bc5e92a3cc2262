"""Attachment binaries on local disk or in an S3 bucket.

Files are addressed by a storage key such as
``attachments/2026/activity/12/1a2b3c4d_foto.jpg``. The key is what gets
persisted on the attachment row; the public URL is derived from it.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from ..config import settings
from ..core.errors import NotFoundError
from ..utils.formatting import safe_file_stem

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageBackend(str, Enum):
    LOCAL = "local"
    S3 = "s3"


@dataclass
class StoredFile:
    key: str
    url: str
    size: int
    content_type: str


@dataclass
class RetrievedFile:
    content: bytes
    content_type: str


def _guess_type(name: str, declared: Optional[str] = None) -> str:
    return declared or mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE


class StorageService:
    """Stores, serves and removes attachment binaries for one backend."""

    def __init__(
        self,
        backend: Optional[str] = None,
        upload_root: Optional[Path] = None,
        public_prefix: Optional[str] = None,
    ) -> None:
        name = (backend or settings.file_storage_backend or "local").strip().upper()
        self.backend = StorageBackend[name] if name in StorageBackend.__members__ else StorageBackend.LOCAL
        self.upload_root = Path(upload_root) if upload_root else settings.uploads_root_path
        self.public_prefix = (public_prefix or settings.uploads_public_prefix).strip("/")
        self._bucket = settings.s3_bucket
        self._s3 = None
        if self.backend == StorageBackend.S3:
            self._s3 = self._s3_client()
        else:
            self.upload_root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _s3_client():
        try:
            import boto3
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("Install the 's3' extra (boto3) to store attachments in S3.") from exc
        if not settings.s3_bucket:
            raise RuntimeError("LPJ_S3_BUCKET must be set when LPJ_FILE_STORAGE_BACKEND is 's3'.")
        options = {
            "region_name": settings.s3_region,
            "aws_access_key_id": settings.s3_access_key,
            "aws_secret_access_key": settings.s3_secret_key,
            "endpoint_url": settings.s3_endpoint_url,
        }
        return boto3.client("s3", **{key: value for key, value in options.items() if value})

    # --- Keys and URLs ---

    def attachment_key(self, fiscal_year: int, entity_type: str, entity_id: int, file_name: str) -> str:
        suffix = Path(file_name).suffix.lower()
        stem = safe_file_stem(Path(file_name).stem, fallback="lampiran", max_length=40)
        return f"attachments/{fiscal_year}/{entity_type}/{entity_id}/{uuid.uuid4().hex[:8]}_{stem}{suffix}"

    def url_for(self, key: str) -> str:
        if self.public_prefix.startswith("http"):
            return f"{self.public_prefix}/{key}"
        return f"{settings.api_base_url.rstrip('/')}/{self.public_prefix}/{key}"

    def key_from_url(self, url: Optional[str]) -> str:
        """The storage key behind one of our own URLs; empty for external links."""
        if not url:
            return ""
        path = unquote(urlparse(url).path).lstrip("/")
        prefix_path = urlparse(self.public_prefix).path.strip("/") if "://" in self.public_prefix else self.public_prefix
        marker = prefix_path + "/"
        if not path.startswith(marker):
            return ""
        return path[len(marker):]

    def _local(self, key: str) -> Path:
        target = (self.upload_root / key.lstrip("/")).resolve()
        if self.upload_root.resolve() not in target.parents:
            raise NotFoundError("File tidak ditemukan")
        return target

    # --- Operations ---

    def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> StoredFile:
        media_type = _guess_type(key, content_type)
        if self._s3 is not None:
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=content, ContentType=media_type)
        else:
            target = self._local(key)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        logger.debug("Stored %s (%d bytes) on %s", key, len(content), self.backend.value)
        return StoredFile(key=key, url=self.url_for(key), size=len(content), content_type=media_type)

    def fetch(self, key: str) -> RetrievedFile:
        if self._s3 is not None:
            try:
                obj = self._s3.get_object(Bucket=self._bucket, Key=key)
            except self._s3.exceptions.NoSuchKey:  # type: ignore[attr-defined]
                raise NotFoundError("File tidak ditemukan") from None
            return RetrievedFile(content=obj["Body"].read(), content_type=_guess_type(key, obj.get("ContentType")))
        target = self._local(key)
        if not target.is_file():
            raise NotFoundError("File tidak ditemukan")
        return RetrievedFile(content=target.read_bytes(), content_type=_guess_type(target.name))

    def remove(self, key: str) -> None:
        """Delete a stored file; a key that is already gone is not an error."""
        if not key:
            return
        if self._s3 is not None:
            self._s3.delete_object(Bucket=self._bucket, Key=key)
            return
        self._local(key).unlink(missing_ok=True)


storage_service = StorageService()

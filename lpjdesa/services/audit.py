import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import PersistenceError
from ..models.models import AuditLog

logger = logging.getLogger(__name__)


def _serialize(data: Any) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, BaseModel):
        return data.model_dump_json()
    return json.dumps(data, default=str, sort_keys=True)


def audit_log(
    db_session: Session,
    action: str,
    fiscal_year: Optional[int] = None,
    target_entity_type: Optional[str] = None,
    target_entity_id: Optional[str] = None,
    before: Any = None,
    after: Any = None,
) -> AuditLog:
    entry = AuditLog(
        timestamp=datetime.now(timezone.utc),
        action=action,
        fiscal_year=fiscal_year,
        target_entity_type=target_entity_type,
        target_entity_id=target_entity_id,
        before=_serialize(before),
        after=_serialize(after),
    )
    db_session.add(entry)
    try:
        db_session.commit()
    except SQLAlchemyError as exc:
        db_session.rollback()
        raise PersistenceError(f"Gagal mencatat audit ({action}): {exc}") from exc
    logger.info("audit %s %s:%s", action, target_entity_type, target_entity_id)
    return entry

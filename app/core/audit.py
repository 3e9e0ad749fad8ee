import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi.encoders import jsonable_encoder
from loguru import logger
from sqlmodel import Session
from app.db.schema import SystemAuditLog, AuditAction

from app.db import core


def _perform_audit_log(
    user_id: Optional[uuid.UUID],
    entity_type: str,
    entity_id: uuid.UUID,
    action: AuditAction,
    changes: Dict[str, Any],
    ip_address: Optional[str] = None
):
    """
    Background worker.
    Creates its OWN session using the global engine, the request session
    is already closed when background tasks run.
    """
    try:
        with Session(core.engine) as session:
            log_entry = SystemAuditLog(
                actor_id=user_id,
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                changes=jsonable_encoder(changes),
                ip_address=ip_address,
                timestamp=datetime.utcnow()
            )
            session.add(log_entry)
            session.commit()

    except Exception:
        # Audit failures must never break the request that triggered them
        logger.exception(
            f"Audit log failed for {entity_type} {entity_id} ({action.value})")

"""
Audit trail helper
"""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
import structlog

from convertia.models.audit import AuditLog
from convertia.models.user import User

logger = structlog.get_logger()


def record_action(
    db: Session,
    user: Optional[User],
    action: str,
    resource_type: str,
    resource_id: Optional[int],
    details: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Add an audit row to the current transaction (caller commits)"""
    entry = AuditLog(
        user_id=user.id if user else None,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details or {},
    )
    db.add(entry)
    logger.info(
        "audit_recorded",
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        user_id=entry.user_id,
    )
    return entry

"""Audit trail for version-control writes.

Six operations are audited: creating, reverting to, merging and deleting
versions, and creating and deleting branches. Each entry names the wireframe
it touched so a wireframe's whole write history can be read back in one query.

Writes never raise: a failed audit write is logged and the operation it
describes still stands.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..models import AuditLog, Version

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    CREATE_VERSION = "create_version"
    DELETE_VERSION = "delete_version"
    REVERT = "revert"
    MERGE = "merge"
    CREATE_BRANCH = "create_branch"
    DELETE_BRANCH = "delete_branch"


class AuditResource(str, Enum):
    VERSION = "version"
    BRANCH = "branch"


def log(
    db: Session,
    user_id: Optional[str],
    action: AuditAction,
    resource_type: AuditResource,
    resource_id: str,
    wireframe_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Record one write in its own commit. Never raises."""
    try:
        db.add(AuditLog(
            user_id=user_id,
            action=action.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
            wireframe_id=wireframe_id,
            details=json.dumps(details, default=str) if details else None,
        ))
        db.commit()
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning(
            "Failed to write audit entry: %s", e,
            extra={"wireframe_id": wireframe_id, "audit_action": action.value},
        )
        db.rollback()


def log_version(
    db: Session,
    user_id: Optional[str],
    action: AuditAction,
    version: Version,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Record a write whose result is ``version``, tagged with its branch and number."""
    log(
        db,
        user_id=user_id,
        action=action,
        resource_type=AuditResource.VERSION,
        resource_id=version.id,
        wireframe_id=version.wireframe_id,
        details={
            "branch_name": version.branch_name,
            "version_number": version.version_number,
            **(details or {}),
        },
    )


def get_by_resource(db: Session, resource_type: AuditResource, resource_id: str) -> list[AuditLog]:
    """Entries for one version or branch, newest first."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.resource_type == resource_type.value, AuditLog.resource_id == resource_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .all()
    )


def get_by_wireframe(db: Session, wireframe_id: str, limit: int = 100) -> list[AuditLog]:
    """Every audited write on a wireframe, newest first."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.wireframe_id == wireframe_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def purge_old_entries(db: Session, days: int) -> int:
    """Delete entries older than ``days``. Returns the number removed.

    ``days <= 0`` keeps everything. Never raises.
    """
    if days <= 0:
        return 0

    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    try:
        count = db.query(AuditLog).filter(AuditLog.created_at < cutoff).delete()
        db.commit()
        return count
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning("Failed to purge audit log: %s", e)
        db.rollback()
        return 0

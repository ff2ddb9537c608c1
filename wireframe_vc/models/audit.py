"""Audit log model."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func
from ..database import Base


class AuditLog(Base):
    """Immutable record of state-changing operations.

    Written by the service layer, never modified; only purged by retention.
    Fields:
        action        create_version, delete_version, revert, merge,
                      create_branch, delete_branch
        resource_type version, branch
        resource_id   ID of the affected resource
        wireframe_id  wireframe the write belongs to
        details       JSON string with additional context
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), nullable=True)
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    wireframe_id = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

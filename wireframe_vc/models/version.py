"""Version model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from ..database import Base


def _new_version_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Version(Base):
    """Immutable wireframe snapshots.

    Rows are never updated after insert except for ``is_current`` and a
    ``parent_version_id`` nulled out when the parent is deleted.
    """

    __tablename__ = "wireframe_versions"
    __table_args__ = (
        UniqueConstraint(
            "wireframe_id", "branch_name", "version_number",
            name="uq_wireframe_versions_branch_number",
        ),
        Index("ix_wireframe_versions_current", "wireframe_id", "branch_name", "is_current"),
        Index("ix_wireframe_versions_created_at", "created_at"),
    )

    # Primary key
    id = Column(String(36), primary_key=True, default=_new_version_id)

    # Position
    wireframe_id = Column(
        String(100), ForeignKey("wireframes.id", ondelete="CASCADE"), nullable=False
    )
    branch_name = Column(String(100), nullable=False, default="main")
    version_number = Column(Integer, nullable=False)
    parent_version_id = Column(
        String(36), ForeignKey("wireframe_versions.id", ondelete="SET NULL"), nullable=True
    )

    # Content
    data = Column(JSON, nullable=False)
    change_description = Column(Text, nullable=False, default="")

    # Author info
    created_by = Column(String(50), nullable=True)

    # Python-side default keeps sub-second ordering on SQLite.
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Head flag, at most one per (wireframe_id, branch_name)
    is_current = Column(Boolean, nullable=False, default=False)

    # Relationship
    wireframe = relationship("Wireframe", back_populates="versions")

"""Branch model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


class Branch(Base):
    """Named lines of development per wireframe.

    ``revision`` is bumped on every head move and guards the
    compare-and-swap in BranchRepository.advance_head.
    """

    __tablename__ = "wireframe_branches"
    __table_args__ = (
        UniqueConstraint("wireframe_id", "name", name="uq_wireframe_branches_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    wireframe_id = Column(
        String(100), ForeignKey("wireframes.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    created_by = Column(String(50), nullable=True)

    head_version_id = Column(
        String(36), ForeignKey("wireframe_versions.id", ondelete="SET NULL"), nullable=True
    )
    base_version_id = Column(
        String(36), ForeignKey("wireframe_versions.id", ondelete="SET NULL"), nullable=True
    )

    revision = Column(Integer, nullable=False, default=0)

    # Last merge of this branch
    merged_into = Column(String(100), nullable=True)
    merged_at = Column(DateTime(timezone=True), nullable=True)

    wireframe = relationship("Wireframe", back_populates="branches")

"""Wireframe model."""

from sqlalchemy import Column, Index, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Wireframe(Base):
    """Wireframe documents table.

    Holds a denormalised copy of the latest snapshot on ``main`` so the
    editor can open a document without walking its history.
    """

    __tablename__ = "wireframes"
    __table_args__ = (
        Index("ix_wireframes_updated_at", "updated_at"),
    )

    # Primary key (document id chosen by the editor)
    id = Column(String(100), primary_key=True)

    title = Column(String(255), nullable=False, default="")

    # Latest main snapshot
    data = Column(JSON, nullable=False, default=dict)
    # Plain id, no FK: the referenced version may be deleted independently.
    latest_version_id = Column(String(36), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    versions = relationship("Version", back_populates="wireframe", cascade="all, delete-orphan")
    branches = relationship("Branch", back_populates="wireframe", cascade="all, delete-orphan")

"""Branch schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class BranchCreate(BaseModel):
    """Schema for branching off an existing version."""
    branch_name: str
    description: Optional[str] = None


class BranchResponse(BaseModel):
    """Schema for branch response."""
    id: str
    wireframe_id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    head_version_id: Optional[str] = None
    base_version_id: Optional[str] = None
    version_count: int = 0
    merged_into: Optional[str] = None
    merged_at: Optional[datetime] = None

    class Config:
        from_attributes = True

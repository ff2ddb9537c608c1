"""Version schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional


class VersionCreate(BaseModel):
    """Schema for creating a version."""
    data: Dict[str, Any]
    change_description: str = "Updated wireframe"
    parent_version_id: Optional[str] = None
    branch_name: str = "main"
    # Compare-and-swap on the branch head; omit to skip the check.
    expected_head_version_id: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "data": {
                        "id": "wf-landing",
                        "title": "Landing page",
                        "sections": [{"type": "hero", "title": "Welcome"}],
                    },
                    "change_description": "Added hero section",
                    "branch_name": "main",
                }
            ]
        }
    }


class VersionResponse(BaseModel):
    """Schema for version response."""
    id: str
    wireframe_id: str
    branch_name: str
    version_number: int
    parent_version_id: Optional[str] = None
    data: Dict[str, Any]
    change_description: str
    created_at: datetime
    created_by: Optional[str] = None
    is_current: bool

    class Config:
        from_attributes = True


class VersionHistoryResponse(BaseModel):
    """All versions of a wireframe plus its main head and live branch names."""
    versions: List[VersionResponse]
    current: Optional[VersionResponse] = None
    branches: List[str]


class RevertRequest(BaseModel):
    """Schema for reverting to a version."""
    description: str = "Reverted to previous version"
    expected_head_version_id: Optional[str] = None


class MergeRequest(BaseModel):
    """Schema for merging a branch head into a target branch."""
    description: str = "Merged branch into main"
    target_branch: str = "main"
    expected_head_version_id: Optional[str] = None

"""Wireframe schemas."""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class WireframeData(BaseModel):
    """Shape check for a wireframe snapshot.

    Only the well-known top-level keys are typed; anything else the editor
    stores is carried through untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    title: Optional[str] = None
    sections: Optional[List[Dict[str, Any]]] = None
    color_scheme: Optional[Dict[str, Any]] = Field(default=None, alias="colorScheme")
    typography: Optional[Dict[str, Any]] = None


class WireframeResponse(BaseModel):
    """Schema for wireframe response."""
    id: str
    title: str
    data: Dict[str, Any]
    latest_version_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

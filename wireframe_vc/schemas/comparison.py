"""Version comparison schemas."""

from pydantic import BaseModel
from typing import Any, List, Literal


class ChangeResponse(BaseModel):
    """One leaf-level difference. ``values`` is ``[old, new]``."""
    type: Literal["added", "removed", "modified"]
    path: str
    values: List[Any]


class ComparisonResponse(BaseModel):
    """Result of comparing two versions."""
    from_version_id: str
    to_version_id: str
    changes: List[ChangeResponse]
    summary: str

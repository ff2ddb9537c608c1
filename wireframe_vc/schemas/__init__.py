"""Pydantic schemas for API validation."""

from .wireframe import WireframeData, WireframeResponse
from .version import (
    VersionCreate,
    VersionResponse,
    VersionHistoryResponse,
    RevertRequest,
    MergeRequest,
)
from .branch import BranchCreate, BranchResponse
from .comparison import ChangeResponse, ComparisonResponse

__all__ = [
    "WireframeData",
    "WireframeResponse",
    "VersionCreate",
    "VersionResponse",
    "VersionHistoryResponse",
    "RevertRequest",
    "MergeRequest",
    "BranchCreate",
    "BranchResponse",
    "ChangeResponse",
    "ComparisonResponse",
]

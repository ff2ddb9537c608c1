"""Version API endpoints."""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import AuthContext, require_editor, require_reader
from ..database import get_db
from ..schemas.branch import BranchCreate
from ..schemas.comparison import ComparisonResponse
from ..schemas.version import MergeRequest, RevertRequest, VersionResponse
from ..services import VersionControlService

router = APIRouter(prefix="/api/versions", tags=["versions"])


# Declared before /{version_id} so "compare" is not taken for an id.
@router.get("/compare", response_model=ComparisonResponse)
def compare_versions(
    from_version: str = Query(..., description="Version to diff from"),
    to_version: str = Query(..., description="Version to diff to"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """Structural diff between two versions with a one-line summary."""
    return VersionControlService(db).compare_versions(from_version, to_version)


@router.get("/{version_id}", response_model=VersionResponse)
def get_version(
    version_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """Get a specific version."""
    return VersionControlService(db).get_version(version_id)


@router.delete("/{version_id}", status_code=204)
def delete_version(
    version_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Delete a version. Siblings keep their numbers."""
    VersionControlService(db).delete_version(version_id, auth.user_id)
    return Response(status_code=204)


@router.get("/{version_id}/lineage", response_model=List[VersionResponse])
def get_lineage(
    version_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """Ancestors of a version, nearest first."""
    return VersionControlService(db).get_lineage(version_id)


@router.post("/{version_id}/revert", response_model=VersionResponse, status_code=201)
def revert_to_version(
    version_id: str,
    payload: Optional[RevertRequest] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Append a copy of this version to its branch."""
    payload = payload or RevertRequest()
    return VersionControlService(db).revert_to_version(
        version_id,
        auth.user_id,
        description=payload.description,
        expected_head_version_id=payload.expected_head_version_id,
    )


@router.post("/{version_id}/branches", response_model=VersionResponse, status_code=201)
def create_branch(
    version_id: str,
    payload: BranchCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Start a new branch at this version. Returns the branch's first version."""
    return VersionControlService(db).create_branch(
        version_id,
        payload.branch_name,
        auth.user_id,
        description=payload.description,
    )


@router.post("/{version_id}/merge", response_model=VersionResponse, status_code=201)
def merge_branch(
    version_id: str,
    payload: Optional[MergeRequest] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Overwrite the target branch (main by default) with this version's snapshot."""
    payload = payload or MergeRequest()
    return VersionControlService(db).merge_branch(
        version_id,
        auth.user_id,
        description=payload.description,
        target_branch=payload.target_branch,
        expected_head_version_id=payload.expected_head_version_id,
    )

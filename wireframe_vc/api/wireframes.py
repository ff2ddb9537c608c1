"""Wireframe API endpoints: snapshots in, history and branches out."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..core.auth import AuthContext, require_editor, require_reader
from ..database import get_db
from ..schemas.branch import BranchResponse
from ..schemas.version import VersionCreate, VersionHistoryResponse, VersionResponse
from ..schemas.wireframe import WireframeResponse
from ..services import VersionControlService

router = APIRouter(prefix="/api/wireframes", tags=["wireframes"])


@router.post("/{wireframe_id}/versions", response_model=VersionResponse, status_code=201)
def create_version(
    wireframe_id: str,
    payload: VersionCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Record a new snapshot on a branch (``main`` by default).

    Send ``expected_head_version_id`` to fail with 409 instead of writing on
    top of a head you have not seen.
    """
    service = VersionControlService(db)
    return service.create_version(
        wireframe_id,
        payload.data,
        change_description=payload.change_description,
        parent_version_id=payload.parent_version_id,
        branch_name=payload.branch_name,
        created_by=auth.user_id,
        expected_head_version_id=payload.expected_head_version_id,
    )


@router.get("/{wireframe_id}/versions", response_model=VersionHistoryResponse)
def get_version_history(
    wireframe_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """All versions newest first, the current main version, and branch names."""
    return VersionControlService(db).get_version_history(wireframe_id)


@router.get("/{wireframe_id}/branches", response_model=List[BranchResponse])
def list_branches(
    wireframe_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """Branches of a wireframe, main first."""
    return VersionControlService(db).get_branches(wireframe_id)


@router.get("/{wireframe_id}", response_model=WireframeResponse)
def get_wireframe(
    wireframe_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    """Latest main snapshot of a wireframe."""
    return VersionControlService(db).get_wireframe(wireframe_id)

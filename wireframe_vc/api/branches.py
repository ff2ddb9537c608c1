"""Branch API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_editor, require_reader
from ..database import get_db
from ..schemas.branch import BranchResponse
from ..services import VersionControlService

router = APIRouter(prefix="/api/branches", tags=["branches"])


@router.get("/{branch_id}", response_model=BranchResponse)
def get_branch(
    branch_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_reader),
):
    return VersionControlService(db).get_branch(branch_id)


@router.delete("/{branch_id}", status_code=204)
def delete_branch(
    branch_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_editor),
):
    """Delete a branch. Its versions stay reachable by id. ``main`` cannot be deleted."""
    VersionControlService(db).delete_branch(branch_id, auth.user_id)
    return Response(status_code=204)

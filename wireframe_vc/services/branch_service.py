"""Branch manager: named branch rows per wireframe."""

import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import CannotDeleteDefaultBranchError, DuplicateBranchError, ValidationError
from ..models import Branch
from ..repositories import BranchRepository, DEFAULT_BRANCH, VersionRepository, WireframeRepository
from ..schemas.branch import BranchResponse
from . import audit_service
from .audit_service import AuditAction, AuditResource

logger = logging.getLogger(__name__)

BRANCH_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._/-]+$")
MAX_BRANCH_NAME_LENGTH = 100


def validate_branch_name(name: str) -> str:
    """Return ``name`` if it is usable as a branch name, else raise ValidationError."""
    if not isinstance(name, str) or not name:
        raise ValidationError("Branch name cannot be empty", field="branch_name")
    if len(name) > MAX_BRANCH_NAME_LENGTH:
        raise ValidationError(
            f"Branch name must be at most {MAX_BRANCH_NAME_LENGTH} characters",
            field="branch_name",
        )
    if not BRANCH_NAME_PATTERN.match(name):
        raise ValidationError(
            "Branch name may only contain letters, digits, '.', '_', '/' and '-'",
            field="branch_name",
        )
    return name


class BranchService:
    """Create, list, fetch and delete branches.

    Deleting a branch removes only its row. Its versions stay addressable by
    id, and a branch re-created under the same name continues numbering
    after the highest surviving version.
    """

    def __init__(self, db: Session):
        self.db = db
        self.branch_repo = BranchRepository(db)
        self.version_repo = VersionRepository(db)
        self.wireframe_repo = WireframeRepository(db)

    def create_branch(
        self,
        wireframe_id: str,
        branch_name: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        base_version_id: Optional[str] = None,
        commit: bool = True,
    ) -> Branch:
        """Create an empty branch. No version is written."""
        branch_name = validate_branch_name(branch_name)

        if self.branch_repo.get_by_name(wireframe_id, branch_name) is not None:
            raise DuplicateBranchError(wireframe_id, branch_name)

        try:
            self.wireframe_repo.get_or_create(wireframe_id)
            branch = self.branch_repo.create(
                wireframe_id,
                branch_name,
                description=description,
                created_by=created_by,
                base_version_id=base_version_id,
            )
            if commit:
                self.db.commit()
        except IntegrityError as e:
            if commit:
                self.db.rollback()
            raise DuplicateBranchError(wireframe_id, branch_name) from e

        logger.info(
            "Branch created",
            extra={"wireframe_id": wireframe_id, "branch_name": branch_name, "branch_id": branch.id},
        )
        # Composed callers audit the whole operation once they commit.
        if commit:
            audit_service.log(
                self.db,
                user_id=created_by,
                action=AuditAction.CREATE_BRANCH,
                resource_type=AuditResource.BRANCH,
                resource_id=branch.id,
                wireframe_id=wireframe_id,
                details={"branch_name": branch_name},
            )
        return branch

    def describe(self, branch: Branch) -> BranchResponse:
        """Branch row plus the number of versions it holds."""
        response = BranchResponse.model_validate(branch)
        return response.model_copy(update={
            "version_count": self.version_repo.count_by_branch(branch.wireframe_id, branch.name),
        })

    def get_branches(self, wireframe_id: str) -> List[BranchResponse]:
        """Branches of a wireframe, main first. Empty for unknown wireframes."""
        return [self.describe(branch) for branch in self.branch_repo.get_by_wireframe(wireframe_id)]

    def get_branch(self, branch_id: str) -> BranchResponse:
        """Raises BranchNotFoundError."""
        return self.describe(self.branch_repo.get_by_id(branch_id))

    def delete_branch(self, branch_id: str, user_id: Optional[str]) -> None:
        """Remove a branch row and clear the head flag on its versions.

        Raises:
            BranchNotFoundError: no such branch.
            CannotDeleteDefaultBranchError: the branch is ``main``.
        """
        branch = self.branch_repo.get_by_id(branch_id)
        if branch.name == DEFAULT_BRANCH:
            raise CannotDeleteDefaultBranchError(DEFAULT_BRANCH)

        wireframe_id, branch_name = branch.wireframe_id, branch.name
        try:
            self.version_repo.clear_current(wireframe_id, branch_name)
            self.branch_repo.delete(branch)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Branch deleted",
            extra={"wireframe_id": wireframe_id, "branch_name": branch_name, "branch_id": branch_id},
        )
        audit_service.log(
            self.db,
            user_id=user_id,
            action=AuditAction.DELETE_BRANCH,
            resource_type=AuditResource.BRANCH,
            resource_id=branch_id,
            wireframe_id=wireframe_id,
            details={"branch_name": branch_name},
        )

"""Version control service: the single entry point the HTTP layer talks to.

Owns the operations that combine the version store and the branch manager
(revert, branch from a version, merge) and delegates the rest. Every write
is audited after it commits.

Merges are overwrites: the target branch gets a new version carrying the
source snapshot verbatim, with the source version as parent.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import SourceVersionNotFoundError
from ..models import Version, Wireframe
from ..repositories import DEFAULT_BRANCH
from ..schemas.branch import BranchResponse
from ..schemas.comparison import ComparisonResponse
from ..schemas.version import VersionHistoryResponse
from . import audit_service
from .audit_service import AuditAction
from .branch_service import BranchService
from .history_service import HistoryService
from .version_service import DEFAULT_CHANGE_DESCRIPTION, VersionService

logger = logging.getLogger(__name__)

DEFAULT_REVERT_DESCRIPTION = "Reverted to previous version"
DEFAULT_MERGE_DESCRIPTION = "Merged branch into main"


class VersionControlService:
    """Facade over versions, branches and history for one database session."""

    def __init__(self, db: Session):
        self.db = db
        self.versions = VersionService(db)
        self.branches = BranchService(db)
        self.history = HistoryService(db)

    # -- versions ---------------------------------------------------------

    def create_version(
        self,
        wireframe_id: str,
        data: Dict[str, Any],
        change_description: Optional[str] = DEFAULT_CHANGE_DESCRIPTION,
        parent_version_id: Optional[str] = None,
        branch_name: str = DEFAULT_BRANCH,
        created_by: Optional[str] = None,
        expected_head_version_id: Optional[str] = None,
    ) -> Version:
        version = self.versions.create_version(
            wireframe_id,
            data,
            change_description=change_description,
            parent_version_id=parent_version_id,
            branch_name=branch_name,
            created_by=created_by,
            expected_head_version_id=expected_head_version_id,
        )
        audit_service.log_version(self.db, created_by, AuditAction.CREATE_VERSION, version)
        return version

    def get_version(self, version_id: str) -> Version:
        return self.versions.get_version(version_id)

    def get_latest_version_number(self, wireframe_id: str, branch_name: str = DEFAULT_BRANCH) -> int:
        return self.versions.get_latest_version_number(wireframe_id, branch_name)

    def delete_version(self, version_id: str, user_id: Optional[str]) -> bool:
        return self.versions.delete_version(version_id, user_id)

    # -- revert / branch / merge ------------------------------------------

    def revert_to_version(
        self,
        version_id: str,
        user_id: Optional[str],
        description: Optional[str] = DEFAULT_REVERT_DESCRIPTION,
        expected_head_version_id: Optional[str] = None,
    ) -> Version:
        """Append a copy of an old version to its own branch.

        History is never rewritten: the target stays where it is and the new
        version names it as parent.

        Raises:
            VersionNotFoundError: no such version.
            ConcurrentModificationError: the branch head moved.
        """
        target = self.versions.get_version(version_id)

        version = self.versions.create_version(
            target.wireframe_id,
            target.data,
            change_description=description or DEFAULT_REVERT_DESCRIPTION,
            parent_version_id=target.id,
            branch_name=target.branch_name,
            created_by=user_id,
            expected_head_version_id=expected_head_version_id,
        )
        logger.info(
            "Reverted to version",
            extra={"target_version_id": version_id, "version_id": version.id},
        )
        audit_service.log_version(
            self.db, user_id, AuditAction.REVERT, version, {"target_version_id": version_id}
        )
        return version

    def create_branch(
        self,
        from_version_id: str,
        branch_name: str,
        user_id: Optional[str],
        description: Optional[str] = None,
    ) -> Version:
        """Start a branch at an existing version.

        Writes the branch row and its first version, a copy of the source,
        in one transaction.

        Raises:
            SourceVersionNotFoundError: no such source version.
            DuplicateBranchError: the wireframe already has a branch by that name.
            ValidationError: the branch name is not allowed.
        """
        source = self.versions.version_repo.get_by_id_optional(from_version_id)
        if source is None:
            raise SourceVersionNotFoundError(from_version_id)

        description = description or f"Created branch {branch_name}"
        try:
            self.branches.create_branch(
                source.wireframe_id,
                branch_name,
                description=description,
                created_by=user_id,
                base_version_id=source.id,
                commit=False,
            )
            version = self.versions.create_version(
                source.wireframe_id,
                source.data,
                change_description=description,
                parent_version_id=source.id,
                branch_name=branch_name,
                created_by=user_id,
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        audit_service.log_version(
            self.db, user_id, AuditAction.CREATE_BRANCH, version, {"from_version_id": from_version_id}
        )
        return version

    def merge_branch(
        self,
        branch_head_version_id: str,
        user_id: Optional[str],
        description: Optional[str] = DEFAULT_MERGE_DESCRIPTION,
        target_branch: str = DEFAULT_BRANCH,
        expected_head_version_id: Optional[str] = None,
    ) -> Version:
        """Overwrite the target branch with the source version's snapshot.

        Always succeeds unless the source is missing or the target head moved.

        Raises:
            SourceVersionNotFoundError: no such source version.
            ConcurrentModificationError: the target head moved.
        """
        source = self.versions.version_repo.get_by_id_optional(branch_head_version_id)
        if source is None:
            raise SourceVersionNotFoundError(branch_head_version_id)

        source_branch_name = source.branch_name
        try:
            version = self.versions.create_version(
                source.wireframe_id,
                source.data,
                change_description=description or DEFAULT_MERGE_DESCRIPTION,
                parent_version_id=source.id,
                branch_name=target_branch,
                created_by=user_id,
                expected_head_version_id=expected_head_version_id,
                commit=False,
            )
            source_branch = self.branches.branch_repo.get_by_name(source.wireframe_id, source_branch_name)
            if source_branch is not None and source_branch_name != target_branch:
                self.branches.branch_repo.mark_merged(source_branch, target_branch)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Merged branch",
            extra={
                "source_version_id": branch_head_version_id,
                "source_branch": source_branch_name,
                "target_branch": target_branch,
                "version_id": version.id,
            },
        )
        audit_service.log_version(
            self.db,
            user_id,
            AuditAction.MERGE,
            version,
            {"source_version_id": branch_head_version_id, "source_branch": source_branch_name},
        )
        return version

    # -- branches ---------------------------------------------------------

    def get_branches(self, wireframe_id: str) -> List[BranchResponse]:
        return self.branches.get_branches(wireframe_id)

    def get_branch(self, branch_id: str) -> BranchResponse:
        return self.branches.get_branch(branch_id)

    def delete_branch(self, branch_id: str, user_id: Optional[str]) -> None:
        self.branches.delete_branch(branch_id, user_id)

    # -- history ----------------------------------------------------------

    def get_version_history(self, wireframe_id: str) -> VersionHistoryResponse:
        return self.history.get_version_history(wireframe_id)

    def get_lineage(self, version_id: str) -> List[Version]:
        return self.history.get_lineage(version_id)

    def compare_versions(self, version_id1: str, version_id2: str) -> ComparisonResponse:
        return self.history.compare_versions(version_id1, version_id2)

    def get_wireframe(self, wireframe_id: str) -> Wireframe:
        return self.history.get_wireframe(wireframe_id)

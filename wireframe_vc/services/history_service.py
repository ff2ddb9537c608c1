"""History queries: version lists, lineage and comparisons. Read-only."""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models import Version, Wireframe
from ..repositories import BranchRepository, DEFAULT_BRANCH, VersionRepository, WireframeRepository
from ..schemas.comparison import ChangeResponse, ComparisonResponse
from ..schemas.version import VersionHistoryResponse, VersionResponse
from . import diff_service

logger = logging.getLogger(__name__)


class HistoryService:
    """Read side of the version store."""

    def __init__(self, db: Session):
        self.db = db
        self.wireframe_repo = WireframeRepository(db)
        self.version_repo = VersionRepository(db)
        self.branch_repo = BranchRepository(db)

    def get_version_history(self, wireframe_id: str) -> VersionHistoryResponse:
        """Every version of a wireframe newest first, the main head, and live branch names.

        Unknown wireframes yield an empty history rather than an error.
        """
        versions = self.version_repo.get_by_wireframe(wireframe_id)
        current = self.version_repo.get_current(wireframe_id, DEFAULT_BRANCH)
        branches = [branch.name for branch in self.branch_repo.get_by_wireframe(wireframe_id)]

        return VersionHistoryResponse(
            versions=[VersionResponse.model_validate(v) for v in versions],
            current=VersionResponse.model_validate(current) if current is not None else None,
            branches=branches,
        )

    def get_lineage(self, version_id: str) -> List[Version]:
        """Ancestors of a version, nearest first.

        Follows ``parent_version_id`` across branches, so a merged version's
        lineage runs through the branch it came from. Stops at a root or at a
        parent that has been deleted.

        Raises:
            VersionNotFoundError: ``version_id`` does not exist.
        """
        version = self.version_repo.get_by_id(version_id)
        ancestors: List[Version] = []
        seen = {version.id}

        parent_id = version.parent_version_id
        while parent_id is not None and parent_id not in seen:
            parent = self.version_repo.get_by_id_optional(parent_id)
            if parent is None:
                break
            ancestors.append(parent)
            seen.add(parent.id)
            parent_id = parent.parent_version_id

        return ancestors

    def compare_versions(self, from_version_id: str, to_version_id: str) -> ComparisonResponse:
        """Structural diff between two versions, from the first to the second.

        Raises:
            VersionNotFoundError: either id does not exist.
        """
        old = self.version_repo.get_by_id(from_version_id)
        new = self.version_repo.get_by_id(to_version_id)

        changes, summary = diff_service.compare(
            old.data, new.data, max_significant=settings.summary_max_significant
        )
        logger.debug(
            "Compared versions",
            extra={"from_version_id": old.id, "to_version_id": new.id, "change_count": len(changes)},
        )
        return ComparisonResponse(
            from_version_id=old.id,
            to_version_id=new.id,
            changes=[
                ChangeResponse(type=change.type.value, path=change.path, values=list(change.values))
                for change in changes
            ],
            summary=summary,
        )

    def get_wireframe(self, wireframe_id: str) -> Wireframe:
        """Raises WireframeNotFoundError."""
        return self.wireframe_repo.get_by_id(wireframe_id)

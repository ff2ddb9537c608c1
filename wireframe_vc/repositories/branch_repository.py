"""Branch repository for database operations."""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import case
from ..models import Branch
from ..exceptions import BranchNotFoundError, ConcurrentModificationError
from .base import BaseRepository

DEFAULT_BRANCH = "main"


class BranchRepository(BaseRepository[Branch]):
    """Repository for branch rows and their head pointers."""

    model_class = Branch
    not_found_error = BranchNotFoundError

    def create(
        self,
        wireframe_id: str,
        name: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        base_version_id: Optional[str] = None,
    ) -> Branch:
        branch = Branch(
            wireframe_id=wireframe_id,
            name=name,
            description=description,
            created_by=created_by,
            base_version_id=base_version_id,
            revision=0,
        )
        self.db.add(branch)
        self.db.flush()
        return branch

    def get_by_name(self, wireframe_id: str, name: str) -> Optional[Branch]:
        return self.db.query(Branch).filter(
            Branch.wireframe_id == wireframe_id,
            Branch.name == name,
        ).first()

    def get_by_wireframe(self, wireframe_id: str) -> List[Branch]:
        """Branches of a wireframe: main first, then in creation order."""
        main_first = case((Branch.name == DEFAULT_BRANCH, 0), else_=1)
        return self.db.query(Branch).filter(
            Branch.wireframe_id == wireframe_id
        ).order_by(main_first, Branch.created_at, Branch.name).all()

    def advance_head(
        self,
        branch: Branch,
        observed_revision: int,
        head_version_id: Optional[str],
    ) -> None:
        """Move the head with compare-and-swap on ``revision``.

        Raises:
            ConcurrentModificationError: another writer moved the head since
                ``observed_revision`` was read.
        """
        updated = self.db.query(Branch).filter(
            Branch.id == branch.id,
            Branch.revision == observed_revision,
        ).update(
            {
                Branch.head_version_id: head_version_id,
                Branch.revision: observed_revision + 1,
            },
            synchronize_session=False,
        )
        if updated == 0:
            raise ConcurrentModificationError(branch.wireframe_id, branch.name)
        self.db.refresh(branch)

    def mark_merged(self, branch: Branch, target_branch: str) -> None:
        branch.merged_into = target_branch
        branch.merged_at = datetime.now(timezone.utc)
        self.db.flush()

    def delete(self, branch: Branch) -> None:
        self.db.delete(branch)
        self.db.flush()

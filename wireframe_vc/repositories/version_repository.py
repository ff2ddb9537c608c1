"""Version repository for database operations."""

from typing import List, Optional
from sqlalchemy import func
from ..models import Version
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Repository for version rows."""

    model_class = Version
    not_found_error = VersionNotFoundError

    def create(self, version: Version) -> Version:
        """Insert a new version and flush so constraint violations surface here."""
        self.db.add(version)
        self.db.flush()
        return version

    def get_by_wireframe(self, wireframe_id: str) -> List[Version]:
        """All versions of a wireframe, newest first."""
        return self.db.query(Version).filter(
            Version.wireframe_id == wireframe_id
        ).order_by(Version.created_at.desc(), Version.version_number.desc()).all()

    def get_latest_version_number(self, wireframe_id: str, branch_name: str) -> int:
        """Highest number on the branch, 0 when it has no versions."""
        latest = self.db.query(func.max(Version.version_number)).filter(
            Version.wireframe_id == wireframe_id,
            Version.branch_name == branch_name,
        ).scalar()
        return latest or 0

    def get_current(self, wireframe_id: str, branch_name: str) -> Optional[Version]:
        """The version flagged current on a branch, if any."""
        return self.db.query(Version).filter(
            Version.wireframe_id == wireframe_id,
            Version.branch_name == branch_name,
            Version.is_current.is_(True),
        ).first()

    def get_highest(self, wireframe_id: str, branch_name: str) -> Optional[Version]:
        """The highest-numbered remaining version on a branch."""
        return self.db.query(Version).filter(
            Version.wireframe_id == wireframe_id,
            Version.branch_name == branch_name,
        ).order_by(Version.version_number.desc()).first()

    def count_by_branch(self, wireframe_id: str, branch_name: str) -> int:
        return self.db.query(func.count(Version.id)).filter(
            Version.wireframe_id == wireframe_id,
            Version.branch_name == branch_name,
        ).scalar() or 0

    def clear_current(self, wireframe_id: str, branch_name: str) -> int:
        """Unflag every current version on a branch. Returns rows touched."""
        return self.db.query(Version).filter(
            Version.wireframe_id == wireframe_id,
            Version.branch_name == branch_name,
            Version.is_current.is_(True),
        ).update({Version.is_current: False}, synchronize_session="fetch")

    def delete(self, version: Version) -> None:
        """Delete a version. Children keep existing with their parent nulled."""
        self.db.query(Version).filter(
            Version.parent_version_id == version.id
        ).update({Version.parent_version_id: None}, synchronize_session="fetch")
        self.db.delete(version)
        self.db.flush()

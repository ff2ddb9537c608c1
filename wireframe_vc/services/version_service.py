"""Version store: immutable wireframe snapshots, numbering and branch heads.

Every write runs in one transaction. The branch row's ``revision`` column is
advanced with compare-and-swap, so two writers racing for the same version
number cannot both succeed: the loser is rolled back and gets
ConcurrentModificationError.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import (
    ConcurrentModificationError,
    DatabaseError,
    ValidationError,
    WireframeException,
)
from ..models import Version
from ..repositories import BranchRepository, DEFAULT_BRANCH, VersionRepository, WireframeRepository
from ..schemas.wireframe import WireframeData
from . import audit_service
from .audit_service import AuditAction, AuditResource
from .branch_service import validate_branch_name

logger = logging.getLogger(__name__)

DEFAULT_CHANGE_DESCRIPTION = "Updated wireframe"


def validate_wireframe_data(data: Any) -> Dict[str, Any]:
    """Check a snapshot and return a normalised deep copy of it.

    Raises:
        ValidationError: not a JSON object, not serialisable, or a well-known
            key has the wrong shape.
    """
    if not isinstance(data, dict):
        raise ValidationError("Wireframe data must be a JSON object", field="data")

    try:
        snapshot = json.loads(json.dumps(data, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Wireframe data is not valid JSON: {e}", field="data") from e

    try:
        WireframeData.model_validate(snapshot)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "data"
        raise ValidationError(f"Invalid wireframe data: {error['msg']}", field=field) from e

    return snapshot


class VersionService:
    """Creates, looks up and deletes versions.

    ``create_version`` accepts ``commit=False`` so callers can compose it
    with other writes in one transaction they own.
    """

    def __init__(self, db: Session):
        self.db = db
        self.wireframe_repo = WireframeRepository(db)
        self.version_repo = VersionRepository(db)
        self.branch_repo = BranchRepository(db)

    def create_version(
        self,
        wireframe_id: str,
        data: Dict[str, Any],
        change_description: Optional[str] = DEFAULT_CHANGE_DESCRIPTION,
        parent_version_id: Optional[str] = None,
        branch_name: str = DEFAULT_BRANCH,
        created_by: Optional[str] = None,
        expected_head_version_id: Optional[str] = None,
        commit: bool = True,
    ) -> Version:
        """Append a snapshot to a branch and make it the branch head.

        The wireframe and branch rows are created on first use. Appending to
        ``main`` also refreshes the wireframe's latest snapshot.

        Raises:
            ValidationError: bad snapshot or branch name, or a parent from
                another wireframe. Nothing is written.
            VersionNotFoundError: ``parent_version_id`` does not exist.
            ConcurrentModificationError: the head moved under us, or did not
                match ``expected_head_version_id``.
        """
        snapshot = validate_wireframe_data(data)
        branch_name = validate_branch_name(branch_name)

        try:
            version = self._append(
                wireframe_id,
                snapshot,
                change_description or DEFAULT_CHANGE_DESCRIPTION,
                parent_version_id,
                branch_name,
                created_by,
                expected_head_version_id,
            )
            if commit:
                self.db.commit()
        except IntegrityError as e:
            if commit:
                self.db.rollback()
            logger.warning(
                "Version insert lost a race",
                extra={"wireframe_id": wireframe_id, "branch_name": branch_name},
            )
            raise ConcurrentModificationError(
                wireframe_id, branch_name, "Version number was taken by another writer"
            ) from e
        except WireframeException:
            if commit:
                self.db.rollback()
            raise
        except SQLAlchemyError as e:
            if commit:
                self.db.rollback()
            raise DatabaseError("Failed to create version", e) from e

        logger.info(
            "Version created",
            extra={
                "wireframe_id": wireframe_id,
                "branch_name": branch_name,
                "version_id": version.id,
                "version_number": version.version_number,
            },
        )
        return version

    def _append(
        self,
        wireframe_id: str,
        snapshot: Dict[str, Any],
        change_description: str,
        parent_version_id: Optional[str],
        branch_name: str,
        created_by: Optional[str],
        expected_head_version_id: Optional[str],
    ) -> Version:
        if parent_version_id is not None:
            parent = self.version_repo.get_by_id(parent_version_id)
            if parent.wireframe_id != wireframe_id:
                raise ValidationError(
                    f"Parent version {parent_version_id} belongs to another wireframe",
                    field="parent_version_id",
                )

        title = snapshot.get("title")
        wireframe = self.wireframe_repo.get_or_create(
            wireframe_id, title=title if isinstance(title, str) else ""
        )

        branch = self.branch_repo.get_by_name(wireframe_id, branch_name)
        if branch is None:
            branch = self.branch_repo.create(wireframe_id, branch_name, created_by=created_by)
        if branch_name != DEFAULT_BRANCH and self.branch_repo.get_by_name(wireframe_id, DEFAULT_BRANCH) is None:
            self.branch_repo.create(wireframe_id, DEFAULT_BRANCH, created_by=created_by)

        observed_revision = branch.revision
        if expected_head_version_id is not None and expected_head_version_id != branch.head_version_id:
            logger.info(
                "Rejected write against stale head",
                extra={
                    "wireframe_id": wireframe_id,
                    "branch_name": branch_name,
                    "expected_head_version_id": expected_head_version_id,
                    "actual_head_version_id": branch.head_version_id,
                },
            )
            raise ConcurrentModificationError(
                wireframe_id,
                branch_name,
                "Branch head does not match the expected version",
                expected_head=expected_head_version_id,
                actual_head=branch.head_version_id,
            )

        next_number = self.version_repo.get_latest_version_number(wireframe_id, branch_name) + 1

        self.version_repo.clear_current(wireframe_id, branch_name)
        version = self.version_repo.create(Version(
            wireframe_id=wireframe_id,
            branch_name=branch_name,
            version_number=next_number,
            parent_version_id=parent_version_id,
            data=snapshot,
            change_description=change_description,
            created_by=created_by,
            is_current=True,
        ))

        self.branch_repo.advance_head(branch, observed_revision, version.id)

        if branch_name == DEFAULT_BRANCH:
            self.wireframe_repo.set_latest(wireframe, version.id, snapshot)

        return version

    def get_version(self, version_id: str) -> Version:
        """Get a version by id. Raises VersionNotFoundError."""
        return self.version_repo.get_by_id(version_id)

    def get_latest_version_number(self, wireframe_id: str, branch_name: str = DEFAULT_BRANCH) -> int:
        """Highest number on the branch, 0 when it has no versions."""
        return self.version_repo.get_latest_version_number(wireframe_id, branch_name)

    def get_current_version(self, wireframe_id: str, branch_name: str = DEFAULT_BRANCH) -> Optional[Version]:
        return self.version_repo.get_current(wireframe_id, branch_name)

    def delete_version(self, version_id: str, user_id: Optional[str]) -> bool:
        """Delete one version without renumbering its siblings.

        If it was the branch head, the highest remaining version on that
        branch takes over (or the head becomes empty). Child versions keep
        existing with ``parent_version_id`` cleared.

        Raises:
            VersionNotFoundError: no such version.
        """
        version = self.version_repo.get_by_id(version_id)
        wireframe_id = version.wireframe_id
        branch_name = version.branch_name
        version_number = version.version_number

        branch = self.branch_repo.get_by_name(wireframe_id, branch_name)
        was_head = version.is_current or (branch is not None and branch.head_version_id == version_id)
        promoted: Optional[Version] = None

        try:
            observed_revision = branch.revision if branch is not None else None
            self.version_repo.delete(version)

            if was_head and branch is not None:
                promoted = self.version_repo.get_highest(wireframe_id, branch_name)
                if promoted is not None:
                    promoted.is_current = True
                    self.db.flush()
                self.branch_repo.advance_head(
                    branch,
                    observed_revision,
                    promoted.id if promoted is not None else None,
                )
                if branch_name == DEFAULT_BRANCH:
                    wireframe = self.wireframe_repo.get_by_id_optional(wireframe_id)
                    if wireframe is not None:
                        self.wireframe_repo.set_latest(
                            wireframe,
                            promoted.id if promoted is not None else None,
                            promoted.data if promoted is not None else None,
                        )

            promoted_id = promoted.id if promoted is not None else None
            self.db.commit()
        except WireframeException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("Failed to delete version", e) from e

        logger.info(
            "Version deleted",
            extra={
                "wireframe_id": wireframe_id,
                "branch_name": branch_name,
                "version_id": version_id,
                "promoted_version_id": promoted_id,
            },
        )
        audit_service.log(
            self.db,
            user_id=user_id,
            action=AuditAction.DELETE_VERSION,
            resource_type=AuditResource.VERSION,
            resource_id=version_id,
            wireframe_id=wireframe_id,
            details={
                "branch_name": branch_name,
                "version_number": version_number,
                "promoted_version_id": promoted_id,
            },
        )
        return True

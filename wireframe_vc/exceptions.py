"""Custom exception hierarchy for wireframe version control."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Lookup errors
    WIREFRAME_NOT_FOUND = "WIREFRAME_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    SOURCE_VERSION_NOT_FOUND = "SOURCE_VERSION_NOT_FOUND"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"

    # Branch lifecycle errors
    DUPLICATE_BRANCH = "DUPLICATE_BRANCH"
    CANNOT_DELETE_DEFAULT_BRANCH = "CANNOT_DELETE_DEFAULT_BRANCH"

    # Concurrency errors
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class WireframeException(Exception):
    """
    Base exception for all version-control errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class NotFoundError(WireframeException):
    """A referenced wireframe, version, or branch does not exist.

    Always recoverable by the caller; nothing was written.
    """


class WireframeNotFoundError(NotFoundError):
    """Wireframe document not found in database."""

    def __init__(self, wireframe_id: str):
        super().__init__(
            f"Wireframe not found: {wireframe_id}",
            ErrorCode.WIREFRAME_NOT_FOUND,
            status_code=404,
            details={"wireframe_id": wireframe_id}
        )


class VersionNotFoundError(NotFoundError):
    """Version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class SourceVersionNotFoundError(VersionNotFoundError):
    """The version a branch or merge should start from does not exist."""

    def __init__(self, version_id: str):
        # Skip VersionNotFoundError.__init__ to carry its own code and message.
        NotFoundError.__init__(
            self,
            f"Source version not found: {version_id}",
            ErrorCode.SOURCE_VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class BranchNotFoundError(NotFoundError):
    """Branch not found in database."""

    def __init__(self, branch_id: str):
        super().__init__(
            f"Branch not found: {branch_id}",
            ErrorCode.BRANCH_NOT_FOUND,
            status_code=404,
            details={"branch_id": branch_id}
        )


class DuplicateBranchError(WireframeException):
    """A branch with this name already exists for the wireframe."""

    def __init__(self, wireframe_id: str, branch_name: str):
        super().__init__(
            f"Branch '{branch_name}' already exists for wireframe {wireframe_id}",
            ErrorCode.DUPLICATE_BRANCH,
            status_code=409,
            details={"wireframe_id": wireframe_id, "branch_name": branch_name}
        )


class CannotDeleteDefaultBranchError(WireframeException):
    """The default branch can never be removed."""

    def __init__(self, branch_name: str = "main"):
        super().__init__(
            f"Cannot delete the default branch '{branch_name}'",
            ErrorCode.CANNOT_DELETE_DEFAULT_BRANCH,
            status_code=400,
            details={"branch_name": branch_name}
        )


class ConcurrentModificationError(WireframeException):
    """Branch head moved between read and write. Retry against the new head."""

    def __init__(
        self,
        wireframe_id: str,
        branch_name: str,
        message: str = "Branch was modified by another writer",
        expected_head: Optional[str] = None,
        actual_head: Optional[str] = None,
    ):
        details: Dict[str, Any] = {"wireframe_id": wireframe_id, "branch_name": branch_name}
        if expected_head is not None or actual_head is not None:
            details["expected_head_version_id"] = expected_head
            details["actual_head_version_id"] = actual_head
        super().__init__(
            message,
            ErrorCode.CONCURRENT_MODIFICATION,
            status_code=409,
            details=details
        )


class ValidationError(WireframeException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(WireframeException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(WireframeException):
    """Authenticated user lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class DatabaseError(WireframeException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )

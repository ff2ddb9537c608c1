"""Business logic services."""

from .version_service import VersionService
from .branch_service import BranchService
from .history_service import HistoryService
from .version_control_service import VersionControlService

__all__ = ["VersionService", "BranchService", "HistoryService", "VersionControlService"]

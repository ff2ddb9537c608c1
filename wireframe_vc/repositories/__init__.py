"""Data access repositories."""

from .base import BaseRepository
from .wireframe_repository import WireframeRepository
from .version_repository import VersionRepository
from .branch_repository import BranchRepository, DEFAULT_BRANCH

__all__ = [
    "BaseRepository",
    "WireframeRepository",
    "VersionRepository",
    "BranchRepository",
    "DEFAULT_BRANCH",
]

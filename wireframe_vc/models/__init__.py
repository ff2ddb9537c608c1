"""Database models."""

from .wireframe import Wireframe
from .version import Version
from .branch import Branch
from .audit import AuditLog

__all__ = ["Wireframe", "Version", "Branch", "AuditLog"]

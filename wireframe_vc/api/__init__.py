"""API routes."""

from .wireframes import router as wireframes_router
from .versions import router as versions_router
from .branches import router as branches_router

__all__ = [
    "wireframes_router",
    "versions_router",
    "branches_router",
]

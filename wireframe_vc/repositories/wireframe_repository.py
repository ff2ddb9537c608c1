"""Wireframe repository for database operations."""

from typing import Any, Dict, Optional
from ..models import Wireframe
from ..exceptions import WireframeNotFoundError
from .base import BaseRepository


class WireframeRepository(BaseRepository[Wireframe]):
    """Repository for wireframe rows."""

    model_class = Wireframe
    not_found_error = WireframeNotFoundError

    def get_or_create(self, wireframe_id: str, title: str = "") -> Wireframe:
        """Return the wireframe row, inserting an empty one if it is new."""
        wireframe = self.get_by_id_optional(wireframe_id)
        if wireframe is None:
            wireframe = Wireframe(id=wireframe_id, title=title, data={})
            self.db.add(wireframe)
            self.db.flush()
        return wireframe

    def set_latest(
        self,
        wireframe: Wireframe,
        version_id: Optional[str],
        data: Optional[Dict[str, Any]],
    ) -> Wireframe:
        """Point the denormalised main snapshot at a version.

        With no version the wireframe goes back to an empty snapshot.
        """
        wireframe.latest_version_id = version_id
        if data is None:
            wireframe.data = {}
            wireframe.title = ""
        else:
            wireframe.data = data
            title = data.get("title")
            if isinstance(title, str):
                wireframe.title = title
        self.db.flush()
        return wireframe

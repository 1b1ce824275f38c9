"""Project lookups needed for ownership checks."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from pocketbase.utils import ClientResponseError

from ..errors import StorageError
from ..models import Project

if TYPE_CHECKING:
    from pocketbase import PocketBase


class ProjectRepository:
    """Read-only access to projects"""

    def __init__(self, pb: PocketBase, collection: str = "projects") -> None:
        self.pb = pb
        self.collection = collection

    async def get_by_id(self, project_id: str) -> Project | None:
        try:
            record = await asyncio.to_thread(self.pb.collection(self.collection).get_one, project_id)
        except ClientResponseError as e:
            if e.status == 404:
                return None
            raise StorageError(f"Error loading project {project_id}: {e}") from e
        return self._map_from_db(record)

    def _map_from_db(self, record: Any) -> Project:
        return Project(
            id=record.id,
            owner_id=getattr(record, "owner_id", ""),
            name=getattr(record, "name", "") or "",
        )

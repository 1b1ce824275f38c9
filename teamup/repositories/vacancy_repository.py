"""Vacancy repository - the side of a vacancy this service writes to."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from pocketbase.utils import ClientResponseError

from ..errors import StorageError
from ..models import Vacancy

if TYPE_CHECKING:
    from pocketbase import PocketBase

logger = logging.getLogger(__name__)


class VacancyRepository:
    """Repository for Vacancy data access"""

    def __init__(self, pb: PocketBase, collection: str = "vacancies") -> None:
        self.pb = pb
        self.collection = collection

    async def get_by_id(self, vacancy_id: str) -> Vacancy | None:
        """Fetch a vacancy by id, or None when it does not exist."""
        try:
            record = await asyncio.to_thread(self.pb.collection(self.collection).get_one, vacancy_id)
        except ClientResponseError as e:
            if e.status == 404:
                return None
            raise StorageError(f"Error loading vacancy {vacancy_id}: {e}") from e
        return self._map_from_db(record)

    async def update(self, vacancy_id: str, patch: dict[str, Any]) -> Vacancy:
        """Apply a partial update to a vacancy.

        Used to assign the approved user (`{"user_id": ...}`).

        Raises:
            StorageError: the vacancy is missing or PocketBase rejected the update
        """
        try:
            record = await asyncio.to_thread(self.pb.collection(self.collection).update, vacancy_id, patch)
        except ClientResponseError as e:
            raise StorageError(f"Error updating vacancy {vacancy_id}: {e}") from e

        logger.debug(f"Updated vacancy {vacancy_id}: {patch}")
        return self._map_from_db(record)

    def _map_from_db(self, record: Any) -> Vacancy:
        return Vacancy(
            id=record.id,
            project_id=getattr(record, "project_id", ""),
            title=getattr(record, "title", "") or "",
            user_id=getattr(record, "user_id", None) or None,
        )

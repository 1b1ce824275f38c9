"""Request repository for data access.

Handles all PocketBase operations on join request records."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from pocketbase.utils import ClientResponseError

from ..errors import DuplicateRequestError, StorageError
from ..models import JoinRequest, RequestStatus
from ._filters import build_filter, format_datetime, parse_datetime, quote

if TYPE_CHECKING:
    from pocketbase import PocketBase

logger = logging.getLogger(__name__)

# PocketBase reports unique-index violations with this field error code
NOT_UNIQUE_CODE = "validation_not_unique"


def _is_unique_violation(error: ClientResponseError) -> bool:
    if error.status != 400 or not isinstance(error.data, dict):
        return False
    field_errors = error.data.get("data") or {}
    return any(
        isinstance(detail, dict) and detail.get("code") == NOT_UNIQUE_CODE for detail in field_errors.values()
    )


class RequestRepository:
    """Repository for JoinRequest data access"""

    def __init__(self, pb: PocketBase, collection: str = "requests") -> None:
        """Initialize repository with PocketBase client.

        Args:
            pb: PocketBase client instance
            collection: Name of the requests collection
        """
        self.pb = pb
        self.collection = collection

    async def find_one(self, **criteria: Any) -> JoinRequest | None:
        """Find the first request matching all equality criteria.

        Example:
            await repo.find_one(user_id="u1", vacancy_id="v1")
        """
        filter_str = build_filter(criteria)
        try:
            result = await asyncio.to_thread(
                self.pb.collection(self.collection).get_list,
                page=1,
                per_page=1,
                query_params={"filter": filter_str},
            )
        except ClientResponseError as e:
            raise StorageError(f"Error finding request ({filter_str}): {e}") from e

        if result.items:
            return self._map_from_db(result.items[0])
        return None

    async def get_by_id(self, record_id: str) -> JoinRequest | None:
        """Fetch a request by id, or None when it does not exist."""
        try:
            record = await asyncio.to_thread(self.pb.collection(self.collection).get_one, record_id)
        except ClientResponseError as e:
            if e.status == 404:
                return None
            raise StorageError(f"Error loading request {record_id}: {e}") from e
        return self._map_from_db(record)

    async def insert(self, request: JoinRequest) -> JoinRequest:
        """Persist a new request and return the stored record.

        Raises:
            DuplicateRequestError: the unique (user_id, vacancy_id) index rejected it
            StorageError: any other PocketBase failure
        """
        data = self._map_to_db(request)
        try:
            record = await asyncio.to_thread(self.pb.collection(self.collection).create, data)
        except ClientResponseError as e:
            if _is_unique_violation(e):
                logger.info(f"Unique index rejected request user={request.user_id} vacancy={request.vacancy_id}")
                raise DuplicateRequestError() from e
            raise StorageError(f"Error creating request: {e}") from e
        return self._map_from_db(record)

    async def update(self, record_id: str, patch: dict[str, Any]) -> JoinRequest | None:
        """Apply a partial update; returns the updated request or None if missing."""
        try:
            record = await asyncio.to_thread(
                self.pb.collection(self.collection).update,
                record_id,
                self._encode_patch(patch),
            )
        except ClientResponseError as e:
            if e.status == 404:
                return None
            raise StorageError(f"Error updating request {record_id}: {e}") from e
        return self._map_from_db(record)

    async def update_where(
        self,
        criteria: dict[str, Any],
        patch: dict[str, Any],
        exclude: dict[str, Any] | None = None,
    ) -> int:
        """Apply the same patch to every request matching criteria minus exclusions.

        PocketBase has no bulk update, so matches are listed then updated one by one.
        The first failing update aborts the rest and is raised as StorageError.

        Returns:
            Number of records updated
        """
        filter_str = build_filter(criteria, exclude)
        data = self._encode_patch(patch)
        collection = self.pb.collection(self.collection)

        try:
            records = await asyncio.to_thread(collection.get_full_list, query_params={"filter": filter_str})
            for record in records:
                await asyncio.to_thread(collection.update, record.id, data)
        except ClientResponseError as e:
            raise StorageError(f"Error bulk-updating requests ({filter_str}): {e}") from e

        return len(records)

    async def list_by_project(self, project_id: str) -> list[JoinRequest]:
        """All requests for vacancies of a project, in storage order."""
        try:
            records = await asyncio.to_thread(
                self.pb.collection(self.collection).get_full_list,
                query_params={
                    "filter": f"vacancy_id.project_id = {quote(project_id)}",
                    "expand": "vacancy_id,user_id",
                },
            )
        except ClientResponseError as e:
            raise StorageError(f"Error listing requests for project {project_id}: {e}") from e
        return [self._map_from_db(record) for record in records]

    def _encode_patch(self, patch: dict[str, Any]) -> dict[str, Any]:
        return {key: value.value if isinstance(value, RequestStatus) else value for key, value in patch.items()}

    def _map_to_db(self, request: JoinRequest) -> dict[str, Any]:
        data: dict[str, Any] = {
            "vacancy_id": request.vacancy_id,
            "user_id": request.user_id,
            "status": request.status.value,
        }
        if request.date_created is not None:
            data["date_created"] = format_datetime(request.date_created)
        return data

    def _map_from_db(self, record: Any) -> JoinRequest:
        request = JoinRequest(
            id=record.id,
            vacancy_id=getattr(record, "vacancy_id", ""),
            user_id=getattr(record, "user_id", ""),
            status=RequestStatus(getattr(record, "status", "") or RequestStatus.PENDING.value),
            date_created=parse_datetime(getattr(record, "date_created", None) or getattr(record, "created", None)),
        )

        expand = getattr(record, "expand", None) or {}
        vacancy = expand.get("vacancy_id")
        if vacancy is not None:
            request.vacancy_title = getattr(vacancy, "title", None)
            request.project_id = getattr(vacancy, "project_id", None)
        user = expand.get("user_id")
        if user is not None:
            request.user_name = getattr(user, "name", None) or getattr(user, "username", None)
            request.user_email = getattr(user, "email", None)

        return request


def serialize_request(request: JoinRequest) -> dict[str, Any]:
    """Public representation shared by the create and list endpoints."""
    vacancy = None
    if request.vacancy_title is not None or request.project_id is not None:
        vacancy = {
            "id": request.vacancy_id,
            "title": request.vacancy_title,
            "project_id": request.project_id,
        }

    user = None
    if request.user_name is not None or request.user_email is not None:
        user = {
            "id": request.user_id,
            "name": request.user_name,
            "email": request.user_email,
        }

    return {
        "id": request.id,
        "vacancy_id": request.vacancy_id,
        "user_id": request.user_id,
        "status": request.status.value,
        "date_created": request.date_created.isoformat() if request.date_created else None,
        "vacancy": vacancy,
        "user": user,
    }

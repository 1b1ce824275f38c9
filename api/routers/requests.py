"""
Requests Router - join request endpoints.

This router lets users request to join a vacancy and lets project owners
approve/deny those requests and list them per project.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from teamup.auth_middleware import AuthUser, get_current_user
from teamup.repositories import serialize_request

from ..dependencies import get_lifecycle_service, require_project_owner, require_request_owner
from ..schemas.requests import JoinRequestResponse, StatusUpdate
from ..services.request_lifecycle import RequestLifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["requests"])


async def _read_status(request: Request) -> Any:
    """The submitted `status`, or None when the body is absent, malformed or not an object."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return StatusUpdate.model_validate(payload).status


@router.post("/requests/{vacancy_id}", status_code=201, response_model=JoinRequestResponse)
async def create_request(
    vacancy_id: str,
    user: AuthUser = Depends(get_current_user),
    service: RequestLifecycleService = Depends(get_lifecycle_service),
) -> dict[str, Any]:
    """Request to join a vacancy as the current user.

    Returns 400 if the user already requested this vacancy.
    """
    created = await service.create_request(vacancy_id=vacancy_id, user_id=user.id)
    return serialize_request(created)


@router.patch(
    "/requests/{request_id}",
    status_code=204,
    response_class=Response,
    openapi_extra={"requestBody": {"content": {"application/json": {"schema": StatusUpdate.model_json_schema()}}}},
)
async def update_request_status(
    request_id: str,
    request: Request,
    owner: AuthUser = Depends(require_request_owner),
    service: RequestLifecycleService = Depends(get_lifecycle_service),
) -> Response:
    """Mark a request as approved or denied (case-insensitive).

    Approving also assigns the requester to the vacancy and denies every
    other request for it. Those side effects are best-effort: their failures
    are logged but the decision still succeeds with 204.
    """
    result = await service.transition_status(request_id, await _read_status(request))

    if result.failed_cascades:
        failed = ", ".join(c.name for c in result.failed_cascades)
        logger.warning(f"Request {request_id} approved by {owner.id} with failed side effects: {failed}")

    return Response(status_code=204)


@router.get("/requests/{project_id}", response_model=list[JoinRequestResponse])
async def list_project_requests(
    project_id: str,
    owner: AuthUser = Depends(require_project_owner),
    service: RequestLifecycleService = Depends(get_lifecycle_service),
) -> list[dict[str, Any]]:
    """All requests for the project's vacancies, in storage order."""
    requests = await service.list_for_project(project_id)
    logger.debug(f"Listing {len(requests)} requests for project {project_id} to owner {owner.id}")
    return [serialize_request(r) for r in requests]

"""
Shared dependencies for the TeamUp API.

This module provides:
- PocketBase client creation and admin authentication
- Repository and service providers (overridable via app.dependency_overrides)
- Ownership guards for owner-only endpoints
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Depends, HTTPException, Request

from pocketbase import PocketBase
from teamup.auth_middleware import AuthUser, get_current_user
from teamup.repositories import ProjectRepository, RequestRepository, VacancyRepository

from .services.ownership import OwnershipService, ProjectNotFoundError
from .services.request_lifecycle import RequestLifecycleService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# One client per application, created in the lifespan and stored on app.state.
# Only the superuser identity is ever loaded into its authStore, so sharing it
# across requests is safe.


def create_pb_client(settings: Settings) -> PocketBase:
    """Create a PocketBase client for the configured server."""
    return PocketBase(settings.pocketbase_url)


async def authenticate_pb(pb: PocketBase, settings: Settings) -> None:
    """Authenticate with PocketBase as superuser."""
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


def get_pb_client(request: Request) -> PocketBase:
    """FastAPI dependency returning the application's PocketBase client."""
    pb: PocketBase = request.app.state.pb
    return pb


# ========================================
# Repositories & Services
# ========================================


def get_request_repository(
    pb: PocketBase = Depends(get_pb_client), settings: Settings = Depends(get_settings)
) -> RequestRepository:
    """Get a RequestRepository instance."""
    return RequestRepository(pb, collection=settings.requests_collection)


def get_vacancy_repository(
    pb: PocketBase = Depends(get_pb_client), settings: Settings = Depends(get_settings)
) -> VacancyRepository:
    """Get a VacancyRepository instance."""
    return VacancyRepository(pb, collection=settings.vacancies_collection)


def get_project_repository(
    pb: PocketBase = Depends(get_pb_client), settings: Settings = Depends(get_settings)
) -> ProjectRepository:
    """Get a ProjectRepository instance."""
    return ProjectRepository(pb, collection=settings.projects_collection)


def get_lifecycle_service(
    requests: RequestRepository = Depends(get_request_repository),
    vacancies: VacancyRepository = Depends(get_vacancy_repository),
) -> RequestLifecycleService:
    """Get the request lifecycle service wired to the current repositories."""
    return RequestLifecycleService(requests, vacancies)


def get_ownership_service(
    projects: ProjectRepository = Depends(get_project_repository),
    vacancies: VacancyRepository = Depends(get_vacancy_repository),
    requests: RequestRepository = Depends(get_request_repository),
) -> OwnershipService:
    """Get the ownership service wired to the current repositories."""
    return OwnershipService(projects, vacancies, requests)


# ========================================
# Ownership Guards
# ========================================


async def require_project_owner(
    project_id: str,
    user: AuthUser = Depends(get_current_user),
    ownership: OwnershipService = Depends(get_ownership_service),
) -> AuthUser:
    """Allow only the owner of the project in the path."""
    try:
        is_owner = await ownership.owns_project(user.id, project_id)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found") from None

    if not is_owner:
        logger.warning(f"User {user.id} is not the owner of project {project_id}")
        raise HTTPException(status_code=403, detail="Only the project owner can perform this action")
    return user


async def require_request_owner(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    ownership: OwnershipService = Depends(get_ownership_service),
) -> AuthUser:
    """Allow only the owner of the project the request in the path belongs to.

    An unknown request id surfaces as RequestNotFoundError (404).
    """
    if not await ownership.owns_request(user.id, request_id):
        logger.warning(f"User {user.id} is not the owner of the project for request {request_id}")
        raise HTTPException(status_code=403, detail="Only the project owner can perform this action")
    return user


__all__ = [
    "authenticate_pb",
    "create_pb_client",
    "get_lifecycle_service",
    "get_ownership_service",
    "get_pb_client",
    "get_project_repository",
    "get_request_repository",
    "get_vacancy_repository",
    "require_project_owner",
    "require_request_owner",
]

"""
Ownership checks - resolves which user owns a project or a request.

A request belongs to the project of its vacancy, so deciding on a request
requires walking request -> vacancy -> project.
"""

from __future__ import annotations

import logging

from teamup.errors import RequestNotFoundError
from teamup.repositories import ProjectRepository, RequestRepository, VacancyRepository

logger = logging.getLogger(__name__)


class ProjectNotFoundError(LookupError):
    """Raised when the project being checked does not exist."""


class OwnershipService:
    """Answers 'does this user own X' for projects and requests."""

    def __init__(
        self,
        projects: ProjectRepository,
        vacancies: VacancyRepository,
        requests: RequestRepository,
    ) -> None:
        self.projects = projects
        self.vacancies = vacancies
        self.requests = requests

    async def owns_project(self, user_id: str, project_id: str) -> bool:
        """True when user_id owns the project.

        Raises:
            ProjectNotFoundError: no such project
        """
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project.owner_id == user_id

    async def owns_request(self, user_id: str, request_id: str) -> bool:
        """True when user_id owns the project the request's vacancy belongs to.

        Raises:
            RequestNotFoundError: no such request
        """
        request = await self.requests.get_by_id(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)

        vacancy = await self.vacancies.get_by_id(request.vacancy_id)
        if vacancy is None:
            logger.warning(f"Request {request_id} points at missing vacancy {request.vacancy_id}")
            return False

        try:
            return await self.owns_project(user_id, vacancy.project_id)
        except ProjectNotFoundError:
            logger.warning(f"Vacancy {vacancy.id} points at missing project {vacancy.project_id}")
            return False

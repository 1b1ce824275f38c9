"""PocketBase-backed stores for requests, vacancies and projects."""

from .project_repository import ProjectRepository
from .request_repository import RequestRepository, serialize_request
from .vacancy_repository import VacancyRepository

__all__ = [
    "ProjectRepository",
    "RequestRepository",
    "VacancyRepository",
    "serialize_request",
]

"""
Root test configuration and fixtures for the TeamUp API.

Provides:
- a mock PocketBase client (auto-applied so no test opens a real connection)
- in-memory request/vacancy/project stores with the repository interface
- settings cache reset between tests

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import itertools
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from teamup.errors import DuplicateRequestError, StorageError  # noqa: E402
from teamup.models import JoinRequest, Project, RequestStatus, Vacancy  # noqa: E402


def create_mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance."""
    mock_pb = Mock()
    mock_collection = Mock()

    mock_collection.auth_with_password = Mock(return_value=True)

    mock_list_response = Mock()
    mock_list_response.items = []
    mock_list_response.total_items = 0

    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_list = Mock(return_value=mock_list_response)
    mock_collection.get_one = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()

    mock_pb.collection = Mock(return_value=mock_collection)
    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture
def mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Keep the app factory from constructing a real PocketBase client.

    Set SKIP_MOCKING=true to run against a live server.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()
    with patch("api.dependencies.PocketBase", return_value=mock_pb):
        yield {"pocketbase": mock_pb}


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear the cached Settings so env patches take effect per test."""
    from api.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# In-memory stores
# =============================================================================


class InMemoryRequestStore:
    """Dict-backed stand-in for RequestRepository, preserving insertion order."""

    def __init__(self, vacancies: InMemoryVacancyStore | None = None) -> None:
        self.records: dict[str, JoinRequest] = {}
        self.vacancies = vacancies
        self.fail_update_where = False
        self._ids = (f"req_{n}" for n in itertools.count(1))

    def add(self, vacancy_id: str, user_id: str, status: RequestStatus = RequestStatus.PENDING) -> JoinRequest:
        request = JoinRequest(
            id=next(self._ids),
            vacancy_id=vacancy_id,
            user_id=user_id,
            status=status,
            date_created=datetime(2025, 1, 1, tzinfo=UTC),
        )
        self.records[request.id] = request  # type: ignore[index]
        return request

    async def find_one(self, **criteria: Any) -> JoinRequest | None:
        for request in self.records.values():
            if all(getattr(request, k) == v for k, v in criteria.items()):
                return request
        return None

    async def get_by_id(self, record_id: str) -> JoinRequest | None:
        return self.records.get(record_id)

    async def insert(self, request: JoinRequest) -> JoinRequest:
        if await self.find_one(user_id=request.user_id, vacancy_id=request.vacancy_id):
            raise DuplicateRequestError()
        stored = self.add(request.vacancy_id, request.user_id, request.status)
        stored.date_created = request.date_created
        return stored

    async def update(self, record_id: str, patch: dict[str, Any]) -> JoinRequest | None:
        request = self.records.get(record_id)
        if request is None:
            return None
        for key, value in patch.items():
            setattr(request, key, value)
        return request

    async def update_where(
        self, criteria: dict[str, Any], patch: dict[str, Any], exclude: dict[str, Any] | None = None
    ) -> int:
        if self.fail_update_where:
            raise StorageError("update_where unavailable")
        count = 0
        for request in self.records.values():
            if not all(getattr(request, k) == v for k, v in criteria.items()):
                continue
            if exclude and all(getattr(request, k) == v for k, v in exclude.items()):
                continue
            for key, value in patch.items():
                setattr(request, key, value)
            count += 1
        return count

    async def list_by_project(self, project_id: str) -> list[JoinRequest]:
        assert self.vacancies is not None
        return [
            r
            for r in self.records.values()
            if r.vacancy_id in self.vacancies.records and self.vacancies.records[r.vacancy_id].project_id == project_id
        ]


class InMemoryVacancyStore:
    """Dict-backed stand-in for VacancyRepository."""

    def __init__(self) -> None:
        self.records: dict[str, Vacancy] = {}
        self.fail_update = False

    def add(self, vacancy_id: str, project_id: str, title: str = "") -> Vacancy:
        vacancy = Vacancy(id=vacancy_id, project_id=project_id, title=title)
        self.records[vacancy_id] = vacancy
        return vacancy

    async def get_by_id(self, vacancy_id: str) -> Vacancy | None:
        return self.records.get(vacancy_id)

    async def update(self, vacancy_id: str, patch: dict[str, Any]) -> Vacancy:
        if self.fail_update or vacancy_id not in self.records:
            raise StorageError(f"Error updating vacancy {vacancy_id}")
        vacancy = self.records[vacancy_id]
        for key, value in patch.items():
            setattr(vacancy, key, value)
        return vacancy


class InMemoryProjectStore:
    """Dict-backed stand-in for ProjectRepository."""

    def __init__(self) -> None:
        self.records: dict[str, Project] = {}

    def add(self, project_id: str, owner_id: str) -> Project:
        project = Project(id=project_id, owner_id=owner_id)
        self.records[project_id] = project
        return project

    async def get_by_id(self, project_id: str) -> Project | None:
        return self.records.get(project_id)


@pytest.fixture
def stores() -> dict[str, Any]:
    """Stores seeded with one project (owner "owner_1") and two vacancies.

    - project proj_1: vacancies vac_1, vac_2
    - project proj_2: vacancy vac_9 (owned by "someone_else")
    """
    vacancies = InMemoryVacancyStore()
    projects = InMemoryProjectStore()
    requests = InMemoryRequestStore(vacancies)

    projects.add("proj_1", owner_id="owner_1")
    projects.add("proj_2", owner_id="someone_else")
    vacancies.add("vac_1", "proj_1", title="Backend developer")
    vacancies.add("vac_2", "proj_1", title="Designer")
    vacancies.add("vac_9", "proj_2", title="Tester")

    return {"requests": requests, "vacancies": vacancies, "projects": projects}

"""Domain models for join requests and the records they touch.

These are plain dataclasses; repositories map PocketBase records onto them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class RequestStatus(Enum):
    """Status of a join request

    Note: values must match the `status` select field of the requests collection
    """

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    @classmethod
    def owner_decisions(cls) -> tuple[RequestStatus, ...]:
        """Statuses an owner may set through the transition endpoint."""
        return (cls.APPROVED, cls.DENIED)


@dataclass
class JoinRequest:
    """A user's request to fill a vacancy"""

    vacancy_id: str
    user_id: str
    status: RequestStatus = RequestStatus.PENDING
    date_created: datetime | None = None
    id: str | None = None

    # Populated only when the store expands relations (listing)
    vacancy_title: str | None = None
    project_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None

    @classmethod
    def new(cls, vacancy_id: str, user_id: str) -> JoinRequest:
        """Build an unsaved pending request stamped with the current time."""
        return cls(vacancy_id=vacancy_id, user_id=user_id, date_created=datetime.now(UTC))


@dataclass
class Vacancy:
    """An open position within a project"""

    id: str
    project_id: str
    title: str = ""
    user_id: str | None = None  # assigned user, empty while open


@dataclass
class Project:
    """A project that owns vacancies"""

    id: str
    owner_id: str
    name: str = ""

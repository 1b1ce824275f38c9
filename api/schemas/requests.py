"""
Pydantic schemas for join request endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class StatusUpdate(BaseModel):
    """Request body for the status transition endpoint.

    `status` is validated by the lifecycle service, not here, so that a
    missing or unexpected value is reported as a 400 with a specific message.
    The router reads the body itself; a body that is not a JSON object counts
    as a missing status.
    """

    status: Any = None


class VacancySummary(BaseModel):
    """Vacancy context attached to a listed request."""

    id: str
    title: str | None = None
    project_id: str | None = None


class UserSummary(BaseModel):
    """Requesting user context attached to a listed request."""

    id: str
    name: str | None = None
    email: str | None = None


class JoinRequestResponse(BaseModel):
    """Response model for join requests."""

    id: str
    vacancy_id: str
    user_id: str
    status: str
    date_created: str | None = None
    vacancy: VacancySummary | None = None
    user: UserSummary | None = None

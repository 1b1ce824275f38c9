"""
Request Lifecycle Service - create, decide on, and list join requests.

Owns the business rules of the requests resource:
- one request per (user, vacancy)
- owners may only set `approved` or `denied` (case-insensitive)
- approving a request assigns its user to the vacancy and denies every
  competing request for that vacancy

Usage:
    service = RequestLifecycleService(request_repo, vacancy_repo)
    result = await service.transition_status(request_id, "Approved")
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from teamup.errors import DuplicateRequestError, InvalidStatusError, MissingFieldError, RequestNotFoundError
from teamup.models import JoinRequest, RequestStatus
from teamup.repositories import RequestRepository, VacancyRepository

logger = logging.getLogger(__name__)


def normalize_status(raw: Any) -> RequestStatus:
    """Turn the submitted status into an owner decision.

    Raises:
        MissingFieldError: status is absent or empty
        InvalidStatusError: anything other than approved/denied, in any case
    """
    if raw is None or raw == "":
        raise MissingFieldError("status")
    if not isinstance(raw, str):
        raise InvalidStatusError()

    normalized = raw.lower()
    for status in RequestStatus.owner_decisions():
        if normalized == status.value:
            return status
    raise InvalidStatusError()


@dataclass
class CascadeOutcome:
    """Result of one side effect of an approval."""

    name: str
    succeeded: bool
    error: str | None = None


@dataclass
class TransitionResult:
    """The updated request plus the outcome of each cascade that ran."""

    request: JoinRequest
    cascades: list[CascadeOutcome] = field(default_factory=list)

    @property
    def failed_cascades(self) -> list[CascadeOutcome]:
        return [c for c in self.cascades if not c.succeeded]


class RequestLifecycleService:
    """Business logic for the requests resource.

    Repositories are injected so routers and tests can supply their own.
    """

    def __init__(self, requests: RequestRepository, vacancies: VacancyRepository) -> None:
        self.requests = requests
        self.vacancies = vacancies

    async def create_request(self, vacancy_id: str, user_id: str) -> JoinRequest:
        """Create a pending request for a vacancy.

        Raises:
            DuplicateRequestError: the user already requested this vacancy
        """
        existing = await self.requests.find_one(user_id=user_id, vacancy_id=vacancy_id)
        if existing is not None:
            logger.info(f"Duplicate request by user {user_id} for vacancy {vacancy_id} (existing {existing.id})")
            raise DuplicateRequestError()

        created = await self.requests.insert(JoinRequest.new(vacancy_id=vacancy_id, user_id=user_id))
        logger.info(f"Created request {created.id} by user {user_id} for vacancy {vacancy_id}")
        return created

    async def transition_status(self, request_id: str, status: Any) -> TransitionResult:
        """Record the owner's decision on a request.

        Validation happens before any write. An approval then runs two
        independent cascades concurrently; their failures are logged and
        reported in the result but never undo the decision itself.

        Raises:
            MissingFieldError / InvalidStatusError: bad status value
            RequestNotFoundError: no request with this id
        """
        decision = normalize_status(status)

        updated = await self.requests.update(request_id, {"status": decision})
        if updated is None:
            raise RequestNotFoundError(request_id)

        logger.info(f"Request {request_id} marked {decision.value}")
        result = TransitionResult(request=updated)

        if decision is RequestStatus.APPROVED:
            result.cascades = await self._cascade_approval(updated)

        return result

    async def list_for_project(self, project_id: str) -> list[JoinRequest]:
        """All requests for the project's vacancies, in storage order."""
        return await self.requests.list_by_project(project_id)

    async def _cascade_approval(self, approved: JoinRequest) -> list[CascadeOutcome]:
        names = ("assign_vacancy", "deny_competing")
        outcomes = await asyncio.gather(
            self.vacancies.update(approved.vacancy_id, {"user_id": approved.user_id}),
            self.requests.update_where(
                {"vacancy_id": approved.vacancy_id},
                {"status": RequestStatus.DENIED},
                exclude={"id": approved.id},
            ),
            return_exceptions=True,
        )

        cascades: list[CascadeOutcome] = []
        for name, outcome in zip(names, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(f"Approval cascade '{name}' failed for request {approved.id}: {outcome}")
                cascades.append(CascadeOutcome(name=name, succeeded=False, error=str(outcome)))
            else:
                cascades.append(CascadeOutcome(name=name, succeeded=True))

        if not any(isinstance(outcome, BaseException) for outcome in outcomes):
            logger.info(
                f"Approved request {approved.id}: vacancy {approved.vacancy_id} assigned to "
                f"user {approved.user_id}, {outcomes[1]} competing request(s) denied"
            )
        return cascades

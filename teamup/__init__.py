"""
TeamUp - domain layer for project vacancy join requests.

This package contains:
- models: JoinRequest, Vacancy, Project and RequestStatus
- errors: request lifecycle error hierarchy
- repositories: PocketBase-backed stores
- auth_middleware / jwt_auth: bearer token authentication
"""

from teamup.errors import (
    DuplicateRequestError,
    InvalidStatusError,
    MissingFieldError,
    RequestNotFoundError,
    StorageError,
    TeamUpError,
)
from teamup.models import JoinRequest, Project, RequestStatus, Vacancy

__all__ = [
    "DuplicateRequestError",
    "InvalidStatusError",
    "JoinRequest",
    "MissingFieldError",
    "Project",
    "RequestNotFoundError",
    "RequestStatus",
    "StorageError",
    "TeamUpError",
    "Vacancy",
]

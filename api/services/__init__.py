"""
API Services - Business logic for the TeamUp requests API.

Services receive their repositories through the constructor; routers build
them via the providers in api.dependencies.
"""

from .ownership import OwnershipService, ProjectNotFoundError
from .request_lifecycle import (
    CascadeOutcome,
    RequestLifecycleService,
    TransitionResult,
    normalize_status,
)

__all__ = [
    "CascadeOutcome",
    "OwnershipService",
    "ProjectNotFoundError",
    "RequestLifecycleService",
    "TransitionResult",
    "normalize_status",
]

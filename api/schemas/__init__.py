"""
Pydantic schemas for the TeamUp API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .requests import (
    JoinRequestResponse,
    StatusUpdate,
    UserSummary,
    VacancySummary,
)

__all__ = [
    "JoinRequestResponse",
    "StatusUpdate",
    "UserSummary",
    "VacancySummary",
]

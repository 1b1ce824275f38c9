"""Domain error classes for the requests resource.

Each error knows the HTTP status it maps to; the API layer renders them as
`{"error": message}`.
"""

from __future__ import annotations


class TeamUpError(Exception):
    """Base exception for request lifecycle errors."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateRequestError(TeamUpError):
    """Raised when the user already has a request for the vacancy."""

    status_code = 400
    default_message = "Request for same vacancy by this user already exists"


class MissingFieldError(TeamUpError):
    """Raised when a required body field is absent."""

    status_code = 400

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Request body must contain {field}")


class InvalidStatusError(TeamUpError):
    """Raised when a status other than approved/denied is submitted."""

    status_code = 400
    default_message = "Status must be either 'approved' or 'denied'"


class RequestNotFoundError(TeamUpError):
    """Raised when a request id does not match any record."""

    status_code = 404

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Request '{request_id}' not found")


class StorageError(TeamUpError):
    """Raised when PocketBase rejects or fails an operation."""

    status_code = 500
    default_message = "Storage failure"

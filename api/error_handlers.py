"""
Exception handlers mapping domain errors onto HTTP responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teamup.errors import StorageError, TeamUpError

logger = logging.getLogger(__name__)


async def teamup_error_handler(request: Request, exc: TeamUpError) -> JSONResponse:
    """Render a TeamUpError as `{"error": message}` with its status code."""
    if isinstance(exc, StorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": StorageError.default_message})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def install_error_handlers(app: FastAPI) -> None:
    """Register domain error handlers on the application."""
    app.add_exception_handler(TeamUpError, teamup_error_handler)  # type: ignore[arg-type]

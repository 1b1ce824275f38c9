#!/usr/bin/env python3
"""
TeamUp API - HTTP API layer for project vacancy join requests.

This is the FastAPI application behind the team-building frontend. It serves:
- Join request creation for vacancies
- Owner decisions (approve/deny) with their cascades
- Per-project request listings
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamup.auth_middleware import AuthMiddleware, AuthUser, get_current_user
from teamup.jwt_auth import JWTValidator, PocketBaseTokenValidator
from teamup.logging_config import configure_logging

from .dependencies import authenticate_pb, create_pb_client
from .error_handlers import install_error_handlers
from .settings import Settings, get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    app.state.pb = create_pb_client(settings)
    if not settings.skip_pb_auth:
        await authenticate_pb(app.state.pb, settings)
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    yield


def _build_validators(settings: Settings) -> tuple[JWTValidator | None, PocketBaseTokenValidator | None]:
    jwt_validator = None
    if settings.jwt_secret:
        jwt_validator = JWTValidator(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer or None,
        )

    pb_token_validator = None
    if settings.accept_pocketbase_tokens:
        pb_token_validator = PocketBaseTokenValidator(settings.pocketbase_url, settings.users_collection)

    return jwt_validator, pb_token_validator


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(title="TeamUp API", description="Vacancy join requests API", lifespan=lifespan)

    @app.exception_handler(401)
    async def unauthorized_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=401, content={"detail": str(exc.detail) if hasattr(exc, "detail") else "Unauthorized"}
        )

    @app.exception_handler(403)
    async def forbidden_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=403, content={"detail": str(exc.detail) if hasattr(exc, "detail") else "Forbidden"}
        )

    install_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    # Added after CORS so it runs inside it (middleware order is reversed)
    jwt_validator, pb_token_validator = _build_validators(settings)
    app.add_middleware(
        AuthMiddleware,
        auth_mode=settings.get_effective_auth_mode(),
        jwt_validator=jwt_validator,
        pb_token_validator=pb_token_validator,
        bypass_user_id=settings.bypass_user_id,
    )

    from .routers import requests

    app.include_router(requests.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "teamup-api"}

    @app.get("/api/user/me")
    async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> dict[str, Any]:
        """Get current user information."""
        return user.to_dict()

    return app


# Create app instance for uvicorn
app = create_app()

"""
Authentication middleware - resolves the calling user from a bearer token.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from .jwt_auth import JWTValidator, PocketBaseTokenValidator, extract_bearer_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {"/health", "/api/health", "/docs", "/openapi.json"}


def _is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    if Path("/.dockerenv").exists():
        return True
    if os.getenv("DOCKER_CONTAINER") == "true":
        return True
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


class AuthUser:
    """Represents an authenticated user."""

    def __init__(self, id: str, username: str, email: str, display_name: str):
        self.id = id
        self.username = username
        self.email = email
        self.display_name = display_name

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> AuthUser:
        user_id = str(claims.get("sub", ""))
        username = claims.get("preferred_username") or claims.get("username") or user_id
        return cls(
            id=user_id,
            username=username,
            email=claims.get("email", ""),
            display_name=claims.get("name", username),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert user to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "display_name": self.display_name,
        }


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling authentication.

    Supports two modes:
    - bypass: every request runs as a fixed development user
    - production: the bearer token must validate as an app JWT or a PocketBase user token
    """

    def __init__(
        self,
        app: Any,
        auth_mode: str,
        jwt_validator: JWTValidator | None = None,
        pb_token_validator: PocketBaseTokenValidator | None = None,
        bypass_user_id: str = "dev-user",
    ):
        super().__init__(app)
        self.auth_mode = auth_mode.lower()
        self.jwt_validator = jwt_validator
        self.pb_token_validator = pb_token_validator
        self.bypass_user_id = bypass_user_id

        if self.auth_mode not in ["bypass", "production"]:
            raise ValueError(f"Invalid AUTH_MODE: {auth_mode}. Must be bypass or production")

        if self.auth_mode == "bypass" and _is_docker_environment():
            raise ValueError(
                "SECURITY ERROR: AUTH_MODE=bypass is not allowed in Docker containers. "
                "Docker deployments must use AUTH_MODE=production."
            )

        if self.auth_mode == "production" and not (self.jwt_validator or self.pb_token_validator):
            raise ValueError("Production mode requires at least one token validator")

        logger.info(f"Authentication middleware initialized in {self.auth_mode} mode")

    def _extract_user(self, authorization: str | None) -> AuthUser | None:
        """Resolve the user from the Authorization header.

        Blocking: the PocketBase fallback makes an HTTP call.
        """
        token = extract_bearer_token(authorization)
        if not token:
            logger.debug("No bearer token found in Authorization header")
            return None

        claims: dict[str, Any] | None = None
        if self.jwt_validator is not None:
            claims = self.jwt_validator.validate_token(token)

        if not claims and self.pb_token_validator is not None:
            logger.debug("JWT validation failed, trying PocketBase token validation")
            claims = self.pb_token_validator.validate_token(token)

        if not claims or not claims.get("sub"):
            logger.warning("All token validation methods failed")
            return None

        return AuthUser.from_claims(claims)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Attach the authenticated user to request.state or answer 401."""
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if self.auth_mode == "bypass":
            user: AuthUser | None = AuthUser(
                id=self.bypass_user_id,
                username="DevUser",
                email="dev_user@example.com",
                display_name="Dev User",
            )
        else:
            user = await asyncio.to_thread(self._extract_user, request.headers.get("Authorization"))

        if not user:
            if request.method == "OPTIONS":
                return await call_next(request)

            logger.warning(f"Unauthenticated request to {request.url.path} in {self.auth_mode} mode")
            # BaseHTTPMiddleware turns raised HTTPExceptions into 500s
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})

        request.state.user = user
        logger.debug(f"Authenticated request from {user.username} to {request.url.path}")
        return await call_next(request)


def get_current_user(request: Request) -> AuthUser:
    """
    Dependency to get the current authenticated user.

    Usage:
        @router.post("/requests/{vacancy_id}")
        async def create(vacancy_id: str, user: AuthUser = Depends(get_current_user)):
            ...
    """
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user  # type: ignore[no-any-return]

"""
Bearer token validation: application-signed JWTs and PocketBase user tokens.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import threading
import time
from typing import Any, cast

import httpx
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

logger = logging.getLogger(__name__)


def _decode_jwt_claims_unsafe(token: str) -> dict[str, Any]:
    """Decode JWT claims WITHOUT verification. For inspection only."""
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return {}
        payload = parts[1]
        payload += "=" * (-len(payload) % 4)
        decoded = base64.urlsafe_b64decode(payload)
        return cast(dict[str, Any], json.loads(decoded))
    except (ValueError, json.JSONDecodeError):
        return {}


class JWTValidator:
    """Validates tokens signed with the application's shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", issuer: str | None = None):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer or None

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Validate a JWT and return its claims, or None when it is not acceptable.

        The subject (`sub`) must be present; it is the user id.
        """
        options = {
            "verify_exp": True,
            "verify_iat": True,
            "verify_iss": self.issuer is not None,
            "verify_aud": False,
            "require": ["sub"],
        }
        try:
            claims = cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    self.secret,
                    algorithms=[self.algorithm],
                    issuer=self.issuer,
                    options=options,
                ),
            )
        except ExpiredSignatureError:
            logger.warning("Token has expired")
            return None
        except InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            return None

        logger.debug(f"Token validated, sub: {claims.get('sub')}")
        return claims


class PocketBaseTokenValidator:
    """Validates PocketBase-issued user tokens by calling PocketBase."""

    SUPERUSER_COLLECTION_ID = "pbc_3142635823"

    def __init__(self, pocketbase_url: str, users_collection: str = "users"):
        self.pocketbase_url = pocketbase_url.rstrip("/")
        self.users_collection = users_collection
        self._validation_cache: dict[str, tuple[dict[str, Any], float]] = {}  # token_hash -> (claims, expiry)
        self._cache_ttl = 60
        # validate_token runs in worker threads
        self._cache_lock = threading.Lock()

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Validate a PocketBase token via auth-refresh.

        Returns claims built from the user record if valid, None otherwise.
        Superuser tokens are always rejected.
        """
        unverified_claims = _decode_jwt_claims_unsafe(token)
        collection_id = unverified_claims.get("collectionId", "")
        if collection_id in (self.SUPERUSER_COLLECTION_ID, "_superusers"):
            logger.warning("SECURITY: Rejecting _superusers admin token for API authentication")
            return None

        cache_key = hashlib.sha256(token.encode()).hexdigest()[:32]
        cached = self._validation_cache.get(cache_key)
        if cached is not None:
            claims, expiry = cached
            if time.time() < expiry:
                return claims

        try:
            response = httpx.post(
                f"{self.pocketbase_url}/api/collections/{self.users_collection}/auth-refresh",
                headers={"Authorization": f"Bearer {token}"},
                timeout=5.0,
            )
        except httpx.TimeoutException:
            logger.warning("PocketBase token validation timed out")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error validating PocketBase token: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"PocketBase auth-refresh returned status {response.status_code}")
            return None

        record = response.json().get("record", {})
        claims = {
            "sub": record.get("id", ""),
            "email": record.get("email", ""),
            "name": record.get("name") or record.get("username", ""),
            "preferred_username": record.get("username", ""),
        }
        self._remember(cache_key, claims)
        return claims

    def _remember(self, cache_key: str, claims: dict[str, Any]) -> None:
        """Cache claims for a token, evicting entries that have expired."""
        now = time.time()
        with self._cache_lock:
            expired = [key for key, (_, expiry) in self._validation_cache.items() if expiry <= now]
            for key in expired:
                del self._validation_cache[key]
            self._validation_cache[cache_key] = (claims, now + self._cache_ttl)


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Extract bearer token from Authorization header."""
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]

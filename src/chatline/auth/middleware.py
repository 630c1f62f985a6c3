"""Authentication dependencies for FastAPI and GraphQL."""

from __future__ import annotations

from fastapi import Header, HTTPException

from ..database.connection import get_async_session
from ..logging import bind_user_id, get_logger
from .adapters.base import AuthenticationError
from .context import AuthContext
from .factory import get_auth_adapter
from .provisioning import ensure_local_user

logger = get_logger(__name__)


def _unauthenticated() -> AuthContext:
    return AuthContext(user_id=None, principal=None, token=None)


async def get_auth_context(authorization: str | None = Header(None)) -> AuthContext:
    """
    Extract authentication context from the Authorization header value.

    This function:
    1. Extracts the Bearer token
    2. Verifies it using the configured auth adapter
    3. Performs JIT user provisioning
    4. Returns the AuthContext for the request

    A missing header yields an unauthenticated context with every adapter,
    including the no-auth one.
    """
    if not authorization:
        return _unauthenticated()

    adapter = get_auth_adapter()

    if not authorization.startswith("Bearer "):
        logger.warning("Invalid authorization format received")
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]

    if not token:
        logger.warning("Empty token provided")
        raise HTTPException(
            status_code=401,
            detail="Empty token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        principal = await adapter.verify_token(token)
    except AuthenticationError as e:
        logger.warning("Authentication failed", error=str(e))
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    try:
        async with get_async_session() as db:
            user_id = await ensure_local_user(db, principal)
    except Exception as e:
        logger.error(
            "User provisioning failed",
            error=str(e),
            principal_provider=principal.get("provider"),
            principal_subject=principal.get("subject"),
        )
        raise HTTPException(status_code=503, detail="Authentication backend unavailable") from e

    bind_user_id(str(user_id))
    logger.debug("Request authenticated", provider=principal.get("provider"))

    return AuthContext(user_id=user_id, principal=principal, token=token)


async def get_auth_context_optional(authorization: str | None = Header(None)) -> AuthContext:
    """
    Optional authentication - returns an unauthenticated context on any failure.

    Use this where an unauthenticated caller must be rejected by the caller
    itself (GraphQL resolvers raise AuthorizationError).
    """
    try:
        return await get_auth_context(authorization)
    except HTTPException:
        return _unauthenticated()

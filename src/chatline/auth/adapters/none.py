"""No-auth adapter for local development without authentication."""

from __future__ import annotations

import os
from uuid import UUID

from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)


class NoAuthAdapter:
    """
    No-auth adapter that bypasses authentication for local development.

    Every non-empty token maps to one principal. A token of the form
    ``dev-token|<subject>`` selects a different subject, so several
    development users can talk to each other.
    WARNING: Only use this in development environments!
    """

    def __init__(self, default_user_id: str = "dev-user"):
        self.default_user_id = default_user_id

        environment = os.getenv("CHATLINE_ENVIRONMENT", "").lower()
        if environment in ("production", "prod"):
            logger.error(
                "NoAuthAdapter detected in production environment! "
                "This is a security risk and should never be used in production.",
                environment=environment,
            )
            raise RuntimeError(
                "NoAuthAdapter cannot be used in production environments. "
                "Please configure a proper authentication provider."
            )

        logger.warning(
            "NoAuthAdapter is active - every bearer token will be accepted! "
            "This should ONLY be used in development.",
            user_id=default_user_id,
        )

    def _subject_for(self, token: str) -> str:
        parts = token.split("|")
        if len(parts) >= 2 and parts[0] == "dev-token" and parts[1]:
            return parts[1]
        return self.default_user_id

    async def verify_token(self, token: str) -> Principal:
        """
        Return a development principal without verifying anything.

        Any non-empty token will be accepted.
        """
        if not token:
            raise AuthenticationError("Token required (even in no-auth mode)")

        subject = self._subject_for(token)
        return Principal(
            provider="none",
            subject=subject,
            email=f"{subject}@example.com",
            email_verified=True,
            display_name="Development User",
            username=subject,
            claims={
                "mode": "development",
                "token": token[:20] + "..." if len(token) > 20 else token,
            },
        )

    async def issue_token(self, user_id: UUID | None = None, claims: dict | None = None) -> str:
        """Issue a fake development token."""
        claims = dict(claims or {})
        subject = claims.pop("sub", None) or (str(user_id) if user_id else self.default_user_id)
        token_parts = ["dev-token", subject, "no-auth-mode"]
        token_parts.extend(f"{k}={v}" for k, v in claims.items())

        return "|".join(token_parts)

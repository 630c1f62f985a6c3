"""Base authentication adapter interface and types."""

from __future__ import annotations

from typing import Literal, NotRequired, Protocol, TypedDict
from uuid import UUID


class Principal(TypedDict):
    """Identity extracted from an incoming token."""

    provider: Literal["jwt", "none"]
    subject: str  # provider user id (sub)
    email: NotRequired[str]
    email_verified: NotRequired[bool]
    display_name: NotRequired[str]
    username: NotRequired[str]
    avatar_url: NotRequired[str]
    claims: NotRequired[dict]


class AuthAdapter(Protocol):
    """Provider-agnostic authentication adapter interface."""

    async def verify_token(self, token: str) -> Principal:
        """
        Verify a token and return the principal identity.

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...

    async def issue_token(self, user_id: UUID | None = None, claims: dict | None = None) -> str:
        """Issue a new token (optional - not all providers support this)."""
        ...


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    pass

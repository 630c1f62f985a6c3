"""
User GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry

from ...events.models import UserSnapshot


@strawberry.type
class User:
    """The authenticated user's own record."""

    id: UUID
    username: str | None
    name: str | None
    email: str | None
    email_verified: bool
    image: str | None
    created_at: datetime | None


@strawberry.type
class ParticipantUser:
    """Public view of a user inside a conversation."""

    id: UUID
    username: str | None

    @classmethod
    def from_snapshot(cls, snapshot: UserSnapshot) -> "ParticipantUser":
        return cls(id=snapshot.id, username=snapshot.username)

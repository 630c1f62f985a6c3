"""
Message GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry

from ...events.models import MessageSnapshot
from .user import ParticipantUser


@strawberry.type
class Message:
    """A message, exposed only as a conversation's latest message."""

    id: UUID
    body: str
    sender: ParticipantUser
    created_at: datetime | None

    @classmethod
    def from_snapshot(cls, snapshot: MessageSnapshot) -> "Message":
        return cls(
            id=snapshot.id,
            body=snapshot.body,
            sender=ParticipantUser.from_snapshot(snapshot.sender),
            created_at=snapshot.created_at,
        )

"""
Conversation GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry

from ...events.models import ConversationSnapshot, ParticipantSnapshot
from .message import Message
from .user import ParticipantUser


@strawberry.type
class Participant:
    """A user's membership in a conversation, with their read state."""

    id: UUID
    user: ParticipantUser
    has_seen_latest_message: bool

    @classmethod
    def from_snapshot(cls, snapshot: ParticipantSnapshot) -> "Participant":
        return cls(
            id=snapshot.id,
            user=ParticipantUser.from_snapshot(snapshot.user),
            has_seen_latest_message=snapshot.has_seen_latest_message,
        )


@strawberry.type
class Conversation:
    """Conversation type for GraphQL API."""

    id: UUID
    participants: list[Participant]
    latest_message: Message | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_snapshot(cls, snapshot: ConversationSnapshot) -> "Conversation":
        return cls(
            id=snapshot.id,
            participants=[Participant.from_snapshot(p) for p in snapshot.participants],
            latest_message=(
                Message.from_snapshot(snapshot.latest_message)
                if snapshot.latest_message is not None
                else None
            ),
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at,
        )


@strawberry.type
class CreateConversationResponse:
    """Result of createConversation."""

    conversation_id: UUID


@strawberry.type
class ConversationUpdatedPayload:
    """Payload of the conversationUpdated subscription."""

    conversation: Conversation

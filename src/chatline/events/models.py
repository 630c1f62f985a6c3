"""Pydantic models for conversation events published on the event bus."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ..dbmodels import ConversationParticipants, Conversations, Messages, Users


class UserSnapshot(BaseModel):
    id: UUID
    username: str | None = None

    @classmethod
    def from_model(cls, user: Users) -> UserSnapshot:
        return cls(id=user.id, username=user.username)


class ParticipantSnapshot(BaseModel):
    id: UUID
    user_id: UUID
    has_seen_latest_message: bool
    user: UserSnapshot

    @classmethod
    def from_model(cls, participant: ConversationParticipants) -> ParticipantSnapshot:
        return cls(
            id=participant.id,
            user_id=participant.user_id,
            has_seen_latest_message=participant.has_seen_latest_message,
            user=UserSnapshot.from_model(participant.user),
        )


class MessageSnapshot(BaseModel):
    id: UUID
    body: str
    sender_id: UUID
    sender: UserSnapshot
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, message: Messages) -> MessageSnapshot:
        return cls(
            id=message.id,
            body=message.body,
            sender_id=message.sender_id,
            sender=UserSnapshot.from_model(message.sender),
            created_at=message.created_at,
        )


class ConversationSnapshot(BaseModel):
    """A conversation with participants and latest message, as loaded for clients."""

    id: UUID
    participants: list[ParticipantSnapshot] = []
    latest_message: MessageSnapshot | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, conversation: Conversations) -> ConversationSnapshot:
        """Build a snapshot from a conversation loaded with its relations."""
        latest = conversation.latest_message
        return cls(
            id=conversation.id,
            participants=[ParticipantSnapshot.from_model(p) for p in conversation.participants],
            latest_message=MessageSnapshot.from_model(latest) if latest is not None else None,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class ConversationEvent(BaseModel):
    topic: str
    conversation: ConversationSnapshot
    published_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def participant_user_ids(self) -> set[str]:
        """User ids of every participant, as strings."""
        return {str(p.user_id) for p in self.conversation.participants}

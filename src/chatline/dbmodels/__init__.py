"""
Database models for Chatline (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKeyConstraint,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint(
            "auth_provider",
            "auth_subject",
            name="users_auth_provider_auth_subject_key",
        ),
        UniqueConstraint("username", name="users_username_key"),
        Index("idx_users_auth", "auth_provider", "auth_subject"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    auth_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    auth_subject: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    image: Mapped[str | None] = mapped_column(Text)
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now()
    )

    conversation_participants: Mapped[list["ConversationParticipants"]] = relationship(
        "ConversationParticipants", uselist=True, back_populates="user"
    )
    messages: Mapped[list["Messages"]] = relationship(
        "Messages", uselist=True, back_populates="sender"
    )


class Conversations(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        ForeignKeyConstraint(
            ["latest_message_id"],
            ["messages.id"],
            ondelete="SET NULL",
            use_alter=True,
            name="conversations_latest_message_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="conversations_pkey"),
        UniqueConstraint("latest_message_id", name="conversations_latest_message_id_key"),
        Index("idx_conversations_updated", "updated_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    latest_message_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now()
    )

    participants: Mapped[list["ConversationParticipants"]] = relationship(
        "ConversationParticipants",
        uselist=True,
        back_populates="conversation",
        cascade="all, delete-orphan",
    )
    messages: Mapped[list["Messages"]] = relationship(
        "Messages",
        uselist=True,
        back_populates="conversation",
        foreign_keys="Messages.conversation_id",
        cascade="all, delete-orphan",
    )
    latest_message: Mapped["Messages | None"] = relationship(
        "Messages",
        foreign_keys=[latest_message_id],
        post_update=True,
    )


class ConversationParticipants(Base):
    __tablename__ = "conversation_participants"
    __table_args__ = (
        ForeignKeyConstraint(
            ["conversation_id"],
            ["conversations.id"],
            ondelete="CASCADE",
            name="conversation_participants_conversation_id_fkey",
        ),
        ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="conversation_participants_user_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="conversation_participants_pkey"),
        UniqueConstraint(
            "conversation_id",
            "user_id",
            name="conversation_participants_conversation_id_user_id_key",
        ),
        Index("idx_conversation_participants_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    conversation_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    has_seen_latest_message: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now()
    )

    conversation: Mapped["Conversations"] = relationship(
        "Conversations", back_populates="participants"
    )
    user: Mapped["Users"] = relationship("Users", back_populates="conversation_participants")


class Messages(Base):
    __tablename__ = "messages"
    __table_args__ = (
        ForeignKeyConstraint(
            ["conversation_id"],
            ["conversations.id"],
            ondelete="CASCADE",
            name="messages_conversation_id_fkey",
        ),
        ForeignKeyConstraint(
            ["sender_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="messages_sender_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="messages_pkey"),
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    conversation_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    sender_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now()
    )

    conversation: Mapped["Conversations"] = relationship(
        "Conversations",
        back_populates="messages",
        foreign_keys=[conversation_id],
    )
    sender: Mapped["Users"] = relationship("Users", back_populates="messages")


target_metadata = Base.metadata

__all__ = [
    "Base",
    "ConversationParticipants",
    "Conversations",
    "Messages",
    "Users",
    "target_metadata",
]

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import strawberry
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import ConversationParticipants, Conversations, Messages
from ...errors import InvalidArgumentError, NotFoundError
from ...events.bus import CONVERSATION_CREATED, CONVERSATION_UPDATED, EventBus, get_event_bus
from ...events.filters import participant_filter, with_filter
from ...events.models import ConversationEvent, ConversationSnapshot
from ...events.publisher import ConversationEventPublisher
from ...logging import get_logger
from ..access_control import require_auth_context
from ..error_handling import resolver_boundary

if TYPE_CHECKING:
    from ..types.conversation import (
        Conversation,
        ConversationUpdatedPayload,
        CreateConversationResponse,
    )

logger = get_logger(__name__)


def _event_bus(info: strawberry.Info) -> EventBus:
    """The bus from the GraphQL context, or the process-wide one."""
    bus = info.context.get("event_bus")
    return bus if bus is not None else get_event_bus()


def _conversation_populated():
    """Eager-load options for a conversation as clients see it."""
    return (
        selectinload(Conversations.participants).selectinload(ConversationParticipants.user),
        selectinload(Conversations.latest_message).selectinload(Messages.sender),
    )


async def load_conversation_snapshot(
    session: AsyncSession, conversation_id: UUID
) -> ConversationSnapshot:
    """Reload a conversation with its relations and snapshot it."""
    stmt = (
        select(Conversations)
        .where(Conversations.id == conversation_id)
        .options(*_conversation_populated())
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    conversation = result.scalar_one_or_none()
    if conversation is None:
        raise NotFoundError("Conversation not found")
    return ConversationSnapshot.from_model(conversation)


# Query resolvers
async def resolve_conversations(info: strawberry.Info) -> list[Conversation]:
    """
    Resolve the conversations the authenticated user participates in.

    Most recently updated conversations come first.
    """
    from ..types.conversation import Conversation as ConversationType

    with resolver_boundary("conversations"):
        auth_context = await require_auth_context(info)

        async with get_async_session() as session:
            stmt = (
                select(Conversations)
                .where(
                    Conversations.participants.any(
                        ConversationParticipants.user_id == auth_context.user_id
                    )
                )
                .options(*_conversation_populated())
                .order_by(Conversations.updated_at.desc())
            )
            result = await session.execute(stmt)
            conversations = result.scalars().all()

            return [
                ConversationType.from_snapshot(ConversationSnapshot.from_model(c))
                for c in conversations
            ]


# Mutation resolvers
async def create_conversation(
    info: strawberry.Info, participant_ids: list[UUID]
) -> CreateConversationResponse:
    """
    Create a conversation between the given users.

    One participant row is created per distinct id. Only the creator starts
    out having seen the latest message. The populated conversation is then
    published on CONVERSATION_CREATED.
    """
    from ..types.conversation import CreateConversationResponse as ResponseType

    with resolver_boundary("createConversation", participant_count=len(participant_ids)):
        auth_context = await require_auth_context(info)

        user_ids = list(dict.fromkeys(participant_ids))
        if not user_ids:
            raise InvalidArgumentError("At least one participant is required")

        async with get_async_session() as session:
            conversation = Conversations(
                id=uuid4(),
                participants=[
                    ConversationParticipants(
                        id=uuid4(),
                        user_id=user_id,
                        has_seen_latest_message=user_id == auth_context.user_id,
                    )
                    for user_id in user_ids
                ],
            )
            conversation_id = conversation.id

            session.add(conversation)
            await session.commit()

            snapshot = await load_conversation_snapshot(session, conversation_id)

    logger.info(
        "Conversation created",
        conversation_id=str(conversation_id),
        user_id=str(auth_context.user_id),
        participant_count=len(user_ids),
    )

    await ConversationEventPublisher(_event_bus(info)).publish(CONVERSATION_CREATED, snapshot)

    return ResponseType(conversation_id=conversation_id)


async def mark_conversation_as_read(
    info: strawberry.Info, user_id: UUID, conversation_id: UUID
) -> bool:
    """
    Mark a conversation as read for one participant.

    Only the (user_id, conversation_id) participant row changes. The updated
    conversation is then published on CONVERSATION_UPDATED.
    """
    with resolver_boundary(
        "markConversationAsRead",
        conversation_id=str(conversation_id),
        participant_user_id=str(user_id),
    ):
        await require_auth_context(info)

        async with get_async_session() as session:
            stmt = select(ConversationParticipants).where(
                and_(
                    ConversationParticipants.user_id == user_id,
                    ConversationParticipants.conversation_id == conversation_id,
                )
            )
            result = await session.execute(stmt)
            participant = result.scalar_one_or_none()

            if participant is None:
                raise NotFoundError("Participant entity not found")

            participant.has_seen_latest_message = True
            await session.commit()

            snapshot = await load_conversation_snapshot(session, conversation_id)

    logger.info(
        "Conversation marked as read",
        conversation_id=str(conversation_id),
        participant_user_id=str(user_id),
    )

    await ConversationEventPublisher(_event_bus(info)).publish(CONVERSATION_UPDATED, snapshot)

    return True


# Subscription resolvers
async def _participant_events(
    info: strawberry.Info, topic: str
) -> AsyncGenerator[ConversationEvent, None]:
    """Events on ``topic`` for conversations the subscriber takes part in."""
    with resolver_boundary(f"subscribe:{topic}"):
        auth_context = await require_auth_context(info)

    logger.info("Subscriber connected", topic=topic, user_id=str(auth_context.user_id))
    events = with_filter(_event_bus(info).subscribe(topic), participant_filter(auth_context))
    try:
        async with aclosing(events) as stream:
            async for event in stream:
                yield event
    finally:
        logger.info("Subscriber disconnected", topic=topic, user_id=str(auth_context.user_id))


async def subscribe_conversation_created(
    info: strawberry.Info,
) -> AsyncGenerator[Conversation, None]:
    from ..types.conversation import Conversation as ConversationType

    async with aclosing(_participant_events(info, CONVERSATION_CREATED)) as events:
        async for event in events:
            yield ConversationType.from_snapshot(event.conversation)


async def subscribe_conversation_updated(
    info: strawberry.Info,
) -> AsyncGenerator[ConversationUpdatedPayload, None]:
    from ..types.conversation import Conversation as ConversationType
    from ..types.conversation import ConversationUpdatedPayload as PayloadType

    async with aclosing(_participant_events(info, CONVERSATION_UPDATED)) as events:
        async for event in events:
            yield PayloadType(conversation=ConversationType.from_snapshot(event.conversation))

"""
Root GraphQL subscription definitions
"""

from collections.abc import AsyncGenerator
from contextlib import aclosing

import strawberry

from ..types.conversation import Conversation, ConversationUpdatedPayload


@strawberry.type
class Subscription:
    """Root GraphQL subscription type.

    Every subscriber of an event class is fed every event; each stream only
    yields the events for conversations its subscriber participates in.
    """

    @strawberry.subscription(name="conversationCreated")
    async def conversation_created(
        self, info: strawberry.Info
    ) -> AsyncGenerator[Conversation, None]:
        """Conversations created with the current user as a participant."""
        from ..resolvers.conversation import subscribe_conversation_created

        async with aclosing(subscribe_conversation_created(info)) as stream:
            async for conversation in stream:
                yield conversation

    @strawberry.subscription(name="conversationUpdated")
    async def conversation_updated(
        self, info: strawberry.Info
    ) -> AsyncGenerator[ConversationUpdatedPayload, None]:
        """Updates to conversations the current user participates in."""
        from ..resolvers.conversation import subscribe_conversation_updated

        async with aclosing(subscribe_conversation_updated(info)) as stream:
            async for payload in stream:
                yield payload

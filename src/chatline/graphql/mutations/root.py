"""
Root GraphQL mutation definitions
"""

from uuid import UUID

import strawberry

from ..types.conversation import CreateConversationResponse


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    @strawberry.mutation(name="createConversation")
    async def create_conversation(
        self, info: strawberry.Info, participant_ids: list[UUID]
    ) -> CreateConversationResponse:
        """Create a conversation between the given users."""
        from ..resolvers.conversation import create_conversation

        return await create_conversation(info, participant_ids)

    @strawberry.mutation(name="markConversationAsRead")
    async def mark_conversation_as_read(
        self, info: strawberry.Info, user_id: UUID, conversation_id: UUID
    ) -> bool:
        """Mark a conversation as read for one participant."""
        from ..resolvers.conversation import mark_conversation_as_read

        return await mark_conversation_as_read(info, user_id, conversation_id)

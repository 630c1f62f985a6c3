"""
Root GraphQL query definitions
"""

import strawberry

from ..types.conversation import Conversation
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.auth import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def conversations(self, info: strawberry.Info) -> list[Conversation]:
        """Get the conversations the current user participates in."""
        from ..resolvers.conversation import resolve_conversations

        return await resolve_conversations(info)

"""
Tests for the GraphQL schema surface
"""

import pytest

from chatline.auth.context import AuthContext
from chatline.graphql.schema import schema, validate_schema


def test_schema_is_valid():
    validate_schema()


def test_schema_fields():
    sdl = str(schema)

    assert "me: User" in sdl
    assert "conversations: [Conversation!]!" in sdl
    assert "createConversation(participantIds: [UUID!]!): CreateConversationResponse!" in sdl
    assert "markConversationAsRead(userId: UUID!, conversationId: UUID!): Boolean!" in sdl
    assert "conversationCreated: Conversation!" in sdl
    assert "conversationUpdated: ConversationUpdatedPayload!" in sdl
    assert "hasSeenLatestMessage: Boolean!" in sdl


def anonymous_context(event_bus) -> dict:
    return {
        "auth_context": AuthContext(user_id=None, principal=None, token=None),
        "event_bus": event_bus,
    }


@pytest.mark.asyncio
async def test_unauthenticated_query_rejected(event_bus):
    result = await schema.execute(
        "query { conversations { id } }",
        context_value=anonymous_context(event_bus),
    )

    assert result.errors is not None
    assert result.errors[0].message == "Not authorized"


@pytest.mark.asyncio
async def test_unauthenticated_mutation_rejected(event_bus):
    result = await schema.execute(
        """
        mutation Create($ids: [UUID!]!) {
            createConversation(participantIds: $ids) { conversationId }
        }
        """,
        variable_values={"ids": ["6f1c1a9e-4a0c-4c1e-9e53-0d1f6f0b7d11"]},
        context_value=anonymous_context(event_bus),
    )

    assert result.errors is not None
    assert result.errors[0].message == "Not authorized"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_list_over_graphql(sqlite_store, users, auth_context_for, event_bus):
    context = {"auth_context": auth_context_for(users["u1"]), "event_bus": event_bus}

    created = await schema.execute(
        """
        mutation Create($ids: [UUID!]!) {
            createConversation(participantIds: $ids) { conversationId }
        }
        """,
        variable_values={"ids": [str(users["u1"]), str(users["u2"])]},
        context_value=context,
    )
    assert created.errors is None
    conversation_id = created.data["createConversation"]["conversationId"]

    listed = await schema.execute(
        """
        query {
            conversations {
                id
                participants { hasSeenLatestMessage user { id username } }
                latestMessage { id }
            }
        }
        """,
        context_value=context,
    )
    assert listed.errors is None
    (conversation,) = listed.data["conversations"]
    assert conversation["id"] == conversation_id
    assert conversation["latestMessage"] is None
    assert {
        p["user"]["username"]: p["hasSeenLatestMessage"] for p in conversation["participants"]
    } == {"u1": True, "u2": False}

    marked = await schema.execute(
        """
        mutation Read($user: UUID!, $conversation: UUID!) {
            markConversationAsRead(userId: $user, conversationId: $conversation)
        }
        """,
        variable_values={"user": str(users["u2"]), "conversation": conversation_id},
        context_value=context,
    )
    assert marked.errors is None
    assert marked.data == {"markConversationAsRead": True}

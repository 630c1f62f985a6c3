"""
Tests for per-subscriber filtering of conversation events
"""

import asyncio
import itertools
import uuid

import pytest

from chatline.auth.context import AuthContext
from chatline.errors import AuthorizationError
from chatline.events.bus import CONVERSATION_CREATED, InMemoryEventBus
from chatline.events.filters import (
    is_conversation_participant,
    participant_filter,
    subscriber_receives,
    with_filter,
)
from chatline.events.models import (
    ConversationEvent,
    ConversationSnapshot,
    ParticipantSnapshot,
    UserSnapshot,
)

U1, U2, U3 = (uuid.uuid5(uuid.NAMESPACE_URL, f"chatline:{name}") for name in ("u1", "u2", "u3"))


def make_event(*participant_ids: uuid.UUID, topic: str = CONVERSATION_CREATED):
    return ConversationEvent(
        topic=topic,
        conversation=ConversationSnapshot(
            id=uuid.uuid4(),
            participants=[
                ParticipantSnapshot(
                    id=uuid.uuid4(),
                    user_id=user_id,
                    has_seen_latest_message=False,
                    user=UserSnapshot(id=user_id, username=None),
                )
                for user_id in participant_ids
            ],
        ),
    )


def session(user_id):
    return AuthContext(
        user_id=user_id,
        principal={"provider": "none", "subject": str(user_id)},
        token="t",
    )


class TestIsConversationParticipant:
    def test_participant_receives_event(self):
        event = make_event(U1, U2)

        assert is_conversation_participant(event, U1) is True
        assert is_conversation_participant(event, U2) is True

    def test_non_participant_does_not_receive_event(self):
        """u3 is not told about a conversation between u1 and u2."""
        event = make_event(U1, U2)

        assert is_conversation_participant(event, U3) is False

    def test_string_user_id_matches(self):
        event = make_event(U1)

        assert is_conversation_participant(event, str(U1)) is True

    def test_missing_identity_raises(self):
        with pytest.raises(AuthorizationError, match="Not authorized"):
            is_conversation_participant(make_event(U1), None)

    def test_delivery_iff_membership(self):
        everyone = [U1, U2, U3]
        for size in range(len(everyone) + 1):
            for members in itertools.combinations(everyone, size):
                event = make_event(*members)
                for subscriber in everyone:
                    assert is_conversation_participant(event, subscriber) == (
                        subscriber in members
                    )


class TestSubscriberReceives:
    def test_authenticated_participant(self):
        assert subscriber_receives(make_event(U1, U2), session(U2)) is True

    def test_no_session_raises(self):
        with pytest.raises(AuthorizationError):
            subscriber_receives(make_event(U1), None)

    def test_unauthenticated_session_raises(self):
        anonymous = AuthContext(user_id=None, principal=None, token=None)

        with pytest.raises(AuthorizationError):
            subscriber_receives(make_event(U1), anonymous)


async def _collect(source, limit: int) -> list:
    items = []
    async for item in source:
        items.append(item)
        if len(items) == limit:
            break
    return items


async def _aiter(items):
    for item in items:
        yield item


class TestWithFilter:
    @pytest.mark.asyncio
    async def test_yields_only_admitted_items(self):
        items = await _collect(with_filter(_aiter(range(10)), lambda n: n % 2 == 0), limit=10)

        assert items == [0, 2, 4, 6, 8]

    @pytest.mark.asyncio
    async def test_async_predicate(self):
        async def is_big(n: int) -> bool:
            await asyncio.sleep(0)
            return n > 2

        items = await _collect(with_filter(_aiter([1, 2, 3, 4]), is_big), limit=10)

        assert items == [3, 4]

    @pytest.mark.asyncio
    async def test_predicate_error_ends_stream(self):
        def explode(_):
            raise AuthorizationError()

        stream = with_filter(_aiter([1, 2]), explode)

        with pytest.raises(AuthorizationError):
            await stream.__anext__()

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_closing_filtered_stream_unsubscribes(self):
        bus = InMemoryEventBus()
        stream = with_filter(bus.subscribe(CONVERSATION_CREATED), participant_filter(session(U1)))
        assert bus.subscriber_count(CONVERSATION_CREATED) == 1

        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        await bus.publish(CONVERSATION_CREATED, make_event(U2))
        await bus.publish(CONVERSATION_CREATED, make_event(U1, U2))

        delivered = await asyncio.wait_for(pending, timeout=1)
        assert delivered.participant_user_ids() == {str(U1), str(U2)}

        await stream.aclose()
        assert bus.subscriber_count(CONVERSATION_CREATED) == 0

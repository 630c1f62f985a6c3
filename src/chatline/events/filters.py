"""
Per-subscriber filtering of broadcast conversation events.

Events are fanned out to every subscriber of a topic; the predicates here decide
which of them a given subscriber actually receives.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID

from ..errors import AuthorizationError
from ..logging import get_logger

if TYPE_CHECKING:
    from ..auth.context import AuthContext
    from .models import ConversationEvent

logger = get_logger(__name__)

T = TypeVar("T")

Predicate = Callable[[T], "bool | Awaitable[bool]"]


def is_conversation_participant(event: ConversationEvent, user_id: UUID | str | None) -> bool:
    """
    Decide whether ``user_id`` takes part in the event's conversation.

    Raises:
        AuthorizationError: If there is no subscriber identity to check.
    """
    if user_id is None:
        raise AuthorizationError()
    return str(user_id) in event.participant_user_ids()


def subscriber_receives(event: ConversationEvent, session: AuthContext | None) -> bool:
    """Delivery rule for conversation events: only participants receive them."""
    if session is None or not session.is_authenticated:
        raise AuthorizationError()
    return is_conversation_participant(event, session.user_id)


def participant_filter(session: AuthContext | None) -> Callable[[ConversationEvent], bool]:
    """Bind ``subscriber_receives`` to one subscriber's session."""

    def predicate(event: ConversationEvent) -> bool:
        admitted = subscriber_receives(event, session)
        if not admitted:
            logger.debug(
                "Event withheld from non-participant",
                topic=event.topic,
                conversation_id=str(event.conversation.id),
            )
        return admitted

    return predicate


async def with_filter(source: AsyncIterator[T], predicate: Predicate[T]) -> AsyncIterator[T]:
    """
    Yield the items of ``source`` that ``predicate`` admits.

    The predicate may be sync or async. An exception raised by it ends the
    stream; the source is closed either way.
    """
    try:
        async for item in source:
            admitted = predicate(item)
            if inspect.isawaitable(admitted):
                admitted = await admitted
            if admitted:
                yield item
    finally:
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()

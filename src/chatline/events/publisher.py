"""Publisher for conversation lifecycle events."""

from __future__ import annotations

from ..logging import get_logger
from .bus import EventBus, get_event_bus
from .models import ConversationEvent, ConversationSnapshot

logger = get_logger(__name__)


class ConversationEventPublisher:
    """Publishes conversation snapshots after the store write has committed.

    Publishing is fire-and-forget: a bus failure is logged and does not undo
    or fail the write that preceded it.
    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus or get_event_bus()

    async def publish(self, topic: str, conversation: ConversationSnapshot) -> ConversationEvent:
        event = ConversationEvent(topic=topic, conversation=conversation)
        logger.info(
            "Publishing conversation event",
            topic=topic,
            conversation_id=str(conversation.id),
            participants=len(conversation.participants),
        )
        try:
            await self._bus.publish(topic, event)
        except Exception as e:
            logger.error(
                "Failed to publish conversation event",
                topic=topic,
                conversation_id=str(conversation.id),
                error=str(e),
            )
        return event

"""Conversation events: payload models, the event bus and subscriber filters."""

from .bus import (
    CONVERSATION_CREATED,
    CONVERSATION_UPDATED,
    EventBus,
    InMemoryEventBus,
    RedisEventBus,
    close_event_bus,
    get_event_bus,
    set_event_bus,
)
from .filters import is_conversation_participant, participant_filter, with_filter
from .models import ConversationEvent, ConversationSnapshot

__all__ = [
    "CONVERSATION_CREATED",
    "CONVERSATION_UPDATED",
    "ConversationEvent",
    "ConversationSnapshot",
    "EventBus",
    "InMemoryEventBus",
    "RedisEventBus",
    "close_event_bus",
    "get_event_bus",
    "is_conversation_participant",
    "participant_filter",
    "set_event_bus",
    "with_filter",
]

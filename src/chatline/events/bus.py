"""Event bus for conversation lifecycle events.

Every subscriber of a topic receives every event published on it; per-subscriber
filtering happens downstream (see ``filters``).
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any, Protocol

from pydantic import ValidationError

from ..config import settings
from ..logging import get_logger
from .models import ConversationEvent

logger = get_logger(__name__)

CONVERSATION_CREATED = "CONVERSATION_CREATED"
CONVERSATION_UPDATED = "CONVERSATION_UPDATED"


class EventBus(Protocol):
    """Publish/subscribe interface used by the resolvers."""

    async def publish(self, topic: str, event: ConversationEvent) -> None: ...

    def subscribe(self, *topics: str) -> AsyncIterator[ConversationEvent]: ...

    async def close(self) -> None: ...


_CLOSED = object()


class _QueueSubscription:
    """Async iterator over one subscriber's queue.

    Registered with the bus on construction, so events published after
    ``subscribe()`` returns are never missed.
    """

    def __init__(self, bus: InMemoryEventBus, topics: tuple[str, ...]):
        self._bus = bus
        self._topics = topics
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        for topic in topics:
            bus._subscribers[topic].add(self._queue)

    def __aiter__(self) -> _QueueSubscription:
        return self

    async def __anext__(self) -> ConversationEvent:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        # wakes a consumer blocked in __anext__ on another task
        self._queue.put_nowait(_CLOSED)
        for topic in self._topics:
            queues = self._bus._subscribers.get(topic)
            if queues is None:
                continue
            queues.discard(self._queue)
            if not queues:
                del self._bus._subscribers[topic]


class InMemoryEventBus:
    """In-process broadcast bus with one unbounded queue per subscriber."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[asyncio.Queue[Any]]] = defaultdict(set)

    async def publish(self, topic: str, event: ConversationEvent) -> None:
        queues = list(self._subscribers.get(topic, ()))
        for queue in queues:
            queue.put_nowait(event)
        logger.debug(
            "Event published",
            topic=topic,
            conversation_id=str(event.conversation.id),
            subscribers=len(queues),
        )

    def subscribe(self, *topics: str) -> _QueueSubscription:
        if not topics:
            raise ValueError("At least one topic is required")
        return _QueueSubscription(self, topics)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    async def close(self) -> None:
        for queue in {q for queues in self._subscribers.values() for q in queues}:
            queue.put_nowait(_CLOSED)
        self._subscribers.clear()


class RedisEventBus:
    """Event bus backed by Redis pub/sub, for deployments with several API processes."""

    def __init__(self, client=None, channel_prefix: str | None = None) -> None:
        if client is None:
            from ..redis_pool import get_redis_client

            client = get_redis_client()
        self._redis = client
        self._prefix = channel_prefix or settings.event_channel_prefix

    def _channel(self, topic: str) -> str:
        return f"{self._prefix}:{topic}"

    async def publish(self, topic: str, event: ConversationEvent) -> None:
        channel = self._channel(topic)
        json_data = event.model_dump_json()
        receivers = await self._redis.publish(channel, json_data)
        logger.debug(
            "Event published to Redis",
            topic=topic,
            channel=channel,
            conversation_id=str(event.conversation.id),
            receivers=receivers,
        )

    def subscribe(self, *topics: str) -> AsyncIterator[ConversationEvent]:
        if not topics:
            raise ValueError("At least one topic is required")
        return self._listen([self._channel(topic) for topic in topics])

    async def _listen(self, channels: list[str]) -> AsyncIterator[ConversationEvent]:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(*channels)
        logger.info("Subscribed to Redis channels", channels=channels)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    yield ConversationEvent.model_validate_json(message["data"])
                except ValidationError as e:
                    logger.warning(
                        "Discarding malformed event",
                        channel=message.get("channel"),
                        error=str(e),
                    )
        finally:
            logger.info("Unsubscribing from Redis channels", channels=channels)
            await pubsub.unsubscribe(*channels)
            await pubsub.aclose()

    async def close(self) -> None:
        from ..redis_pool import close_redis_pool

        await close_redis_pool()


_event_bus: EventBus | None = None


def create_event_bus(backend: str | None = None) -> EventBus:
    """Create an event bus for the given backend name ('memory' or 'redis')."""
    backend = backend or settings.event_bus_backend
    if backend == "memory":
        return InMemoryEventBus()
    if backend == "redis":
        return RedisEventBus()
    raise ValueError(f"Unsupported event bus backend: {backend}")


def get_event_bus() -> EventBus:
    """Get the process-wide event bus, creating it on first use."""
    global _event_bus
    if _event_bus is None:
        _event_bus = create_event_bus()
        logger.info("Event bus initialized", backend=type(_event_bus).__name__)
    return _event_bus


def set_event_bus(bus: EventBus | None) -> None:
    """Replace the process-wide event bus (tests, custom wiring)."""
    global _event_bus
    _event_bus = bus


async def close_event_bus() -> None:
    global _event_bus
    if _event_bus is not None:
        await _event_bus.close()
        _event_bus = None

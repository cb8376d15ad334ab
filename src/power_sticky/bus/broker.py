"""Event bus implementations."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Protocol

logger = logging.getLogger(__name__)

Handler = Callable[[object], Awaitable[None]]


class EventBus(Protocol):
    def subscribe(self, topic: str, handler: Handler) -> None: ...

    def unsubscribe(self, topic: str, handler: Handler) -> None: ...

    async def publish(self, topic: str, message: object) -> None: ...


class InMemoryBus:
    """Fire-and-forget delivery: a failing handler never reaches the publisher."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> None:
        self._handlers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        handlers = self._handlers.get(topic)
        if handlers and handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, message: object) -> None:
        handlers = list(self._handlers.get(topic, []))
        for handler in handlers:
            try:
                await handler(message)
            except Exception:
                logger.exception("Handler for %s failed", topic)

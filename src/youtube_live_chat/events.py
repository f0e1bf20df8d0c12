"""
Event surface of the live chat client.

Hosts subscribe handlers per event kind. Events are delivered in the order
they are emitted, and within one kind in subscription order. Late subscribers
get no replay.
"""

import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

EventHandler = Callable[[Any], Awaitable[None] | None]


class EventKind(str, Enum):
    """Kinds of notifications emitted by the client."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    MESSAGES_RECEIVED = "messages_received"
    POLLING_FAILED = "polling_failed"


class Subscription:
    """Handle returned by ``EventBus.subscribe``."""

    def __init__(self, bus: "EventBus", kind: EventKind, handler: EventHandler):
        self._bus = bus
        self.kind = kind
        self.handler = handler

    @property
    def active(self) -> bool:
        return self._bus.is_subscribed(self.kind, self.handler)

    def unsubscribe(self) -> None:
        self._bus.unsubscribe(self.kind, self.handler)


class EventBus:
    """Typed publish/subscribe channel with one FIFO subscriber list per kind."""

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {
            kind: [] for kind in EventKind
        }

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Subscription:
        """
        Register a handler for one event kind.

        Args:
            kind: Event kind to listen to
            handler: Plain or async callable taking the event payload

        Returns:
            Subscription that can be used to unsubscribe
        """
        self._handlers[EventKind(kind)].append(handler)
        return Subscription(self, EventKind(kind), handler)

    def unsubscribe(self, kind: EventKind, handler: EventHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers[EventKind(kind)]
        if handler in handlers:
            handlers.remove(handler)

    def is_subscribed(self, kind: EventKind, handler: EventHandler) -> bool:
        return handler in self._handlers[EventKind(kind)]

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self._handlers[EventKind(kind)])

    async def emit(self, kind: EventKind, payload: Any) -> None:
        """
        Deliver a payload to every handler of ``kind``, one after another.

        A failing handler is logged and does not prevent delivery to the
        remaining handlers.
        """
        for handler in list(self._handlers[kind]):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_kind=kind.value,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                    exc_info=True,
                )

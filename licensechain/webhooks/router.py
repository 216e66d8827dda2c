"""Event routing for verified webhook events.

The router is a dispatch table from event-type string to handler. Every
accepted event type gets a built-in handler that acknowledges the event;
applications replace those with their own. Types with no handler fall through
to the default handler, which marks the event as ignored. Unknown event types
are never an error.
"""

import threading
from typing import Any, Callable, Dict, List, Optional

from ..logging import get_logger
from .models import EventTypeLike, VerifiedEvent, WebhookEventType, event_type_key

logger = get_logger(__name__)

HandlerResult = Dict[str, Any]
EventHandler = Callable[[VerifiedEvent], HandlerResult]


def acknowledge(event: VerifiedEvent) -> HandlerResult:
    """Built-in handler for accepted event types."""
    return {"status": "processed", "event": event.type}


def ignore(event: VerifiedEvent) -> HandlerResult:
    """Fallback handler for event types without a registered handler."""
    return {"status": "ignored", "event": event.type or "unknown"}


class EventRouter:
    """Thread-safe mapping of event types to handlers.

    Registration and removal may run concurrently with ``dispatch``; handlers
    themselves run outside the registry lock.
    """

    def __init__(
        self,
        install_defaults: bool = True,
        default_handler: Optional[EventHandler] = None,
    ):
        """Initialize router.

        Args:
            install_defaults: Register ``acknowledge`` for every WebhookEventType
            default_handler: Handler for unregistered types (defaults to ``ignore``)
        """
        self._lock = threading.RLock()
        self._handlers: Dict[str, EventHandler] = {}
        self._default_handler: EventHandler = default_handler or ignore
        if install_defaults:
            for event_type in WebhookEventType:
                self._handlers[event_type.value] = acknowledge

    def register(self, event_type: EventTypeLike, handler: EventHandler) -> EventHandler:
        """Register ``handler`` for ``event_type``, replacing any existing one.

        Returns:
            The handler, so this can also be used as a decorator target
        """
        if not callable(handler):
            raise TypeError(f"Handler for {event_type_key(event_type)!r} is not callable")
        key = event_type_key(event_type)
        with self._lock:
            self._handlers[key] = handler
        logger.debug("Webhook handler registered", event_type=key)
        return handler

    def on(self, event_type: EventTypeLike) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of :meth:`register`.

        >>> @router.on("license.revoked")
        ... def revoke_access(event):
        ...     return {"status": "processed", "event": event.type}
        """

        def decorator(handler: EventHandler) -> EventHandler:
            return self.register(event_type, handler)

        return decorator

    def unregister(self, event_type: EventTypeLike) -> bool:
        """Remove the handler for ``event_type``.

        Returns:
            True if a handler was removed
        """
        key = event_type_key(event_type)
        with self._lock:
            removed = self._handlers.pop(key, None) is not None
        if removed:
            logger.debug("Webhook handler removed", event_type=key)
        return removed

    def clear(self) -> None:
        """Remove all handlers, built-in ones included."""
        with self._lock:
            self._handlers.clear()

    def is_registered(self, event_type: EventTypeLike) -> bool:
        with self._lock:
            return event_type_key(event_type) in self._handlers

    def registered_events(self) -> List[str]:
        with self._lock:
            return list(self._handlers)

    def resolve(self, event_type: EventTypeLike) -> EventHandler:
        """Return the handler that ``dispatch`` would call for ``event_type``."""
        with self._lock:
            return self._handlers.get(event_type_key(event_type), self._default_handler)

    def dispatch(self, event: VerifiedEvent) -> HandlerResult:
        """Invoke the handler for ``event.type`` exactly once.

        Handler exceptions propagate to the caller.
        """
        handler = self.resolve(event.type)
        logger.debug(
            "Dispatching webhook event",
            event_type=event.type,
            event_id=event.id,
            handled=handler is not self._default_handler,
        )
        return handler(event)

"""
Provider event emitter.

Wallet-style providers notify their callers through named events such as
``chainChanged``. Handlers may be plain callables or coroutine functions;
both are invoked once per emit, in subscription order.
"""

import inspect
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

CHAIN_CHANGED = "chainChanged"

EventHandlerFunc = Callable[..., Any]


class EventEmitter:
    """Dispatcher for publishing named events to subscribed handlers."""

    def __init__(self) -> None:
        """Initialize with empty subscribers."""
        self._subscribers: Dict[str, List[EventHandlerFunc]] = {}

    def subscribe(self, event_name: str, handler: EventHandlerFunc) -> None:
        """
        Register a handler for ``event_name``.

        Args:
            event_name: Event to listen for, e.g. ``"chainChanged"``.
            handler: Callable or coroutine function receiving the event args.

        Raises:
            TypeError: If handler is not callable.
        """
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler).__name__}")
        self._subscribers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandlerFunc) -> None:
        """Remove one registration of ``handler``; unknown handlers are ignored."""
        handlers = self._subscribers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

    async def emit(self, event_name: str, *args: Any) -> None:
        """
        Invoke every handler subscribed to ``event_name`` with ``args``.

        Coroutine results are awaited before the next handler runs.
        """
        handlers = list(self._subscribers.get(event_name, []))
        logger.debug("Emitting %s to %d handler(s)", event_name, len(handlers))
        for handler in handlers:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result

"""Synchronous publish/subscribe channel for engine lifecycle notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from actionqa.models import EventName

logger = logging.getLogger("actionqa.engine.events")

EventHandler = Callable[[dict[str, Any]], None]


class EventBus:
    """Maps event names to subscriber lists and dispatches in subscription order.

    Dispatch is synchronous: every handler has run by the time
    :meth:`dispatch` returns.  Handler errors propagate to the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventName, list[EventHandler]] = {}

    def on(self, event: EventName | str, handler: EventHandler) -> None:
        self._handlers.setdefault(EventName(event), []).append(handler)

    def off(self, event: EventName | str, handler: EventHandler) -> None:
        name = EventName(event)
        if name in self._handlers:
            self._handlers[name] = [h for h in self._handlers[name] if h != handler]

    def dispatch(self, event: EventName | str, payload: dict[str, Any] | None = None) -> None:
        name = EventName(event)
        data = payload if payload is not None else {}
        # Copy so handlers may unsubscribe themselves while being called
        for handler in list(self._handlers.get(name, ())):
            logger.debug("Dispatch event %s", name.value)
            handler(data)

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()

"""
Event emitter.

One ordered multimap from EventKind to subscriber callbacks. Dispatch is
synchronous and follows subscription order.
"""

from typing import Callable, Dict, List, Union

from ..models.events import EventKind


Handler = Callable[..., None]


def _as_kind(event: Union[EventKind, str]) -> EventKind:
    """Accept an EventKind or its string value ('click', 'drag', ...)."""
    if isinstance(event, EventKind):
        return event
    return EventKind(event)


class EventEmitter:
    """Ordered event subscription and dispatch."""

    def __init__(self):
        self._handlers: Dict[EventKind, List[Handler]] = {}

    def on(self, event: Union[EventKind, str], handler: Handler):
        """
        Subscribe `handler` to `event`.

        Subscribing the same handler twice to one event has no effect.

        Raises:
            ValueError: if `event` is not a known event name
        """
        handlers = self._handlers.setdefault(_as_kind(event), [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event: Union[EventKind, str], handler: Handler):
        """Unsubscribe `handler` from `event`. Unknown handlers are ignored."""
        kind = _as_kind(event)
        handlers = self._handlers.get(kind)
        if handlers:
            self._handlers[kind] = [h for h in handlers if h != handler]

    def emit(self, event: Union[EventKind, str], *args, **kwargs):
        """Call every subscriber of `event` in subscription order."""
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers.get(_as_kind(event), ())):
            handler(*args, **kwargs)

    def has_listeners(self, event: Union[EventKind, str]) -> bool:
        return bool(self._handlers.get(_as_kind(event)))

    def listener_count(self, event: Union[EventKind, str]) -> int:
        return len(self._handlers.get(_as_kind(event), ()))

    def clear(self):
        """Drop every subscription."""
        self._handlers.clear()

from __future__ import annotations

from typing import Callable

from .types import Event, EventName

Handler = Callable[..., None]


class EventBus:
    """Named-event registry.

    Handlers for one event are called in registration order, once per
    `emit`. With `record=True` every emitted event is also appended to
    `history` as `{"type": name, "args": [...]}`.
    """

    def __init__(self, record: bool = False) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._record = record
        self.history: list[Event] = []

    def subscribe(self, name: EventName, handler: Handler) -> None:
        handlers = self._handlers.setdefault(name, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, name: EventName, handler: Handler) -> None:
        handlers = self._handlers.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, name: EventName, *args: object) -> None:
        if self._record:
            self.history.append({"type": name, "args": list(args)})
        for handler in list(self._handlers.get(name, ())):
            handler(*args)

    def names(self) -> list[str]:
        """Types of recorded events, oldest first."""
        return [str(e["type"]) for e in self.history]

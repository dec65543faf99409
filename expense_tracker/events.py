from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'EXPENSES_CHANGED', 'INCOME_CHANGED', 'CATEGORIES_CHANGED', 'DATA_CHANGED',
    'Event', 'EventBus',
]

EXPENSES_CHANGED = "EXPENSES_CHANGED"
INCOME_CHANGED = "INCOME_CHANGED"
CATEGORIES_CHANGED = "CATEGORIES_CHANGED"

DATA_CHANGED = (EXPENSES_CHANGED, INCOME_CHANGED, CATEGORIES_CHANGED)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous publish/subscribe for collection-change notifications."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict | None = None) -> Event:
        event = Event(name=name, ts=datetime.now().isoformat(), payload=dict(payload or {}))
        for handler in list(self._subscribers.get(name, [])):
            handler(event)
        return event

"""
Engine events - synchronous notifications for the presentation layer.

Subscribers run inline, in subscription order, during the engine
transition that published the event. A subscriber that raises is
logged and skipped; it never interrupts the engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    RESOURCE_CHANGED = "resource_changed"
    CARD_OFFER_UPDATED = "card_offer_updated"
    MESSAGE = "message"
    ROCKET_STATE_CHANGED = "rocket_state_changed"
    BUILDING_PLACED = "building_placed"
    TURN_ENDED = "turn_ended"
    LEVEL_COMPLETED = "level_completed"
    LEVEL_FAILED = "level_failed"
    REWARD_UNLOCKED = "reward_unlocked"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, **self.data}


Subscriber = Callable[[GameEvent], None]

ALL_EVENTS = None  # Subscription key for every event kind


class EventBus:
    """In-memory pub/sub with immediate delivery."""

    def __init__(self) -> None:
        self._subscribers: dict[EventKind | None, list[Subscriber]] = {}

    def subscribe(self, kind: EventKind | None, handler: Subscriber) -> None:
        """Subscribe to one kind, or to everything with ALL_EVENTS."""
        self._subscribers.setdefault(kind, []).append(handler)

    def unsubscribe(self, kind: EventKind | None, handler: Subscriber) -> None:
        handlers = self._subscribers.get(kind)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, kind: EventKind, **data: Any) -> GameEvent:
        event = GameEvent(kind=kind, data=data)
        handlers = list(self._subscribers.get(kind, [])) + list(self._subscribers.get(ALL_EVENTS, []))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event subscriber failed for {kind.value}")
        return event

    def message(self, text: str, level: str = "info") -> GameEvent:
        """Publish a user-facing message."""
        return self.publish(EventKind.MESSAGE, text=text, level=level)

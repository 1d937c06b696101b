"""Typed match events and the in-process bus that delivers them.

A rendering layer subscribes to the event types it cares about instead of
listening for untyped global notifications.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, TypeVar

if TYPE_CHECKING:
    from .board import AttackOutcome
    from .player import Player
    from .ship import Coordinate, Orientation, Ship

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent")
EventHandler = Callable[[Any], None]


@dataclass(frozen=True)
class ShipPlaced:
    player: Player
    ship: Ship
    start: Coordinate
    orientation: Orientation


@dataclass(frozen=True)
class GameStarted:
    first_player: Player


@dataclass(frozen=True)
class AttackResolved:
    attacker: Player
    defender: Player
    coord: Coordinate
    outcome: AttackOutcome
    turn_count: int
    ship: Ship | None = None


@dataclass(frozen=True)
class GameOver:
    winner: Player
    turn_count: int


@dataclass(frozen=True)
class GameReset:
    pass


@dataclass(frozen=True)
class Subscription:
    id: int


class EventBus:
    """Synchronous publish/subscribe keyed on event type."""

    def __init__(self) -> None:
        self._next_id = 1
        self._subscriptions: dict[int, tuple[type, EventHandler]] = {}

    def subscribe(self, event_type: type[TEvent], handler: Callable[[TEvent], None]) -> Subscription:
        sub_id = self._next_id
        self._next_id += 1
        self._subscriptions[sub_id] = (event_type, handler)
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription if present."""
        self._subscriptions.pop(subscription.id, None)

    def publish(self, event: object) -> int:
        """Deliver ``event`` to matching handlers and return how many ran."""
        invoked = 0
        for subscribed_type, handler in tuple(self._subscriptions.values()):
            if isinstance(event, subscribed_type):
                handler(event)
                invoked += 1
        return invoked

    def publish_all(self, events: Iterable[object]) -> None:
        """Publish ``events`` in order, even if a handler of an earlier one raises.

        The first handler error is re-raised once every event has been
        delivered; later errors are logged.
        """
        first_error: Exception | None = None
        for event in events:
            try:
                self.publish(event)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                else:
                    logger.exception(
                        "event_handler_failed", extra={"event": type(event).__name__}
                    )
        if first_error is not None:
            raise first_error

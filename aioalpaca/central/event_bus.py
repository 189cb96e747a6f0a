# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Event bus for decoupled notification of store consumers.

Events are immutable dataclasses. Every event has a key used for targeted
subscriptions; for device scoped events this is the device id. Subscribing
with event_key=None receives the events of every key.

Handlers can be plain functions or coroutine functions. Handlers of one
event run concurrently and an exception in one handler never reaches the
publisher or the other handlers.

Example:
-------
    bus = EventBus()

    def on_change(event: PropertyChangedEvent) -> None:
        print(event.name, event.old_value, event.new_value)

    unsubscribe = bus.subscribe(
        event_type=PropertyChangedEvent,
        event_key="localhost-11111-telescope-0",
        handler=on_change,
    )
    ...
    unsubscribe()

"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
import inspect
import logging
from typing import Any, Final, TypeVar

from aioalpaca.const import CapabilityState, ConnectionState
from aioalpaca.type_aliases import AlpacaValue, UnsubscribeHandler

_LOGGER: Final = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True, slots=True)
class Event:
    """Base class of all events."""

    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> Any:
        """Return the key used for targeted subscriptions."""
        return None


@dataclass(frozen=True, kw_only=True, slots=True)
class DeviceEvent(Event):
    """Base class of device scoped events."""

    device_id: str

    @property
    def key(self) -> Any:
        """Return the device id."""
        return self.device_id


@dataclass(frozen=True, kw_only=True, slots=True)
class DeviceAddedEvent(Event):
    """A device was added to the store."""

    device_id: str


@dataclass(frozen=True, kw_only=True, slots=True)
class DeviceRemovedEvent(Event):
    """A device was removed from the store."""

    device_id: str


@dataclass(frozen=True, kw_only=True, slots=True)
class DeviceConnectionStateChangedEvent(DeviceEvent):
    """The connection state of a device changed."""

    old_state: ConnectionState
    new_state: ConnectionState
    reason: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class PropertyChangedEvent(DeviceEvent):
    """The cached value of a property changed."""

    name: str
    old_value: AlpacaValue
    new_value: AlpacaValue


@dataclass(frozen=True, kw_only=True, slots=True)
class PropertyAvailabilityChangedEvent(DeviceEvent):
    """A property became unavailable for the rest of the connection session."""

    name: str
    available: bool
    reason: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class CapabilityResolvedEvent(DeviceEvent):
    """A capability left the unknown state."""

    member: str
    state: CapabilityState


@dataclass(frozen=True, kw_only=True, slots=True)
class RequestCoalescedEvent(Event):
    """A request joined an already pending request."""

    request_key: str
    coalesced_count: int
    store_name: str | None = None

    @property
    def key(self) -> Any:
        """Return the name of the store the coalescer belongs to."""
        return self.store_name


E = TypeVar("E", bound=Event)


@dataclass(slots=True)
class _Subscription:
    handler: Callable[[Any], Any]


class EventBus:
    """Publish events to subscribed handlers."""

    __slots__ = ("_enable_event_logging", "_event_stats", "_subscriptions")

    def __init__(self, *, enable_event_logging: bool = False) -> None:
        """Init the event bus."""
        self._enable_event_logging: Final = enable_event_logging
        self._subscriptions: Final[dict[type[Event], dict[Any, list[_Subscription]]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self._event_stats: Final[dict[str, int]] = defaultdict(int)

    def subscribe(
        self,
        *,
        event_type: type[E],
        event_key: Any,
        handler: Callable[[E], Any],
    ) -> UnsubscribeHandler:
        """Subscribe handler to events of a type and key. Return a function that unsubscribes again."""
        subscription = _Subscription(handler=handler)
        self._subscriptions[event_type][event_key].append(subscription)

        def _unsubscribe() -> None:
            if (by_key := self._subscriptions.get(event_type)) is None:
                return
            if subscription in (handlers := by_key.get(event_key, [])):
                handlers.remove(subscription)
            if not handlers:
                by_key.pop(event_key, None)

        return _unsubscribe

    async def publish(self, *, event: Event) -> None:
        """Deliver an event to the handlers of its key and to the wildcard handlers."""
        event_type = type(event)
        self._event_stats[event_type.__name__] += 1
        if self._enable_event_logging:
            _LOGGER.debug("PUBLISH: %s", event)
        if (by_key := self._subscriptions.get(event_type)) is None:
            return
        subscriptions = list(by_key.get(event.key, ()))
        if event.key is not None:
            subscriptions.extend(by_key.get(None, ()))
        if not subscriptions:
            return
        await asyncio.gather(*(self._call_handler(subscription=sub, event=event) for sub in subscriptions))

    async def _call_handler(self, *, subscription: _Subscription, event: Event) -> None:
        try:
            result = subscription.handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            _LOGGER.exception(  # i18n-log: ignore
                "PUBLISH: Handler %s failed for %s",
                getattr(subscription.handler, "__name__", subscription.handler),
                type(event).__name__,
            )

    def get_subscription_count(self, *, event_type: type[Event]) -> int:
        """Return the number of handlers subscribed to an event type."""
        return sum(len(handlers) for handlers in self._subscriptions.get(event_type, {}).values())

    def get_event_stats(self) -> dict[str, int]:
        """Return how often each event type was published."""
        return dict(self._event_stats)

    def clear_subscriptions(self, *, event_type: type[Event] | None = None) -> None:
        """Remove the subscriptions of one event type or of all types."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

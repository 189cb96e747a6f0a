# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Capture events of an EventBus for assertions in tests.

    capture = EventCapture()
    capture.subscribe_to(store.event_bus, PropertyChangedEvent)
    ...
    capture.assert_event_emitted(event_type=PropertyChangedEvent, name="altitude", count=1)
    capture.cleanup()
"""

from __future__ import annotations

from typing import Any, TypeVar

from aioalpaca.central.event_bus import Event, EventBus
from aioalpaca.type_aliases import UnsubscribeHandler

E = TypeVar("E", bound=Event)


class EventCapture:
    """Record events published on one or more event buses."""

    def __init__(self) -> None:
        """Init the capture."""
        self.captured_events: list[Event] = []
        self._unsubscribers: list[UnsubscribeHandler] = []

    def subscribe_to(self, event_bus: EventBus, *event_types: type[Event]) -> None:
        """Capture all events of the given types, regardless of their key."""
        for event_type in event_types:
            self._unsubscribers.append(
                event_bus.subscribe(event_type=event_type, event_key=None, handler=self.captured_events.append)
            )

    def get_events_of_type(self, *, event_type: type[E]) -> list[E]:
        """Return the captured events of a type."""
        return [event for event in self.captured_events if isinstance(event, event_type)]

    def _matching(self, *, event_type: type[E], attrs: dict[str, Any]) -> list[E]:
        return [
            event
            for event in self.get_events_of_type(event_type=event_type)
            if all(getattr(event, attr, None) == value for attr, value in attrs.items())
        ]

    def assert_event_emitted(self, *, event_type: type[Event], count: int | None = None, **attrs: Any) -> None:
        """Assert that matching events were captured, optionally exactly count of them."""
        matching = self._matching(event_type=event_type, attrs=attrs)
        if not matching:
            raise AssertionError(
                f"No {event_type.__name__} found matching {attrs}. Captured: {self.captured_events}"
            )
        if count is not None and len(matching) != count:
            raise AssertionError(f"Expected {count} {event_type.__name__}, got {len(matching)}: {matching}")

    def assert_no_event(self, *, event_type: type[Event], **attrs: Any) -> None:
        """Assert that no matching event was captured."""
        if matching := self._matching(event_type=event_type, attrs=attrs):
            raise AssertionError(f"Expected no {event_type.__name__}, got {len(matching)}: {matching}")

    def clear(self) -> None:
        """Forget the captured events."""
        self.captured_events.clear()

    def cleanup(self) -> None:
        """Unsubscribe from all event buses and forget the captured events."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.captured_events.clear()

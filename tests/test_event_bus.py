# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for the event bus."""

from __future__ import annotations

import pytest

from aioalpaca.central.event_bus import (
    DeviceAddedEvent,
    EventBus,
    PropertyChangedEvent,
    RequestCoalescedEvent,
)


def _change(*, device_id: str = "dev", name: str = "altitude", value: float = 1.0) -> PropertyChangedEvent:
    return PropertyChangedEvent(device_id=device_id, name=name, old_value=None, new_value=value)


class TestEventKeys:
    """Routing keys of the event types."""

    def test_device_events_keyed_by_device(self) -> None:
        """Test device scoped events use the device id."""
        assert _change(device_id="scope").key == "scope"

    def test_global_events_unkeyed(self) -> None:
        """Test events without a target have no key."""
        assert DeviceAddedEvent(device_id="scope").key is None

    def test_coalesced_keyed_by_store_name(self) -> None:
        """Test coalescer events are keyed by store name."""
        assert RequestCoalescedEvent(request_key="k", coalesced_count=2, store_name="store").key == "store"


class TestEventBus:
    """Tests for EventBus."""

    @pytest.mark.asyncio
    async def test_targeted_and_wildcard_subscriptions(self) -> None:
        """Test a keyed handler sees its device only and a wildcard handler sees all."""
        bus = EventBus()
        targeted: list[PropertyChangedEvent] = []
        wildcard: list[PropertyChangedEvent] = []
        bus.subscribe(event_type=PropertyChangedEvent, event_key="a", handler=targeted.append)
        bus.subscribe(event_type=PropertyChangedEvent, event_key=None, handler=wildcard.append)

        await bus.publish(event=_change(device_id="a"))
        await bus.publish(event=_change(device_id="b"))

        assert [event.device_id for event in targeted] == ["a"]
        assert [event.device_id for event in wildcard] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_async_handler_awaited(self) -> None:
        """Test coroutine handlers complete before publish returns."""
        bus = EventBus()
        seen: list[str] = []

        async def handler(event: PropertyChangedEvent) -> None:
            seen.append(event.name)

        bus.subscribe(event_type=PropertyChangedEvent, event_key="dev", handler=handler)
        await bus.publish(event=_change())
        assert seen == ["altitude"]

    @pytest.mark.asyncio
    async def test_failing_handler_isolated(self) -> None:
        """Test one failing handler does not keep the others from running."""
        bus = EventBus()
        seen: list[PropertyChangedEvent] = []

        def failing(_event: PropertyChangedEvent) -> None:
            raise ValueError("handler failed")

        bus.subscribe(event_type=PropertyChangedEvent, event_key="dev", handler=failing)
        bus.subscribe(event_type=PropertyChangedEvent, event_key="dev", handler=seen.append)

        await bus.publish(event=_change())
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        """Test unsubscribing stops delivery and is idempotent."""
        bus = EventBus()
        seen: list[PropertyChangedEvent] = []
        unsubscribe = bus.subscribe(event_type=PropertyChangedEvent, event_key="dev", handler=seen.append)
        assert bus.get_subscription_count(event_type=PropertyChangedEvent) == 1

        unsubscribe()
        unsubscribe()
        await bus.publish(event=_change())

        assert seen == []
        assert bus.get_subscription_count(event_type=PropertyChangedEvent) == 0

    @pytest.mark.asyncio
    async def test_event_stats_and_clear(self) -> None:
        """Test published events are counted and subscriptions can be cleared."""
        bus = EventBus(enable_event_logging=True)
        bus.subscribe(event_type=PropertyChangedEvent, event_key=None, handler=lambda _event: None)
        bus.subscribe(event_type=DeviceAddedEvent, event_key=None, handler=lambda _event: None)

        await bus.publish(event=_change())
        await bus.publish(event=_change(value=2.0))
        await bus.publish(event=DeviceAddedEvent(device_id="dev"))
        assert bus.get_event_stats() == {"PropertyChangedEvent": 2, "DeviceAddedEvent": 1}

        bus.clear_subscriptions(event_type=PropertyChangedEvent)
        assert bus.get_subscription_count(event_type=PropertyChangedEvent) == 0
        assert bus.get_subscription_count(event_type=DeviceAddedEvent) == 1
        bus.clear_subscriptions()
        assert bus.get_subscription_count(event_type=DeviceAddedEvent) == 0

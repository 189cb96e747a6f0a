# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for EventCapture."""

from __future__ import annotations

import pytest

from aioalpaca.central.event_bus import DeviceAddedEvent, EventBus, PropertyChangedEvent
from aioalpaca_test_support.event_capture import EventCapture


class TestEventCapture:
    """Tests for EventCapture."""

    def test_assert_event_emitted_failure(self) -> None:
        """Test assert_event_emitted fails when event missing."""
        capture = EventCapture()

        with pytest.raises(AssertionError, match="No PropertyChangedEvent"):
            capture.assert_event_emitted(event_type=PropertyChangedEvent)

    @pytest.mark.asyncio
    async def test_assert_event_emitted_with_attributes_and_count(self) -> None:
        """Test matching by attributes and by count."""
        event_bus = EventBus()
        capture = EventCapture()
        capture.subscribe_to(event_bus, PropertyChangedEvent, DeviceAddedEvent)

        await event_bus.publish(
            event=PropertyChangedEvent(device_id="dev", name="altitude", old_value=None, new_value=1.0)
        )
        await event_bus.publish(
            event=PropertyChangedEvent(device_id="dev", name="altitude", old_value=1.0, new_value=2.0)
        )
        await event_bus.publish(event=DeviceAddedEvent(device_id="other"))

        capture.assert_event_emitted(event_type=PropertyChangedEvent, count=2, name="altitude")
        capture.assert_event_emitted(event_type=PropertyChangedEvent, count=1, new_value=2.0)
        capture.assert_event_emitted(event_type=DeviceAddedEvent, device_id="other")
        with pytest.raises(AssertionError, match="Expected 3 PropertyChangedEvent, got 2"):
            capture.assert_event_emitted(event_type=PropertyChangedEvent, count=3)
        with pytest.raises(AssertionError, match="No PropertyChangedEvent"):
            capture.assert_event_emitted(event_type=PropertyChangedEvent, name="azimuth")

    @pytest.mark.asyncio
    async def test_assert_no_event(self) -> None:
        """Test assert_no_event passes for absent events and fails otherwise."""
        event_bus = EventBus()
        capture = EventCapture()
        capture.subscribe_to(event_bus, DeviceAddedEvent)

        capture.assert_no_event(event_type=DeviceAddedEvent)
        await event_bus.publish(event=DeviceAddedEvent(device_id="dev"))
        capture.assert_no_event(event_type=DeviceAddedEvent, device_id="other")
        with pytest.raises(AssertionError, match="Expected no DeviceAddedEvent"):
            capture.assert_no_event(event_type=DeviceAddedEvent, device_id="dev")

    @pytest.mark.asyncio
    async def test_clear_and_cleanup(self) -> None:
        """Test clear forgets events and cleanup also unsubscribes."""
        event_bus = EventBus()
        capture = EventCapture()
        capture.subscribe_to(event_bus, DeviceAddedEvent)
        await event_bus.publish(event=DeviceAddedEvent(device_id="dev"))

        capture.clear()
        assert capture.captured_events == []

        capture.cleanup()
        await event_bus.publish(event=DeviceAddedEvent(device_id="dev"))
        assert capture.captured_events == []
        assert event_bus.get_subscription_count(event_type=DeviceAddedEvent) == 0

"""Example for aioalpaca."""

# !/usr/bin/python3
from __future__ import annotations

import asyncio
import logging
import sys

from aioalpaca.central.config import CentralConfigBuilder
from aioalpaca.central.event_bus import (
    DeviceConnectionStateChangedEvent,
    PropertyAvailabilityChangedEvent,
    PropertyChangedEvent,
)
from aioalpaca.client.devices import GUIDE_NORTH
from aioalpaca.const import DeviceType

logging.basicConfig(level=logging.DEBUG)
_LOGGER = logging.getLogger(__name__)

# The ASCOM Omni Simulators listen on port 32323
ALPACA_BASE_URL = "http://localhost:32323"


class Example:
    """Example for aioalpaca."""

    def __init__(self):
        """Init example."""
        self.store = None
        self.changes = 0

    def _on_connection_state(self, event: DeviceConnectionStateChangedEvent) -> None:
        """Handle connection state changes."""
        _LOGGER.info("%s: %s -> %s", event.device_id, event.old_state, event.new_state)

    def _on_property_changed(self, event: PropertyChangedEvent) -> None:
        """Handle value changes."""
        self.changes += 1
        _LOGGER.info("%s.%s = %s", event.device_id, event.name, event.new_value)

    def _on_availability_changed(self, event: PropertyAvailabilityChangedEvent) -> None:
        """Handle properties that stopped answering."""
        _LOGGER.warning("%s.%s is unavailable: %s", event.device_id, event.name, event.reason)

    async def example_run(self):
        """Process the example."""
        self.store = (
            CentralConfigBuilder.for_dashboard(name="example")
            .with_failure_threshold(threshold=3)
            .build()
            .create_store()
        )
        self.store.event_bus.subscribe(
            event_type=DeviceConnectionStateChangedEvent, event_key=None, handler=self._on_connection_state
        )
        self.store.event_bus.subscribe(
            event_type=PropertyAvailabilityChangedEvent, event_key=None, handler=self._on_availability_changed
        )

        telescope = await self.store.add_device(
            base_url=ALPACA_BASE_URL, device_type=DeviceType.TELESCOPE, device_number=0
        )
        focuser = await self.store.add_device(base_url=ALPACA_BASE_URL, device_type=DeviceType.FOCUSER, device_number=0)

        await self.store.start()
        await self.store.connect(device_id=telescope.device_id)
        await self.store.connect(device_id=focuser.device_id)

        # All consumers of a device share its poll task and its cache
        unsubscribe = self.store.subscribe(device_id=telescope.device_id, handler=self._on_property_changed)
        release = self.store.track_properties(device_id=focuser.device_id, names=["temperature"])

        client = self.store.get_client(device_id=telescope.device_id)
        await client.set_property(name="Tracking", value=True)
        await client.nudge(direction=GUIDE_NORTH, arcminutes=30.0)

        for i in range(10):
            _LOGGER.info(
                "Sleeping (%i): altitude=%s, focuser position=%s, changes=%i",
                i,
                self.store.get_value(device_id=telescope.device_id, name="altitude"),
                self.store.get_value(device_id=focuser.device_id, name="position"),
                self.changes,
            )
            await asyncio.sleep(2)

        release()
        unsubscribe()
        # Disconnects all devices so Python can exit properly.
        await self.store.stop()


example = Example()
asyncio.run(example.example_run())
sys.exit(0)

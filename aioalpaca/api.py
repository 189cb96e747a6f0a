# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Simplified facade API for common Alpaca operations.

This module provides `AlpacaAPI`, a high-level facade over `DeviceStateStore`.
It covers the typical dashboard use case without requiring knowledge of the
synchronizer or the capability cache.

Quick start
-----------
    from aioalpaca.api import AlpacaAPI
    from aioalpaca.central.config import CentralConfig

    api = AlpacaAPI(config=CentralConfig(name="observatory"))
    await api.start()

    device_id = await api.add_device(
        base_url="http://192.168.1.50:11111", device_type="telescope", device_number=0
    )
    await api.connect(device_id=device_id)

    # Read the cached value, never touches the network
    ra = api.read_value(device_id=device_id, name="rightascension")

    # Write a value
    await api.write_value(device_id=device_id, name="tracking", value=True)

    # Subscribe to updates
    def on_update(device_id: str, name: str, value: Any) -> None:
        print(f"{device_id}.{name} = {value}")

    unsubscribe = api.subscribe_to_updates(callback=on_update)

    unsubscribe()
    await api.stop()

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Final

from aioalpaca.central.config import CentralConfig
from aioalpaca.central.event_bus import PropertyChangedEvent
from aioalpaca.central.store import DeviceStateStore
from aioalpaca.const import DeviceType
from aioalpaca.model import DeviceDescriptor
from aioalpaca.type_aliases import AlpacaValue

UpdateCallback = Callable[[str, str, Any], None]
UnsubscribeCallback = Callable[[], None]


class AlpacaAPI:
    """
    Simplified facade for common Alpaca operations.

    Attributes:
        store: The underlying DeviceStateStore instance.
        config: The configuration used to create this API instance.

    """

    def __init__(self, *, config: CentralConfig) -> None:
        """
        Initialize the AlpacaAPI.

        Args:
            config: Configuration of the store. Use CentralConfigBuilder for
                validated setup.

        """
        self._config: Final = config
        self._store: DeviceStateStore | None = None

    @property
    def config(self) -> CentralConfig:
        """Return the configuration."""
        return self._config

    @property
    def store(self) -> DeviceStateStore:
        """Return the underlying store."""
        if self._store is None:
            msg = "API not started. Call start() first."
            raise RuntimeError(msg)
        return self._store

    async def add_device(
        self,
        *,
        base_url: str,
        device_type: DeviceType | str,
        device_number: int = 0,
        name: str | None = None,
    ) -> str:
        """
        Add a device and return its id.

        Example:
            device_id = await api.add_device(
                base_url="http://localhost:11111", device_type="focuser", device_number=0
            )

        """
        descriptor = await self.store.add_device(
            base_url=base_url, device_type=device_type, device_number=device_number, name=name
        )
        return descriptor.device_id

    async def connect(self, *, device_id: str) -> None:
        """Connect a device and start polling it."""
        await self.store.connect(device_id=device_id)

    async def disconnect(self, *, device_id: str) -> None:
        """Disconnect a device."""
        await self.store.disconnect(device_id=device_id)

    async def remove_device(self, *, device_id: str) -> None:
        """Disconnect a device if needed and forget it."""
        await self.store.remove_device(device_id=device_id)

    def get_device(self, *, device_id: str) -> DeviceDescriptor | None:
        """Return the descriptor of a device, or None if not found."""
        return self.store.get_device(device_id=device_id)

    def list_devices(self) -> Iterable[DeviceDescriptor]:
        """
        List all known devices.

        Example:
            for device in api.list_devices():
                print(f"{device.device_id}: {device.connection_state}")

        """
        return self.store.get_devices()

    def read_value(self, *, device_id: str, name: str, default: AlpacaValue = None) -> AlpacaValue:
        """
        Return the cached value of a property.

        The value is the last one the poll loop read; default is returned while
        nothing has been read yet.
        """
        return self.store.get_value(device_id=device_id, name=name, default=default)

    async def refresh_value(self, *, device_id: str, name: str) -> AlpacaValue:
        """Read a property from the device now and return the cached value afterwards."""
        await self.store.refresh_property(device_id=device_id, name=name)
        return self.store.get_value(device_id=device_id, name=name)

    async def start(self) -> None:
        """Create the store and start polling."""
        self._store = self._config.create_store()
        await self._store.start()

    async def stop(self) -> None:
        """Disconnect all devices and stop polling."""
        if self._store is not None:
            await self._store.stop()
            self._store = None

    def subscribe_to_updates(self, *, callback: UpdateCallback, device_id: str | None = None) -> UnsubscribeCallback:
        """
        Subscribe to property value changes.

        Args:
            callback: Function called with (device_id, name, value) on every change.
            device_id: Restrict updates to one device. None receives all devices.

        Returns:
            An unsubscribe function to remove the callback.

        """

        def event_handler(event: PropertyChangedEvent) -> None:
            callback(event.device_id, event.name, event.new_value)

        return self.store.event_bus.subscribe(
            event_type=PropertyChangedEvent,
            event_key=device_id,
            handler=event_handler,
        )

    async def write_value(self, *, device_id: str, name: str, value: AlpacaValue) -> None:
        """
        Write a property of a connected device.

        The cache is updated with the written value once the device accepts it.

        Example:
            await api.write_value(device_id=device_id, name="tracking", value=True)

        """
        await self.store.get_client(device_id=device_id).set_property(name=name, value=value)

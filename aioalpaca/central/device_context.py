# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Mutable per-device row of the device state store."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Final

from aioalpaca.client.state_machine import DeviceStateMachine
from aioalpaca.const import ConnectionState

if TYPE_CHECKING:
    from aioalpaca.client.base import AlpacaClient
    from aioalpaca.client.capabilities import CapabilityCache
    from aioalpaca.model import DeviceDescriptor, PropertyCacheEntry


class DeviceContext:
    """
    Everything the store knows about one device.

    generation increases with every connect. Work started for an older
    generation must not touch the entries of the current one.
    """

    __slots__ = ("capabilities", "client", "descriptor", "entries", "generation", "state_machine", "tracked")

    def __init__(self, *, descriptor: DeviceDescriptor) -> None:
        """Init the context of a disconnected device."""
        self.descriptor: DeviceDescriptor = descriptor
        self.state_machine: Final = DeviceStateMachine(device_id=descriptor.device_id)
        self.generation: int = 0
        self.client: AlpacaClient | None = None
        self.capabilities: CapabilityCache | None = None
        self.entries: dict[str, PropertyCacheEntry] = {}
        # extra properties requested by consumers, reference counted
        self.tracked: Final[Counter[str]] = Counter()

    @property
    def device_id(self) -> str:
        """Return the device id."""
        return self.descriptor.device_id

    @property
    def is_connected(self) -> bool:
        """Return True if the device is connected."""
        return self.state_machine.state == ConnectionState.CONNECTED

    def is_current(self, *, generation: int) -> bool:
        """Return True if work of generation may still update this device."""
        return self.is_connected and self.generation == generation

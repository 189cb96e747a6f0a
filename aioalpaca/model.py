# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Value objects of the synchronization engine.

All objects here are immutable. The store replaces them wholesale, so a
consumer holding a reference never sees a half updated object.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from aioalpaca.const import ConnectionState, DeviceType, PropertyStatus
from aioalpaca.type_aliases import AlpacaValue


@dataclass(frozen=True, kw_only=True, slots=True)
class DeviceDescriptor:
    """Address, type and connection state of a device."""

    device_id: str
    device_type: DeviceType
    base_url: str
    device_number: int
    name: str | None = None
    connection_state: ConnectionState = ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        """Return True if the device is connected."""
        return self.connection_state == ConnectionState.CONNECTED

    def __str__(self) -> str:
        """Return the device id."""
        return self.device_id


@dataclass(frozen=True, kw_only=True, slots=True)
class PropertyCacheEntry:
    """
    Last known state of one property.

    request_seq is the start order of the request that produced this entry.
    Only a request that started later may replace it.
    """

    name: str
    value: AlpacaValue = None
    has_value: bool = False
    updated_at: datetime | None = None
    last_error: Exception | None = None
    failure_count: int = 0
    request_seq: int = 0
    available: bool = True

    @property
    def status(self) -> PropertyStatus:
        """Return how the property should be rendered."""
        if not self.available:
            return PropertyStatus.UNAVAILABLE
        if self.last_error is not None:
            return PropertyStatus.STALE if self.has_value else PropertyStatus.UNKNOWN
        return PropertyStatus.OK if self.has_value else PropertyStatus.UNKNOWN

# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Typed clients for Alpaca devices.

Overview
--------
Each Alpaca device type has one client class. The factory selects it from the
closed set of device types, never by inspecting the device at runtime.

Provided pieces
---------------
- AlpacaTransport: single request/response primitive with ClientID and
  ClientTransactionID handling and protocol error mapping.
- AlpacaClient: base of the typed clients. Maintains the capability cache and
  reports writes and commands to a write observer.
- CameraClient ... TelescopeClient: the ten device type clients.
- CapabilityCache: three-valued knowledge of optional members per connection.
- RequestCoalescer: merges concurrent reads of the same key.

Quick start
-----------
    transport = AlpacaTransport(session=session)
    device = DeviceDescriptor(
        device_id="localhost-11111-focuser-0",
        device_type=DeviceType.FOCUSER,
        base_url="http://localhost:11111",
        device_number=0,
    )
    focuser = create_client(
        device=device,
        transport=transport,
        capabilities=CapabilityCache(device_id=device.device_id),
    )
    position = await focuser.position.get()
    await focuser.move_relative(steps=-100)
"""

from __future__ import annotations

from aioalpaca.client.base import AlpacaClient
from aioalpaca.client.capabilities import CapabilityCache, CapabilityRecord
from aioalpaca.client.devices import (
    CameraClient,
    CoverCalibratorClient,
    DomeClient,
    FilterWheelClient,
    FocuserClient,
    ObservingConditionsClient,
    RotatorClient,
    SafetyMonitorClient,
    SwitchClient,
    TelescopeClient,
)
from aioalpaca.client.factory import create_client, get_client_class
from aioalpaca.client.request_coalescer import CoalescerMetrics, RequestCoalescer
from aioalpaca.client.transport import AlpacaTransport, TransactionCounter

__all__ = [
    "AlpacaClient",
    "AlpacaTransport",
    "CameraClient",
    "CapabilityCache",
    "CapabilityRecord",
    "CoalescerMetrics",
    "CoverCalibratorClient",
    "DomeClient",
    "FilterWheelClient",
    "FocuserClient",
    "ObservingConditionsClient",
    "RequestCoalescer",
    "RotatorClient",
    "SafetyMonitorClient",
    "SwitchClient",
    "TelescopeClient",
    "TransactionCounter",
    "create_client",
    "get_client_class",
]

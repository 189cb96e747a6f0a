# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Static mapping of device types to their client classes."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from aioalpaca import i18n
from aioalpaca.client.base import AlpacaClient
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
from aioalpaca.const import DeviceType
from aioalpaca.exceptions import ValidationException

if TYPE_CHECKING:
    from aioalpaca.client.capabilities import CapabilityCache
    from aioalpaca.interfaces import TransportProtocol, WriteObserverProtocol
    from aioalpaca.model import DeviceDescriptor

CLIENT_CLASSES: Final[MappingProxyType[DeviceType, type[AlpacaClient]]] = MappingProxyType(
    {
        DeviceType.CAMERA: CameraClient,
        DeviceType.COVER_CALIBRATOR: CoverCalibratorClient,
        DeviceType.DOME: DomeClient,
        DeviceType.FILTER_WHEEL: FilterWheelClient,
        DeviceType.FOCUSER: FocuserClient,
        DeviceType.OBSERVING_CONDITIONS: ObservingConditionsClient,
        DeviceType.ROTATOR: RotatorClient,
        DeviceType.SAFETY_MONITOR: SafetyMonitorClient,
        DeviceType.SWITCH: SwitchClient,
        DeviceType.TELESCOPE: TelescopeClient,
    }
)


def get_client_class(*, device_type: DeviceType) -> type[AlpacaClient]:
    """Return the client class of a device type."""
    if (client_class := CLIENT_CLASSES.get(device_type)) is None:
        raise ValidationException(i18n.tr("exception.client.factory.unknown_type", device_type=device_type))
    return client_class


def create_client(
    *,
    device: DeviceDescriptor,
    transport: TransportProtocol,
    capabilities: CapabilityCache,
    write_observer: WriteObserverProtocol | None = None,
) -> AlpacaClient:
    """Create the client matching the type of a device."""
    return get_client_class(device_type=device.device_type)(
        device=device,
        transport=transport,
        capabilities=capabilities,
        write_observer=write_observer,
    )

# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Constants used by aioalpaca."""

from __future__ import annotations

from enum import IntEnum, StrEnum, unique
from typing import Final

VERSION: Final = "2025.10.0"

# default values
DEFAULT_BULK_READ_ENABLED: Final = True
DEFAULT_FAILURE_THRESHOLD: Final = 3
DEFAULT_FETCH_STATIC_PROPERTIES: Final = True
DEFAULT_LOCALE: Final = "en"
DEFAULT_POLL_INTERVAL: Final = 1.0
DEFAULT_REQUEST_TIMEOUT: Final = 10.0
DEFAULT_TICK_INTERVAL: Final = 0.25

# Alpaca wire format
API_PATH: Final = "/api/v1"
CLIENT_ID_MAX: Final = 65535
CLIENT_ID_MIN: Final = 1
DEVICE_STATE_ACTION: Final = "devicestate"
CONNECTED_ACTION: Final = "connected"

# Scheduler
SCHEDULER_LOOP_SLEEP_MIN: Final = 0.05
SHUTDOWN_WAIT_TIME: Final = 5.0


@unique
class WireKey(StrEnum):
    """Keys of the Alpaca request and response envelope."""

    CLIENT_ID = "ClientID"
    CLIENT_TRANSACTION_ID = "ClientTransactionID"
    ERROR_MESSAGE = "ErrorMessage"
    ERROR_NUMBER = "ErrorNumber"
    NAME = "Name"
    SERVER_TRANSACTION_ID = "ServerTransactionID"
    VALUE = "Value"


@unique
class DeviceType(StrEnum):
    """Enum with the closed set of supported Alpaca device types."""

    CAMERA = "camera"
    COVER_CALIBRATOR = "covercalibrator"
    DOME = "dome"
    FILTER_WHEEL = "filterwheel"
    FOCUSER = "focuser"
    OBSERVING_CONDITIONS = "observingconditions"
    ROTATOR = "rotator"
    SAFETY_MONITOR = "safetymonitor"
    SWITCH = "switch"
    TELESCOPE = "telescope"


@unique
class ConnectionState(StrEnum):
    """Enum with the connection states of a device."""

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"


@unique
class CapabilityState(StrEnum):
    """Three-valued knowledge about an optional member."""

    SUPPORTED = "supported"
    UNKNOWN = "unknown"
    UNSUPPORTED = "unsupported"


@unique
class FetchState(StrEnum):
    """Fetch state of a single (device, property) pair."""

    FETCHING = "fetching"
    IDLE = "idle"


@unique
class PropertyStatus(StrEnum):
    """How a cached property is meant to be rendered."""

    OK = "ok"
    STALE = "stale"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@unique
class HttpVerb(StrEnum):
    """Enum with the HTTP verbs used by the Alpaca protocol."""

    GET = "GET"
    PUT = "PUT"


@unique
class TransportErrorKind(StrEnum):
    """Enum with the kinds of transport failures."""

    NETWORK = "network"
    PROTOCOL = "protocol"


@unique
class AlpacaErrorCode(IntEnum):
    """Protocol error numbers defined by the Alpaca standard."""

    OK = 0
    NOT_IMPLEMENTED = 0x400
    INVALID_VALUE = 0x401
    VALUE_NOT_SET = 0x402
    NOT_CONNECTED = 0x407
    INVALID_WHILE_PARKED = 0x408
    INVALID_WHILE_SLAVED = 0x409
    INVALID_OPERATION = 0x40B
    ACTION_NOT_IMPLEMENTED = 0x40C
    UNSPECIFIED = 0x4FF
    DRIVER_ERROR_MIN = 0x500
    DRIVER_ERROR_MAX = 0xFFF


NOT_IMPLEMENTED_CODES: Final = frozenset({AlpacaErrorCode.NOT_IMPLEMENTED, AlpacaErrorCode.ACTION_NOT_IMPLEMENTED})
INVALID_OPERATION_CODES: Final = frozenset(
    {
        AlpacaErrorCode.INVALID_OPERATION,
        AlpacaErrorCode.INVALID_WHILE_PARKED,
        AlpacaErrorCode.INVALID_WHILE_SLAVED,
    }
)

# Members every Alpaca device exposes, queried once after connect.
COMMON_STATIC_PROPERTIES: Final[tuple[str, ...]] = (
    "name",
    "description",
    "driverinfo",
    "driverversion",
    "interfaceversion",
)


# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Module for aioalpaca exceptions.

Read failures are classified by these types before the synchronizer decides
whether a failure is transient, permanent or a silent disconnect.
"""

from __future__ import annotations

from typing import Any, Final

from aioalpaca.const import INVALID_OPERATION_CODES, NOT_IMPLEMENTED_CODES, AlpacaErrorCode, TransportErrorKind


class BaseAlpacaException(Exception):
    """aioalpaca base exception."""

    def __init__(self, name: str, *args: Any) -> None:
        """Init the exception."""
        if args and isinstance(args[0], BaseException):
            self.name = args[0].__class__.__name__
            args = _reduce_args(args=args[0].args)
        else:
            self.name = name
        super().__init__(_reduce_args(args=args))


class AlpacaException(BaseAlpacaException):
    """aioalpaca exception."""

    def __init__(self, *args: Any) -> None:
        """Init the AlpacaException."""
        super().__init__("AlpacaException", *args)


class DeviceNotFoundException(BaseAlpacaException):
    """Device is not registered in the store."""

    def __init__(self, *args: Any) -> None:
        """Init the DeviceNotFoundException."""
        super().__init__("DeviceNotFoundException", *args)


class NoConnectionException(BaseAlpacaException):
    """Device is not connected."""

    def __init__(self, *args: Any) -> None:
        """Init the NoConnectionException."""
        super().__init__("NoConnectionException", *args)


class UnsupportedException(BaseAlpacaException):
    """Member is known to be unsupported by the device."""

    def __init__(self, *args: Any) -> None:
        """Init the UnsupportedException."""
        super().__init__("UnsupportedException", *args)


class ValidationException(BaseAlpacaException):
    """Validation exception."""

    def __init__(self, *args: Any) -> None:
        """Init the ValidationException."""
        super().__init__("ValidationException", *args)


class TransportException(BaseAlpacaException):
    """A single request to a device failed."""

    kind: TransportErrorKind = TransportErrorKind.NETWORK

    def __init__(self, name: str, *args: Any) -> None:
        """Init the TransportException."""
        super().__init__(name, *args)


class NetworkException(TransportException):
    """Timeout, refused connection, unreachable host or unusable response."""

    kind = TransportErrorKind.NETWORK

    def __init__(self, *args: Any) -> None:
        """Init the NetworkException."""
        super().__init__("NetworkException", *args)


class ProtocolException(TransportException):
    """A transport-successful response carried a nonzero error number."""

    kind = TransportErrorKind.PROTOCOL

    def __init__(self, *, code: int, message: str = "") -> None:
        """Init the ProtocolException."""
        self.code: Final = code
        self.message: Final = message
        super().__init__(self.__class__.__name__, f"0x{code:X}: {message}" if message else f"0x{code:X}")

    @property
    def is_driver_error(self) -> bool:
        """Return True if the code lies in the driver specific range."""
        return AlpacaErrorCode.DRIVER_ERROR_MIN <= self.code <= AlpacaErrorCode.DRIVER_ERROR_MAX


class NotImplementedException(ProtocolException):
    """The device does not implement the member."""


class InvalidValueException(ProtocolException):
    """The device rejected a parameter value."""


class ValueNotSetException(ProtocolException):
    """The device has no value for the property yet."""


class NotConnectedException(ProtocolException):
    """The device reports it is not connected to its hardware."""


class InvalidOperationException(ProtocolException):
    """The operation is not valid in the current device state."""


def protocol_exception_from_code(*, code: int, message: str = "") -> ProtocolException:
    """Return the typed protocol exception for an Alpaca error number."""
    if code in NOT_IMPLEMENTED_CODES:
        return NotImplementedException(code=code, message=message)
    if code == AlpacaErrorCode.INVALID_VALUE:
        return InvalidValueException(code=code, message=message)
    if code == AlpacaErrorCode.VALUE_NOT_SET:
        return ValueNotSetException(code=code, message=message)
    if code == AlpacaErrorCode.NOT_CONNECTED:
        return NotConnectedException(code=code, message=message)
    if code in INVALID_OPERATION_CODES:
        return InvalidOperationException(code=code, message=message)
    return ProtocolException(code=code, message=message)


def _reduce_args(*, args: tuple[Any, ...]) -> tuple[Any, ...] | Any:
    """Return the first arg, if there is only one arg."""
    return args[0] if len(args) == 1 else args

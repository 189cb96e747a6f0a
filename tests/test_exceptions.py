# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for aioalpaca exceptions."""

from __future__ import annotations

from aioalpaca.const import AlpacaErrorCode, TransportErrorKind
from aioalpaca.exceptions import (
    AlpacaException,
    BaseAlpacaException,
    NetworkException,
    NotConnectedException,
    ProtocolException,
    TransportException,
    ValidationException,
)
from aioalpaca.support import extract_exc_args


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_single_arg_reduced(self) -> None:
        """Test a single argument is kept unwrapped."""
        exc = ValidationException("bad value")
        assert exc.name == "ValidationException"
        assert exc.args == ("bad value",)
        assert extract_exc_args(exc=exc) == "bad value"

    def test_multiple_args_kept(self) -> None:
        """Test several arguments stay together."""
        exc = AlpacaException("a", "b")
        assert extract_exc_args(exc=exc) == ("a", "b")

    def test_wrapped_exception_keeps_origin(self) -> None:
        """Test wrapping another exception takes over its name and message."""
        exc = NetworkException(ConnectionRefusedError("refused"))
        assert exc.name == "ConnectionRefusedError"
        assert str(exc) == "refused"
        assert isinstance(exc, TransportException)
        assert isinstance(exc, BaseAlpacaException)

    def test_kinds(self) -> None:
        """Test network and protocol failures are told apart."""
        assert NetworkException("timeout").kind == TransportErrorKind.NETWORK
        assert NotConnectedException(code=AlpacaErrorCode.NOT_CONNECTED).kind == TransportErrorKind.PROTOCOL

    def test_protocol_exception_text(self) -> None:
        """Test the error number is rendered in hex."""
        exc = ProtocolException(code=0x40B, message="Parked")
        assert exc.code == 0x40B
        assert exc.message == "Parked"
        assert str(exc) == "0x40B: Parked"
        assert str(ProtocolException(code=0x400)) == "0x400"
        assert exc.name == "ProtocolException"

    def test_driver_error_range(self) -> None:
        """Test driver specific error numbers are recognized."""
        assert ProtocolException(code=0x500).is_driver_error is True
        assert ProtocolException(code=0xFFF).is_driver_error is True
        assert ProtocolException(code=0x4FF).is_driver_error is False

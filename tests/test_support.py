# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for support functions of aioalpaca."""

from __future__ import annotations

import logging

import pytest

from aioalpaca.const import CLIENT_ID_MAX, CLIENT_ID_MIN, DeviceType
from aioalpaca.exceptions import NetworkException, ValidationException
from aioalpaca.support import (
    build_device_id,
    build_device_url,
    generate_client_id,
    log_boundary_error,
    to_alpaca_params,
    to_alpaca_value,
)

_LOGGER = logging.getLogger(__name__)


class TestDeviceAddressing:
    """Ids and urls of devices."""

    @pytest.mark.parametrize(
        ("base_url", "device_type", "device_number", "expected"),
        [
            ("http://localhost:11111", DeviceType.TELESCOPE, 0, "localhost-11111-telescope-0"),
            ("https://Obs.Example.org", "filterwheel", 2, "obs-example-org-filterwheel-2"),
            ("http://192.168.1.20:32323/", DeviceType.OBSERVING_CONDITIONS, 1, "192-168-1-20-32323-observingconditions-1"),
        ],
    )
    def test_build_device_id(
        self, base_url: str, device_type: DeviceType | str, device_number: int, expected: str
    ) -> None:
        """Test device ids are stable slugs."""
        assert build_device_id(base_url=base_url, device_type=device_type, device_number=device_number) == expected

    @pytest.mark.parametrize(
        "base_url",
        ["http://localhost:11111", "http://localhost:11111/", "http://localhost:11111/api/v1"],
    )
    def test_build_device_url(self, base_url: str) -> None:
        """Test urls are lowercase and the api path is added once."""
        assert (
            build_device_url(base_url=base_url, device_type=DeviceType.TELESCOPE, device_number=0, action="DeviceState")
            == "http://localhost:11111/api/v1/telescope/0/devicestate"
        )

    def test_generate_client_id(self) -> None:
        """Test generated client ids are in the valid range."""
        for _ in range(20):
            assert CLIENT_ID_MIN <= generate_client_id() <= CLIENT_ID_MAX


class TestWireValues:
    """Conversion of parameters to the form encoding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, "True"),
            (False, "False"),
            (3, "3"),
            (1.5, "1.5"),
            ("Park", "Park"),
        ],
    )
    def test_to_alpaca_value(self, value: bool | float | str, expected: str) -> None:
        """Test supported values are encoded."""
        assert to_alpaca_value(value=value) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), None, [1, 2]])
    def test_to_alpaca_value_rejected(self, value: object) -> None:
        """Test values without a wire form are rejected."""
        with pytest.raises(ValidationException):
            to_alpaca_value(value=value)

    def test_to_alpaca_params_keep_key_case(self) -> None:
        """Test parameter names keep their casing."""
        assert to_alpaca_params(params={"TargetRightAscension": 5.25, "Tracking": True}) == {
            "TargetRightAscension": "5.25",
            "Tracking": "True",
        }
        assert to_alpaca_params(params=None) == {}


class TestLogBoundaryError:
    """Logging of errors crossing a public boundary."""

    def test_library_error_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test library errors are warnings and sensitive context is redacted."""
        caplog.set_level(logging.DEBUG)

        log_boundary_error(
            _LOGGER,
            boundary="service",
            action="park",
            err=NetworkException("timeout"),
            log_context={"target": "scope", "token": "abc"},
        )

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "action=park" in record.getMessage()
        assert '"token":"***"' in record.getMessage()
        assert "abc" not in record.getMessage()

    def test_other_error_logged_as_error(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test unexpected errors are logged at error level with the message."""
        caplog.set_level(logging.DEBUG)

        log_boundary_error(_LOGGER, boundary="service", action="park", err=RuntimeError("boom"), message="extra")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.getMessage().endswith("extra")

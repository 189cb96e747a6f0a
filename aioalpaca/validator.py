# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Validation functions used by the voluptuous schemas."""

from __future__ import annotations

from urllib.parse import urlsplit

import voluptuous as vol

from aioalpaca.const import DeviceType

positive_int = vol.All(vol.Coerce(int), vol.Range(min=0))


def base_url(value: str) -> str:
    """Validate an http(s) base address of an Alpaca server."""
    if not isinstance(value, str):
        raise vol.Invalid("base url must be a string")
    parts = urlsplit(value.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise vol.Invalid(f"{value} is not an http(s) url")
    return value.strip().rstrip("/")


def device_type(value: str) -> DeviceType:
    """Validate a device type tag, case insensitive."""
    try:
        return DeviceType(str(value).lower())
    except ValueError as verr:
        raise vol.Invalid(f"{value} is not a supported device type") from verr


def property_name(value: str) -> str:
    """Validate and normalize an Alpaca property name."""
    if not isinstance(value, str) or not value.strip() or not value.strip().isalnum():
        raise vol.Invalid(f"{value} is not a valid property name")
    return value.strip().lower()

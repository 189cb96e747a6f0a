# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Validation schemas for aioalpaca.

Response envelopes are checked before any value reaches the property cache.
Servers add fields beyond the standard envelope, so extra keys are allowed.
"""

from __future__ import annotations

import voluptuous as vol

from aioalpaca import validator as val
from aioalpaca.const import WireKey

RESPONSE_ENVELOPE_SCHEMA = vol.Schema(
    {
        vol.Optional(str(WireKey.VALUE)): object,
        vol.Optional(str(WireKey.ERROR_NUMBER), default=0): vol.Coerce(int),
        vol.Optional(str(WireKey.ERROR_MESSAGE), default=""): vol.Any(str, None),
        vol.Optional(str(WireKey.CLIENT_TRANSACTION_ID)): vol.Any(int, None),
        vol.Optional(str(WireKey.SERVER_TRANSACTION_ID)): vol.Any(int, None),
    },
    extra=vol.ALLOW_EXTRA,
)

DEVICE_STATE_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required(str(WireKey.NAME)): str,
        vol.Required(str(WireKey.VALUE)): object,
    },
    extra=vol.ALLOW_EXTRA,
)

DEVICE_STATE_SCHEMA = vol.Schema([DEVICE_STATE_ITEM_SCHEMA])

DEVICE_DESCRIPTOR_SCHEMA = vol.Schema(
    {
        vol.Required("base_url"): val.base_url,
        vol.Required("device_type"): val.device_type,
        vol.Required("device_number"): val.positive_int,
        vol.Optional("name"): vol.Any(str, None),
        vol.Optional("device_id"): vol.Any(vol.All(str, vol.Length(min=1)), None),
    }
)

TRACKED_PROPERTIES_SCHEMA = vol.Schema([val.property_name])

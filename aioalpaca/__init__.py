# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
aioalpaca: keep a live, shared view of Alpaca astronomy devices.

Start with aioalpaca.api.AlpacaAPI, or build a DeviceStateStore from a
CentralConfig for full control.
"""

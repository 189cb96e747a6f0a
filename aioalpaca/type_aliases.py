# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Shared typing aliases for callbacks and values."""

from __future__ import annotations

from collections.abc import Callable, Coroutine, Mapping
from typing import Any, TypeAlias

# Plain values a device returns for scalar properties or DeviceState items
type AlpacaValue = bool | int | float | str | list[Any] | None

# Request parameters before wire conversion, keyed by exact Alpaca casing
ParamMap: TypeAlias = Mapping[str, Any]

ZeroArgHandler: TypeAlias = Callable[[], None]

# Calling the handler removes the subscription again
UnsubscribeHandler: TypeAlias = ZeroArgHandler

CoroutineAny: TypeAlias = Coroutine[Any, Any, Any]

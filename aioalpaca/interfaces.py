# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Protocol interfaces between the layers of aioalpaca.

The clients only know these protocols, never the concrete synchronizer or
store, so each layer can be tested with small fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from aioalpaca.const import HttpVerb
    from aioalpaca.exceptions import BaseAlpacaException
    from aioalpaca.model import DeviceDescriptor
    from aioalpaca.type_aliases import AlpacaValue, ParamMap


@runtime_checkable
class TransportProtocol(Protocol):
    """A single request/response primitive."""

    async def invoke(
        self,
        *,
        device: DeviceDescriptor,
        verb: HttpVerb,
        action: str,
        params: ParamMap | None = None,
    ) -> AlpacaValue:
        """Issue one request and return its value."""


@runtime_checkable
class WriteObserverProtocol(Protocol):
    """
    Receives the outcome of writes and commands issued through a client.

    Client side reads of convenience operations also go through the observer,
    so they share the coalesced read path and the cache with the poll loop.
    """

    def begin_request(self) -> int:
        """Return the start order number for a new request."""

    def handle_property_written(self, *, device_id: str, name: str, value: AlpacaValue, request_seq: int) -> None:
        """Apply a successful property write to the cache."""

    def handle_command_completed(self, *, device_id: str, action: str) -> None:
        """React to a successful command."""

    async def handle_not_connected(self, *, device_id: str, error: BaseAlpacaException) -> None:
        """React to a device answering a write or command with NotConnected."""

    async def read_property(self, *, device_id: str, name: str) -> AlpacaValue:
        """Read a property through the coalesced read path and return its value."""

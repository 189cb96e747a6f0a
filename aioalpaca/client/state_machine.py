# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Connection state machine of a device.

    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED
                         |            |
                         v            v
                       ERROR  <-------+
                         |
                         +-> CONNECTING | DISCONNECTED

Invalid transitions raise InvalidStateTransitionError, so lifecycle bugs
show up where they happen instead of as a wrong state later on.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Final

from aioalpaca.const import ConnectionState

_LOGGER: Final = logging.getLogger(__name__)

_VALID_TRANSITIONS: Final[dict[ConnectionState, frozenset[ConnectionState]]] = {
    ConnectionState.DISCONNECTED: frozenset(
        {
            ConnectionState.CONNECTING,
            ConnectionState.DISCONNECTED,  # idempotent disconnect
        }
    ),
    ConnectionState.CONNECTING: frozenset(
        {
            ConnectionState.CONNECTED,
            ConnectionState.DISCONNECTED,  # disconnect while connecting
            ConnectionState.ERROR,
        }
    ),
    ConnectionState.CONNECTED: frozenset({ConnectionState.DISCONNECTED, ConnectionState.ERROR}),
    ConnectionState.ERROR: frozenset({ConnectionState.CONNECTING, ConnectionState.DISCONNECTED}),
}


class InvalidStateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, *, current: ConnectionState, target: ConnectionState, device_id: str) -> None:
        """Init the error."""
        self.current = current
        self.target = target
        self.device_id = device_id
        super().__init__(f"Invalid state transition from {current.value} to {target.value} for device {device_id}")


class DeviceStateMachine:
    """
    Connection state of one device.

    Not thread-safe. All calls happen on the event loop of the store.
    """

    __slots__ = ("_device_id", "_state", "on_state_change")

    def __init__(self, *, device_id: str) -> None:
        """Init the state machine."""
        self._device_id: Final = device_id
        self._state: ConnectionState = ConnectionState.DISCONNECTED
        self.on_state_change: Callable[[ConnectionState, ConnectionState], None] | None = None

    @property
    def is_connected(self) -> bool:
        """Return True if the device is connected."""
        return self._state == ConnectionState.CONNECTED

    @property
    def state(self) -> ConnectionState:
        """Return the current state."""
        return self._state

    def can_transition_to(self, *, target: ConnectionState) -> bool:
        """Return True if a transition to target is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, frozenset())

    def transition_to(self, *, target: ConnectionState, force: bool = False) -> None:
        """Move to target. force skips the validation."""
        if not force and not self.can_transition_to(target=target):
            raise InvalidStateTransitionError(current=self._state, target=target, device_id=self._device_id)

        old_state = self._state
        self._state = target
        _LOGGER.debug("STATE_MACHINE: %s: %s -> %s", self._device_id, old_state.value, target.value)

        if self.on_state_change is not None and old_state != target:
            try:
                self.on_state_change(old_state, target)
            except Exception:
                _LOGGER.exception(  # i18n-log: ignore
                    "STATE_MACHINE: Error in state change callback for %s",
                    self._device_id,
                )

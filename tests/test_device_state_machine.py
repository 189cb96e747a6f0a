# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for the device connection state machine."""

from __future__ import annotations

import pytest

from aioalpaca.client.state_machine import DeviceStateMachine, InvalidStateTransitionError
from aioalpaca.const import ConnectionState


class TestDeviceStateMachine:
    """Tests for DeviceStateMachine."""

    def test_initial_state(self) -> None:
        """Test a new device is disconnected."""
        machine = DeviceStateMachine(device_id="dev")
        assert machine.state == ConnectionState.DISCONNECTED
        assert machine.is_connected is False

    def test_connect_cycle(self) -> None:
        """Test the regular connect and disconnect cycle."""
        machine = DeviceStateMachine(device_id="dev")
        machine.transition_to(target=ConnectionState.CONNECTING)
        machine.transition_to(target=ConnectionState.CONNECTED)
        assert machine.is_connected is True
        machine.transition_to(target=ConnectionState.DISCONNECTED)
        assert machine.state == ConnectionState.DISCONNECTED

    def test_error_recovery(self) -> None:
        """Test a failed connect can be retried."""
        machine = DeviceStateMachine(device_id="dev")
        machine.transition_to(target=ConnectionState.CONNECTING)
        machine.transition_to(target=ConnectionState.ERROR)
        assert machine.can_transition_to(target=ConnectionState.CONNECTING) is True
        machine.transition_to(target=ConnectionState.CONNECTING)
        assert machine.state == ConnectionState.CONNECTING

    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ((), ConnectionState.CONNECTED),
            ((), ConnectionState.ERROR),
            ((ConnectionState.CONNECTING,), ConnectionState.CONNECTING),
            ((ConnectionState.CONNECTING, ConnectionState.CONNECTED), ConnectionState.CONNECTING),
            ((ConnectionState.CONNECTING, ConnectionState.ERROR), ConnectionState.CONNECTED),
        ],
    )
    def test_invalid_transitions(self, path: tuple[ConnectionState, ...], target: ConnectionState) -> None:
        """Test invalid transitions raise and keep the state."""
        machine = DeviceStateMachine(device_id="dev")
        for state in path:
            machine.transition_to(target=state)
        current = machine.state

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            machine.transition_to(target=target)
        assert exc_info.value.current == current
        assert exc_info.value.target == target
        assert machine.state == current

    def test_force_skips_validation(self) -> None:
        """Test force allows any transition."""
        machine = DeviceStateMachine(device_id="dev")
        machine.transition_to(target=ConnectionState.CONNECTED, force=True)
        assert machine.is_connected is True

    def test_callback_on_change_only(self) -> None:
        """Test the callback fires on real changes and its errors are contained."""
        machine = DeviceStateMachine(device_id="dev")
        changes: list[tuple[ConnectionState, ConnectionState]] = []
        machine.on_state_change = lambda old, new: changes.append((old, new))

        machine.transition_to(target=ConnectionState.DISCONNECTED)
        machine.transition_to(target=ConnectionState.CONNECTING)
        assert changes == [(ConnectionState.DISCONNECTED, ConnectionState.CONNECTING)]

        def failing(_old: ConnectionState, _new: ConnectionState) -> None:
            raise RuntimeError("callback failed")

        machine.on_state_change = failing
        machine.transition_to(target=ConnectionState.CONNECTED)
        assert machine.state == ConnectionState.CONNECTED

# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for the capability cache."""

from __future__ import annotations

from aioalpaca.client.capabilities import CapabilityCache
from aioalpaca.const import CapabilityState


class TestCapabilityCache:
    """Tests for the three-valued capability cache."""

    def test_everything_unknown_initially(self) -> None:
        """Test a new cache knows nothing."""
        cache = CapabilityCache(device_id="dev")
        assert cache.get_state(member="altitude") == CapabilityState.UNKNOWN
        assert cache.bulk_read == CapabilityState.UNKNOWN
        assert cache.is_unsupported(member="altitude") is False

    def test_mark_supported_only_from_unknown(self) -> None:
        """Test supported never overrides unsupported."""
        cache = CapabilityCache(device_id="dev")
        assert cache.mark_supported(member="Altitude") is True
        assert cache.mark_supported(member="altitude") is False
        assert cache.get_state(member="ALTITUDE") == CapabilityState.SUPPORTED

        cache.mark_unsupported(member="azimuth")
        assert cache.mark_supported(member="azimuth") is False
        assert cache.get_state(member="azimuth") == CapabilityState.UNSUPPORTED

    def test_supported_property_can_become_unsupported(self) -> None:
        """Test a supported property that keeps failing is demoted."""
        cache = CapabilityCache(device_id="dev")
        cache.mark_supported(member="altitude")
        assert cache.mark_unsupported(member="altitude") is True
        assert cache.mark_unsupported(member="altitude") is False
        assert cache.is_unsupported(member="altitude") is True

    def test_bulk_read_resolves_once(self) -> None:
        """Test the bulk read leaves unknown exactly once per session."""
        cache = CapabilityCache(device_id="dev")
        assert cache.mark_supported(member="devicestate") is True
        assert cache.mark_unsupported(member="devicestate") is False
        assert cache.bulk_read == CapabilityState.SUPPORTED

        other = CapabilityCache(device_id="dev")
        assert other.mark_unsupported(member="devicestate") is True
        assert other.mark_supported(member="devicestate") is False
        assert other.bulk_read == CapabilityState.UNSUPPORTED

    def test_resolved_callback(self) -> None:
        """Test the callback fires on every transition only."""
        resolved: list[tuple[str, CapabilityState]] = []
        cache = CapabilityCache(device_id="dev", on_resolved=lambda member, state: resolved.append((member, state)))

        cache.mark_supported(member="altitude")
        cache.mark_supported(member="altitude")
        cache.mark_unsupported(member="altitude")

        assert resolved == [
            ("altitude", CapabilityState.SUPPORTED),
            ("altitude", CapabilityState.UNSUPPORTED),
        ]

    def test_clear_forgets_and_stops_notifying(self) -> None:
        """Test a cleared cache is empty and silent."""
        resolved: list[str] = []
        cache = CapabilityCache(device_id="dev", on_resolved=lambda member, _state: resolved.append(member))
        cache.mark_unsupported(member="altitude")
        cache.clear()

        assert cache.get_state(member="altitude") == CapabilityState.UNKNOWN
        cache.mark_supported(member="azimuth")
        assert resolved == ["altitude"]

    def test_snapshot(self) -> None:
        """Test the snapshot separates the bulk read from the members."""
        cache = CapabilityCache(device_id="dev")
        cache.mark_supported(member="altitude")
        cache.mark_unsupported(member="azimuth")
        cache.mark_unsupported(member="devicestate")

        record = cache.snapshot()
        assert record.device_id == "dev"
        assert record.bulk_read == CapabilityState.UNSUPPORTED
        assert record.get_state(member="altitude") == CapabilityState.SUPPORTED
        assert record.unsupported == frozenset({"azimuth"})
        assert "devicestate" not in record.members

        cache.mark_unsupported(member="altitude")
        assert record.get_state(member="altitude") == CapabilityState.SUPPORTED

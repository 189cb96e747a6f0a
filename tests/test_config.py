# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for CentralConfigBuilder."""

from __future__ import annotations

import pytest

from aioalpaca.central.config import CentralConfig, CentralConfigBuilder
from aioalpaca.central.store import DeviceStateStore
from aioalpaca.const import DEFAULT_FAILURE_THRESHOLD, DEFAULT_POLL_INTERVAL
from aioalpaca_test_support.mock import ScriptedTransport


class TestCentralConfigBuilder:
    """Tests for the fluent builder."""

    def test_defaults(self) -> None:
        """Test a config with just a name uses the defaults."""
        config = CentralConfigBuilder().with_name(name=" observatory ").build()
        assert config.name == "observatory"
        assert config.poll_interval == DEFAULT_POLL_INTERVAL
        assert config.failure_threshold == DEFAULT_FAILURE_THRESHOLD
        assert config.enable_bulk_read is True
        assert config.fetch_static_properties_on_connect is True
        assert config.client_id is None

    def test_fluent_options(self) -> None:
        """Test every option ends up in the config."""
        config = (
            CentralConfigBuilder()
            .with_name(name="obs")
            .with_request_timeout(seconds=2.5)
            .with_poll_interval(seconds=5.0)
            .with_tick_interval(seconds=0.5)
            .with_failure_threshold(threshold=5)
            .with_bulk_read(enabled=False)
            .with_static_properties(enabled=False)
            .with_client_id(client_id=4711)
            .with_locale(locale="de")
            .with_event_logging(enabled=True)
            .build()
        )
        assert config == CentralConfig(
            name="obs",
            request_timeout=2.5,
            poll_interval=5.0,
            tick_interval=0.5,
            failure_threshold=5,
            enable_bulk_read=False,
            fetch_static_properties_on_connect=False,
            client_id=4711,
            locale="de",
            enable_event_logging=True,
        )

    def test_presets(self) -> None:
        """Test the presets produce valid configs."""
        dashboard = CentralConfigBuilder.for_dashboard(name="dash").build()
        assert dashboard.poll_interval == 1.0
        assert dashboard.tick_interval == 0.1

        monitoring = CentralConfigBuilder.for_monitoring(name="mon").build()
        assert monitoring.poll_interval == 10.0
        assert monitoring.fetch_static_properties_on_connect is False

    @pytest.mark.parametrize(
        ("builder", "field"),
        [
            (CentralConfigBuilder(), "name"),
            (CentralConfigBuilder().with_name(name="x").with_request_timeout(seconds=0), "request_timeout"),
            (CentralConfigBuilder().with_name(name="x").with_poll_interval(seconds=-1), "poll_interval"),
            (CentralConfigBuilder().with_name(name="x").with_tick_interval(seconds=0), "tick_interval"),
            (
                CentralConfigBuilder().with_name(name="x").with_poll_interval(seconds=1).with_tick_interval(seconds=2),
                "tick_interval",
            ),
            (CentralConfigBuilder().with_name(name="x").with_failure_threshold(threshold=0), "failure_threshold"),
            (CentralConfigBuilder().with_name(name="x").with_client_id(client_id=0), "client_id"),
        ],
    )
    def test_validation(self, builder: CentralConfigBuilder, field: str) -> None:
        """Test each invalid option is reported and blocks build."""
        assert field in {error.field for error in builder.validate()}
        with pytest.raises(ValueError, match=field):
            builder.build()

    def test_all_errors_reported(self) -> None:
        """Test validate collects every problem at once."""
        errors = CentralConfigBuilder().with_poll_interval(seconds=0).with_failure_threshold(threshold=0).validate()
        assert {error.field for error in errors} == {"name", "poll_interval", "tick_interval", "failure_threshold"}

    @pytest.mark.asyncio
    async def test_create_store(self) -> None:
        """Test the config creates a store bound to itself."""
        config = CentralConfigBuilder().with_name(name="obs").build()
        transport = ScriptedTransport()

        store = config.create_store(transport=transport)

        assert isinstance(store, DeviceStateStore)
        assert store.config is config
        assert store.transport is transport
        await store.stop()

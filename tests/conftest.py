# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Test support for aioalpaca."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
import logging
from unittest.mock import patch

from aiohttp import ClientSession
import pytest

from aioalpaca import i18n
from aioalpaca.central.config import CentralConfig
from aioalpaca.central.store import DeviceStateStore
from aioalpaca.const import DeviceType
from aioalpaca_test_support.event_capture import EventCapture
from aioalpaca_test_support.mock import ScriptedTransport

from tests.helpers.mock_alpaca import MockAlpacaServer

logging.basicConfig(level=logging.INFO)

BASE_URL = "http://localhost:11111"

# pylint: disable=protected-access, redefined-outer-name


@pytest.fixture(autouse=True)
def teardown() -> Generator[None]:
    """Clean up."""
    i18n.set_locale(locale="en")
    yield
    patch.stopall()
    i18n.set_locale(locale="en")


@pytest.fixture
def event_capture() -> Generator[EventCapture]:
    """Provide an EventCapture instance with automatic cleanup."""
    capture = EventCapture()
    yield capture
    capture.cleanup()


@pytest.fixture
def transport() -> ScriptedTransport:
    """Return a scripted transport."""
    return ScriptedTransport()


@pytest.fixture
def config() -> CentralConfig:
    """Return a store config that does no background reads on connect."""
    return CentralConfig(name="test", fetch_static_properties_on_connect=False)


@pytest.fixture
async def store(config: CentralConfig, transport: ScriptedTransport) -> AsyncGenerator[DeviceStateStore]:
    """Yield a store on the scripted transport. The poll loop is not started."""
    device_store = DeviceStateStore(config=config, transport=transport)
    yield device_store
    await device_store.stop()


@pytest.fixture
async def telescope_id(store: DeviceStateStore) -> str:
    """Add a telescope and return its id."""
    descriptor = await store.add_device(base_url=BASE_URL, device_type=DeviceType.TELESCOPE, device_number=0)
    return descriptor.device_id


@pytest.fixture
async def mock_server() -> AsyncGenerator[tuple[MockAlpacaServer, str]]:
    """Yield a running mock Alpaca server and its base url."""
    server = MockAlpacaServer()
    base_url = await server.start()
    yield server, base_url
    await server.stop()


@pytest.fixture
async def aiohttp_session() -> AsyncGenerator[ClientSession]:
    """Yield an aiohttp session."""
    session = ClientSession()
    yield session
    await session.close()

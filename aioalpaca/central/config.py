# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Configuration of a device state store.

CentralConfig is immutable. CentralConfigBuilder collects the options with a
fluent interface and validates them together:

    config = (
        CentralConfigBuilder()
        .with_name(name="observatory")
        .with_poll_interval(seconds=2.0)
        .with_failure_threshold(threshold=5)
        .build()
    )

validate() returns every problem at once, build() raises ValueError if there
is any.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

from aioalpaca.const import (
    CLIENT_ID_MAX,
    CLIENT_ID_MIN,
    DEFAULT_BULK_READ_ENABLED,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_FETCH_STATIC_PROPERTIES,
    DEFAULT_LOCALE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TICK_INTERVAL,
)

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from aioalpaca.central.store import DeviceStateStore
    from aioalpaca.interfaces import TransportProtocol


@dataclass(frozen=True, kw_only=True, slots=True)
class ValidationError:
    """A single configuration problem."""

    field: str
    message: str


@dataclass(frozen=True, kw_only=True, slots=True)
class CentralConfig:
    """Options of a DeviceStateStore."""

    name: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    tick_interval: float = DEFAULT_TICK_INTERVAL
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    enable_bulk_read: bool = DEFAULT_BULK_READ_ENABLED
    fetch_static_properties_on_connect: bool = DEFAULT_FETCH_STATIC_PROPERTIES
    client_id: int | None = None
    locale: str = DEFAULT_LOCALE
    enable_event_logging: bool = False
    client_session: ClientSession | None = None

    def create_store(self, *, transport: TransportProtocol | None = None) -> DeviceStateStore:
        """Create a device state store with this configuration."""
        from aioalpaca.central.store import DeviceStateStore  # pylint: disable=import-outside-toplevel

        return DeviceStateStore(config=self, transport=transport)


class CentralConfigBuilder:
    """Fluent builder of CentralConfig."""

    __slots__ = (
        "_client_id",
        "_client_session",
        "_enable_bulk_read",
        "_enable_event_logging",
        "_failure_threshold",
        "_fetch_static_properties",
        "_locale",
        "_name",
        "_poll_interval",
        "_request_timeout",
        "_tick_interval",
    )

    def __init__(self) -> None:
        """Init the builder with defaults."""
        self._name: str | None = None
        self._request_timeout: float = DEFAULT_REQUEST_TIMEOUT
        self._poll_interval: float = DEFAULT_POLL_INTERVAL
        self._tick_interval: float = DEFAULT_TICK_INTERVAL
        self._failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
        self._enable_bulk_read: bool = DEFAULT_BULK_READ_ENABLED
        self._fetch_static_properties: bool = DEFAULT_FETCH_STATIC_PROPERTIES
        self._client_id: int | None = None
        self._locale: str = DEFAULT_LOCALE
        self._enable_event_logging: bool = False
        self._client_session: ClientSession | None = None

    @classmethod
    def for_dashboard(cls, *, name: str) -> Self:
        """Return a builder tuned for an interactive dashboard with many observers."""
        return cls().with_name(name=name).with_poll_interval(seconds=1.0).with_tick_interval(seconds=0.1)

    @classmethod
    def for_monitoring(cls, *, name: str) -> Self:
        """Return a builder for slow unattended monitoring."""
        return (
            cls()
            .with_name(name=name)
            .with_poll_interval(seconds=10.0)
            .with_tick_interval(seconds=1.0)
            .with_static_properties(enabled=False)
        )

    def with_name(self, *, name: str) -> Self:
        """Set the name of the store."""
        self._name = name
        return self

    def with_request_timeout(self, *, seconds: float) -> Self:
        """Set the timeout of a single request."""
        self._request_timeout = seconds
        return self

    def with_poll_interval(self, *, seconds: float) -> Self:
        """Set the default poll interval of a device."""
        self._poll_interval = seconds
        return self

    def with_tick_interval(self, *, seconds: float) -> Self:
        """Set how often the scheduler evaluates due poll tasks."""
        self._tick_interval = seconds
        return self

    def with_failure_threshold(self, *, threshold: int) -> Self:
        """Set the consecutive failures after which a property becomes unavailable."""
        self._failure_threshold = threshold
        return self

    def with_bulk_read(self, *, enabled: bool) -> Self:
        """Enable or disable DeviceState bulk reads."""
        self._enable_bulk_read = enabled
        return self

    def with_static_properties(self, *, enabled: bool) -> Self:
        """Enable or disable reading the static properties after connect."""
        self._fetch_static_properties = enabled
        return self

    def with_client_id(self, *, client_id: int) -> Self:
        """Use a fixed ClientID instead of a random one."""
        self._client_id = client_id
        return self

    def with_locale(self, *, locale: str) -> Self:
        """Set the locale of messages."""
        self._locale = locale
        return self

    def with_event_logging(self, *, enabled: bool) -> Self:
        """Log every published event at debug level."""
        self._enable_event_logging = enabled
        return self

    def with_client_session(self, *, client_session: ClientSession) -> Self:
        """Share an aiohttp session instead of creating one."""
        self._client_session = client_session
        return self

    def validate(self) -> list[ValidationError]:
        """Return all configuration problems."""
        errors: list[ValidationError] = []
        if not self._name or not self._name.strip():
            errors.append(ValidationError(field="name", message="Name is required"))
        if self._request_timeout <= 0:
            errors.append(ValidationError(field="request_timeout", message="Request timeout must be positive"))
        if self._poll_interval <= 0:
            errors.append(ValidationError(field="poll_interval", message="Poll interval must be positive"))
        if self._tick_interval <= 0:
            errors.append(ValidationError(field="tick_interval", message="Tick interval must be positive"))
        elif self._tick_interval > self._poll_interval:
            errors.append(
                ValidationError(field="tick_interval", message="Tick interval must not exceed the poll interval")
            )
        if self._failure_threshold < 1:
            errors.append(ValidationError(field="failure_threshold", message="Failure threshold must be at least 1"))
        if self._client_id is not None and not CLIENT_ID_MIN <= self._client_id <= CLIENT_ID_MAX:
            errors.append(
                ValidationError(
                    field="client_id",
                    message=f"Client id must be between {CLIENT_ID_MIN} and {CLIENT_ID_MAX}",
                )
            )
        return errors

    def build(self) -> CentralConfig:
        """Return the configuration. Raise ValueError if it is invalid."""
        if errors := self.validate():
            raise ValueError(
                "Invalid configuration: " + "; ".join(f"{error.field}: {error.message}" for error in errors)
            )
        assert self._name is not None
        return CentralConfig(
            name=self._name.strip(),
            request_timeout=self._request_timeout,
            poll_interval=self._poll_interval,
            tick_interval=self._tick_interval,
            failure_threshold=self._failure_threshold,
            enable_bulk_read=self._enable_bulk_read,
            fetch_static_properties_on_connect=self._fetch_static_properties,
            client_id=self._client_id,
            locale=self._locale,
            enable_event_logging=self._enable_event_logging,
            client_session=self._client_session,
        )

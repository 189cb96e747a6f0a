# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Device state store: the single source of truth for all consumers.

The store holds one row per device: its descriptor, the capability cache of
the current connection and the property cache. Reads (get_device,
get_property, ...) are synchronous and never touch the network. All
consumers of a device share one poll task and one cache; consumers add
properties to the poll set with track_properties or subscribe.

Lifecycle of a device:
- add_device creates the descriptor (disconnected)
- connect creates a new capability cache and client, sets Connected on the
  device and registers the poll task
- disconnect removes the poll task, clears the property cache and drops the
  capability cache; in-flight reads complete but their results are dropped
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from functools import partial
import logging
from types import MappingProxyType
from typing import Any, Final

import voluptuous as vol

from aioalpaca import i18n
from aioalpaca.async_support import Looper
from aioalpaca.central.config import CentralConfig
from aioalpaca.central.device_context import DeviceContext
from aioalpaca.central.event_bus import (
    CapabilityResolvedEvent,
    DeviceAddedEvent,
    DeviceConnectionStateChangedEvent,
    DeviceRemovedEvent,
    Event,
    EventBus,
    PropertyChangedEvent,
)
from aioalpaca.central.scheduler import PollScheduler, PollTask
from aioalpaca.central.synchronizer import PropertySynchronizer
from aioalpaca.client.base import AlpacaClient
from aioalpaca.client.capabilities import CapabilityCache, CapabilityRecord
from aioalpaca.client.factory import create_client, get_client_class
from aioalpaca.client.transport import AlpacaTransport, TransactionCounter
from aioalpaca.const import CapabilityState, ConnectionState, DeviceType, FetchState
from aioalpaca.exceptions import (
    BaseAlpacaException,
    DeviceNotFoundException,
    NoConnectionException,
    NotImplementedException,
    ValidationException,
)
from aioalpaca.interfaces import TransportProtocol
from aioalpaca.model import DeviceDescriptor, PropertyCacheEntry
from aioalpaca.schemas import DEVICE_DESCRIPTOR_SCHEMA, TRACKED_PROPERTIES_SCHEMA
from aioalpaca.support import build_device_id, extract_exc_args
from aioalpaca.type_aliases import AlpacaValue, UnsubscribeHandler

_LOGGER: Final = logging.getLogger(__name__)


class DeviceStateStore:
    """Table of devices and their last known properties."""

    __slots__ = (
        "_config",
        "_contexts",
        "_event_bus",
        "_looper",
        "_own_transport",
        "_synchronizer",
        "_transport",
    )

    def __init__(self, *, config: CentralConfig, transport: TransportProtocol | None = None) -> None:
        """Init the store. Without a transport, an AlpacaTransport is created from the config."""
        self._config: Final = config
        i18n.set_locale(locale=config.locale)
        self._contexts: Final[dict[str, DeviceContext]] = {}
        self._event_bus: Final = EventBus(enable_event_logging=config.enable_event_logging)
        self._looper: Final = Looper()
        self._own_transport: Final = transport is None
        self._transport: Final[TransportProtocol] = transport or AlpacaTransport(
            session=config.client_session,
            request_timeout=config.request_timeout,
            counter=TransactionCounter(client_id=config.client_id),
        )
        self._synchronizer: Final = PropertySynchronizer(
            name=config.name,
            contexts=self._contexts,
            event_bus=self._event_bus,
            looper=self._looper,
            on_device_lost=self.handle_device_lost,
            failure_threshold=config.failure_threshold,
            enable_bulk_read=config.enable_bulk_read,
            tick_interval=config.tick_interval,
        )

    def __str__(self) -> str:
        """Return the name of the store."""
        return self._config.name

    @property
    def config(self) -> CentralConfig:
        """Return the configuration."""
        return self._config

    @property
    def event_bus(self) -> EventBus:
        """Return the event bus."""
        return self._event_bus

    @property
    def looper(self) -> Looper:
        """Return the task tracker."""
        return self._looper

    @property
    def name(self) -> str:
        """Return the name of the store."""
        return self._config.name

    @property
    def scheduler(self) -> PollScheduler:
        """Return the poll scheduler."""
        return self._synchronizer.scheduler

    @property
    def synchronizer(self) -> PropertySynchronizer:
        """Return the property synchronizer."""
        return self._synchronizer

    @property
    def transport(self) -> TransportProtocol:
        """Return the transport."""
        return self._transport

    # lifecycle

    async def start(self) -> None:
        """Start the poll loop."""
        await i18n.preload_locale(locale=self._config.locale)
        self.scheduler.start()
        _LOGGER.info(  # i18n-log: ignore
            "START: %s: Store started", self.name
        )

    async def stop(self) -> None:
        """Disconnect all devices, stop the poll loop and wait for running polls."""
        for device_id in [ctx.device_id for ctx in self._contexts.values() if ctx.is_connected]:
            await self.disconnect(device_id=device_id)
        await self.scheduler.stop()
        await self._looper.block_till_done()
        await self._looper.cancel_tasks()
        if self._own_transport and isinstance(self._transport, AlpacaTransport):
            await self._transport.close()
        _LOGGER.info(  # i18n-log: ignore
            "STOP: %s: Store stopped", self.name
        )

    # device table

    async def add_device(
        self,
        *,
        base_url: str,
        device_type: DeviceType | str,
        device_number: int,
        name: str | None = None,
        device_id: str | None = None,
    ) -> DeviceDescriptor:
        """Add a device in disconnected state and return its descriptor."""
        try:
            data = DEVICE_DESCRIPTOR_SCHEMA(
                {
                    "base_url": base_url,
                    "device_type": device_type,
                    "device_number": device_number,
                    "name": name,
                    "device_id": device_id,
                }
            )
        except vol.Invalid as err:
            raise ValidationException(i18n.tr("exception.store.device.invalid", reason=str(err))) from err

        descriptor = DeviceDescriptor(
            device_id=data["device_id"]
            or build_device_id(
                base_url=data["base_url"], device_type=data["device_type"], device_number=data["device_number"]
            ),
            device_type=data["device_type"],
            base_url=data["base_url"],
            device_number=data["device_number"],
            name=data["name"],
        )
        if descriptor.device_id in self._contexts:
            raise ValidationException(i18n.tr("exception.store.device.duplicate", device_id=descriptor.device_id))
        self._contexts[descriptor.device_id] = DeviceContext(descriptor=descriptor)
        _LOGGER.debug("ADD_DEVICE: %s: Added %s", self.name, descriptor.device_id)
        await self._event_bus.publish(event=DeviceAddedEvent(device_id=descriptor.device_id))
        return descriptor

    async def remove_device(self, *, device_id: str) -> None:
        """Disconnect and remove a device."""
        ctx = self._get_context(device_id=device_id)
        if ctx.state_machine.state != ConnectionState.DISCONNECTED:
            await self.disconnect(device_id=device_id)
        self._contexts.pop(device_id, None)
        await self._event_bus.publish(event=DeviceRemovedEvent(device_id=device_id))

    def get_device(self, *, device_id: str) -> DeviceDescriptor | None:
        """Return the descriptor of a device."""
        if (ctx := self._contexts.get(device_id)) is None:
            return None
        return ctx.descriptor

    def get_devices(self) -> tuple[DeviceDescriptor, ...]:
        """Return the descriptors of all devices."""
        return tuple(ctx.descriptor for ctx in self._contexts.values())

    def get_property(self, *, device_id: str, name: str) -> PropertyCacheEntry | None:
        """Return the cached entry of a property."""
        if (ctx := self._contexts.get(device_id)) is None:
            return None
        return ctx.entries.get(name.lower())

    def get_properties(self, *, device_id: str) -> Mapping[str, PropertyCacheEntry]:
        """Return all cached entries of a device."""
        if (ctx := self._contexts.get(device_id)) is None:
            return MappingProxyType({})
        return MappingProxyType(dict(ctx.entries))

    def get_value(self, *, device_id: str, name: str, default: AlpacaValue = None) -> AlpacaValue:
        """Return the cached value of a property, or default if there is none."""
        if (entry := self.get_property(device_id=device_id, name=name)) is None or not entry.has_value:
            return default
        return entry.value

    def get_capabilities(self, *, device_id: str) -> CapabilityRecord | None:
        """Return the capabilities of the current connection."""
        if (ctx := self._contexts.get(device_id)) is None or ctx.capabilities is None:
            return None
        return ctx.capabilities.snapshot()

    def get_fetch_state(self, *, device_id: str, name: str) -> FetchState:
        """Return whether a read of the property is in flight."""
        return self._synchronizer.get_fetch_state(device_id=device_id, name=name)

    def get_client(self, *, device_id: str) -> AlpacaClient:
        """Return the client of a connected device for writes and commands."""
        ctx = self._get_context(device_id=device_id)
        if not ctx.is_connected or ctx.client is None:
            raise NoConnectionException(i18n.tr("exception.store.device.not_connected", device_id=device_id))
        return ctx.client

    def _get_context(self, *, device_id: str) -> DeviceContext:
        if (ctx := self._contexts.get(device_id)) is None:
            raise DeviceNotFoundException(i18n.tr("exception.store.device.not_found", device_id=device_id))
        return ctx

    # connection

    async def connect(self, *, device_id: str) -> None:
        """Connect a device and start polling it."""
        ctx = self._get_context(device_id=device_id)
        if ctx.state_machine.state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            return

        ctx.generation += 1
        generation = ctx.generation
        events: list[Event] = [self._set_state(ctx=ctx, target=ConnectionState.CONNECTING)]
        ctx.entries.clear()
        ctx.capabilities = CapabilityCache(
            device_id=device_id, on_resolved=partial(self._on_capability_resolved, device_id)
        )
        ctx.client = client = create_client(
            device=ctx.descriptor,
            transport=self._transport,
            capabilities=ctx.capabilities,
            write_observer=self._synchronizer,
        )
        await self._publish(events=events)

        try:
            await client.set_connected(connected=True)
        except NotImplementedException:
            _LOGGER.debug("CONNECT: %s: Device does not implement Connected", device_id)
        except BaseException as err:
            if (error_event := self._abort_connect(ctx=ctx, generation=generation, error=err)) is not None:
                if isinstance(err, BaseAlpacaException):
                    await self._publish(events=[error_event])
                else:
                    # the task may be cancelled, publish without waiting
                    self._looper.create_task(
                        target=self._publish(events=[error_event]), name=f"publish-{device_id}"
                    )
            raise

        if ctx.generation != generation or ctx.state_machine.state != ConnectionState.CONNECTING:
            _LOGGER.debug("CONNECT: %s: Connection attempt was superseded", device_id)
            if ctx.generation == generation:
                # disconnected while Connected was being set
                await self._release_device(client=client)
            return

        event = self._set_state(ctx=ctx, target=ConnectionState.CONNECTED)
        self.scheduler.add_task(
            task=PollTask(
                device_id=device_id,
                properties=self._initial_poll_set(ctx=ctx, client=client),
                interval=self._config.poll_interval,
            )
        )
        _LOGGER.info(  # i18n-log: ignore
            "CONNECT: %s: Connected %s", self.name, device_id
        )
        await self._publish(events=[event])
        if self._config.fetch_static_properties_on_connect and client.STATIC_PROPERTIES:
            self._looper.create_task(
                target=self._synchronizer.fetch_properties(device_id=device_id, names=client.STATIC_PROPERTIES),
                name=f"static-{device_id}",
            )

    async def disconnect(self, *, device_id: str) -> None:
        """Stop polling a device, clear its cache and set Connected false on the device."""
        ctx = self._get_context(device_id=device_id)
        if ctx.state_machine.state == ConnectionState.DISCONNECTED:
            return
        client = ctx.client
        was_connected = ctx.is_connected
        event = self._set_state(ctx=ctx, target=ConnectionState.DISCONNECTED)
        self._teardown(ctx=ctx)
        _LOGGER.info(  # i18n-log: ignore
            "DISCONNECT: %s: Disconnected %s", self.name, device_id
        )
        await self._publish(events=[event])
        if was_connected and client is not None:
            await self._release_device(client=client)

    async def _release_device(self, *, client: AlpacaClient) -> None:
        """Set Connected false on the device. Failures are only logged."""
        try:
            await client.set_connected(connected=False)
        except BaseAlpacaException as bae:
            _LOGGER.debug(
                "DISCONNECT: %s: Setting Connected false failed: %s [%s]",
                client.device_id,
                bae.name,
                extract_exc_args(exc=bae),
            )

    def _abort_connect(
        self, *, ctx: DeviceContext, generation: int, error: BaseException
    ) -> DeviceConnectionStateChangedEvent | None:
        """Move a failed connection attempt to error unless it was superseded."""
        if ctx.generation != generation or ctx.state_machine.state != ConnectionState.CONNECTING:
            return None
        self._teardown(ctx=ctx)
        reason = (
            str(extract_exc_args(exc=error)) if isinstance(error, BaseAlpacaException) else error.__class__.__name__
        )
        return self._set_state(ctx=ctx, target=ConnectionState.ERROR, reason=reason)

    async def handle_device_lost(self, device_id: str, reason: str) -> None:
        """Force a device that silently lost its connection into disconnected."""
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_connected:
            return
        event = self._set_state(ctx=ctx, target=ConnectionState.DISCONNECTED, reason=reason)
        self._teardown(ctx=ctx)
        await self._publish(events=[event])

    def _teardown(self, *, ctx: DeviceContext) -> None:
        self.scheduler.remove_task(device_id=ctx.device_id)
        ctx.entries.clear()
        if ctx.capabilities is not None:
            ctx.capabilities.clear()
        ctx.capabilities = None
        ctx.client = None

    def _set_state(
        self, *, ctx: DeviceContext, target: ConnectionState, reason: str | None = None
    ) -> DeviceConnectionStateChangedEvent:
        old_state = ctx.state_machine.state
        ctx.state_machine.transition_to(target=target)
        ctx.descriptor = replace(ctx.descriptor, connection_state=target)
        return DeviceConnectionStateChangedEvent(
            device_id=ctx.device_id, old_state=old_state, new_state=target, reason=reason
        )

    # polling and consumers

    def _initial_poll_set(self, *, ctx: DeviceContext, client: AlpacaClient) -> set[str]:
        return {*client.POLLED_PROPERTIES, *(name for name, refs in ctx.tracked.items() if refs > 0)}

    async def refresh_property(self, *, device_id: str, name: str) -> PropertyCacheEntry | None:
        """Read a property now. Never raises on read failures."""
        return await self._synchronizer.refresh_property(device_id=device_id, name=name)

    def track_properties(self, *, device_id: str, names: Iterable[str]) -> UnsubscribeHandler:
        """
        Add properties to the poll set of a device.

        Calling the returned function releases them again. A property stays
        polled while any consumer tracks it.
        """
        ctx = self._get_context(device_id=device_id)
        try:
            keys: list[str] = TRACKED_PROPERTIES_SCHEMA(list(names))
        except vol.Invalid as err:
            raise ValidationException(i18n.tr("exception.store.property.invalid", reason=str(err))) from err
        client_class = get_client_class(device_type=ctx.descriptor.device_type)
        if unknown := [key for key in keys if not client_class.is_readable(name=key)]:
            raise ValidationException(
                i18n.tr(
                    "exception.store.property.unknown",
                    names=", ".join(unknown),
                    device_type=ctx.descriptor.device_type,
                )
            )
        ctx.tracked.update(keys)
        if (task := self.scheduler.get_task(device_id=device_id)) is not None:
            task.add_properties(names=[key for key in keys if self._is_pollable(ctx=ctx, name=key)])

        released = False

        def _release() -> None:
            nonlocal released
            if released:
                return
            released = True
            ctx.tracked.subtract(keys)
            task = self.scheduler.get_task(device_id=device_id)
            for key in keys:
                if ctx.tracked[key] > 0:
                    continue
                del ctx.tracked[key]
                if task is not None and key not in client_class.POLLED_PROPERTIES:
                    task.remove_property(name=key)

        return _release

    def _is_pollable(self, *, ctx: DeviceContext, name: str) -> bool:
        return ctx.capabilities is None or ctx.capabilities.get_state(member=name) != CapabilityState.UNSUPPORTED

    def subscribe(
        self,
        *,
        device_id: str,
        handler: Callable[[PropertyChangedEvent], Any],
        property_name: str | None = None,
    ) -> UnsubscribeHandler:
        """
        Subscribe to value changes of a device, or of one of its properties.

        Subscribing to a single property also keeps it in the poll set until
        the returned function is called.
        """
        release_tracking: UnsubscribeHandler | None = None
        key: str | None = None
        if property_name is not None:
            key = property_name.lower()
            release_tracking = self.track_properties(device_id=device_id, names=[key])

        def _on_change(event: PropertyChangedEvent) -> Any:
            if key is None or event.name == key:
                return handler(event)
            return None

        unsubscribe = self._event_bus.subscribe(event_type=PropertyChangedEvent, event_key=device_id, handler=_on_change)

        def _unsubscribe() -> None:
            unsubscribe()
            if release_tracking is not None:
                release_tracking()

        return _unsubscribe

    def _on_capability_resolved(self, device_id: str, member: str, state: CapabilityState) -> None:
        self._looper.create_task(
            target=self._event_bus.publish(
                event=CapabilityResolvedEvent(device_id=device_id, member=member, state=state)
            ),
            name=f"capability-{device_id}-{member}",
        )

    async def _publish(self, *, events: list[Event]) -> None:
        for event in events:
            await self._event_bus.publish(event=event)

# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Property synchronizer: decides how device properties are read and how the
results end up in the property cache.

Per poll tick and device:
1. Unless the DeviceState bulk read is known to be unsupported (or disabled),
   one bulk read covers the tracked properties.
2. Properties the bulk read did not cover are read one by one, skipping those
   with a read already in flight.

Reads are coalesced per (device, property): while a read is pending, further
requests for the same property await it. Writes and commands are never
coalesced; a successful write updates the cache entry immediately. Reads a
client needs for its own operations join the same coalesced path.

Each read gets a start order number before it is issued. A result only
replaces an entry that was produced by a request started earlier, so a slow
response can never overwrite a newer value. With equal numbers the later
arrival wins. Results of a previous connection generation are dropped.

Read failure policy:
- NetworkException: failure_count + 1, saturating at the threshold. Reaching
  it makes the property unavailable for the rest of the connection.
- UnsupportedException (not implemented): unavailable immediately.
- NotConnectedException: the device is treated as lost and disconnected.
  Writes and commands answered this way disconnect the device as well.
- Other protocol errors: kept on the entry, the counter is unchanged.

All cache updates of one result happen without suspension. Events are
published afterwards.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Collection, Mapping
from dataclasses import replace
from datetime import datetime
from itertools import count
import logging
from typing import TYPE_CHECKING, Final

from aioalpaca import i18n
from aioalpaca.async_support import Looper
from aioalpaca.central.event_bus import Event, PropertyAvailabilityChangedEvent, PropertyChangedEvent
from aioalpaca.central.scheduler import PollScheduler, PollTask
from aioalpaca.client.request_coalescer import RequestCoalescer
from aioalpaca.const import (
    DEFAULT_BULK_READ_ENABLED,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_TICK_INTERVAL,
    DEVICE_STATE_ACTION,
    CapabilityState,
    FetchState,
)
from aioalpaca.exceptions import (
    BaseAlpacaException,
    NetworkException,
    NoConnectionException,
    NotConnectedException,
    UnsupportedException,
)
from aioalpaca.model import PropertyCacheEntry
from aioalpaca.support import extract_exc_args

if TYPE_CHECKING:
    from aioalpaca.central.device_context import DeviceContext
    from aioalpaca.central.event_bus import EventBus
    from aioalpaca.type_aliases import AlpacaValue

_LOGGER: Final = logging.getLogger(__name__)

type DeviceLostHandler = Callable[[str, str], Awaitable[None]]


def fetch_key(*, device_id: str, name: str) -> str:
    """Return the coalescing key of a (device, property) pair."""
    return f"{device_id}/{name.lower()}"


class PropertySynchronizer:
    """Coalesced reads, failure policy and cache updates for all devices of a store."""

    __slots__ = (
        "_coalescer",
        "_contexts",
        "_enable_bulk_read",
        "_event_bus",
        "_failure_threshold",
        "_looper",
        "_on_device_lost",
        "_request_counter",
        "_scheduler",
    )

    def __init__(
        self,
        *,
        name: str,
        contexts: Mapping[str, DeviceContext],
        event_bus: EventBus,
        looper: Looper,
        on_device_lost: DeviceLostHandler,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        enable_bulk_read: bool = DEFAULT_BULK_READ_ENABLED,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        """Init the synchronizer."""
        self._contexts: Final = contexts
        self._event_bus: Final = event_bus
        self._looper: Final = looper
        self._on_device_lost: Final = on_device_lost
        self._failure_threshold: Final = failure_threshold
        self._enable_bulk_read: Final = enable_bulk_read
        self._request_counter: Final = count(1)
        self._coalescer: Final = RequestCoalescer(name=name, event_bus=event_bus, store_name=name)
        self._scheduler: Final = PollScheduler(
            name=name, runner=self.poll_device, looper=looper, tick_interval=tick_interval
        )

    @property
    def coalescer(self) -> RequestCoalescer:
        """Return the read coalescer."""
        return self._coalescer

    @property
    def failure_threshold(self) -> int:
        """Return the consecutive failures after which a property becomes unavailable."""
        return self._failure_threshold

    @property
    def scheduler(self) -> PollScheduler:
        """Return the poll scheduler."""
        return self._scheduler

    def begin_request(self) -> int:
        """Return the start order number of a new request."""
        return next(self._request_counter)

    def get_fetch_state(self, *, device_id: str, name: str) -> FetchState:
        """Return whether a read of the property is in flight."""
        if self._coalescer.is_pending(key=fetch_key(device_id=device_id, name=name)):
            return FetchState.FETCHING
        return FetchState.IDLE

    def _get_current(self, *, device_id: str, generation: int) -> DeviceContext | None:
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_current(generation=generation):
            return None
        return ctx

    # poll loop

    async def poll_device(self, task: PollTask) -> None:
        """Run one poll tick of a device."""
        if (ctx := self._contexts.get(task.device_id)) is None or not ctx.is_connected:
            return
        if ctx.client is None or ctx.capabilities is None:
            return
        generation = ctx.generation
        tracked = set(task.properties)
        if not tracked:
            return

        covered: Collection[str] = ()
        if self._enable_bulk_read and ctx.capabilities.bulk_read != CapabilityState.UNSUPPORTED:
            if (result := await self._bulk_read(device_id=task.device_id, generation=generation)) is None:
                return
            covered = result

        remaining = [
            name
            for name in sorted(tracked)
            if name not in covered
            and name in task.properties
            and not self._coalescer.is_pending(key=fetch_key(device_id=task.device_id, name=name))
        ]
        if remaining:
            await asyncio.gather(
                *(self._read_property(device_id=task.device_id, generation=generation, name=name) for name in remaining)
            )

    async def _bulk_read(self, *, device_id: str, generation: int) -> set[str] | None:
        """
        Read all properties with DeviceState.

        Return the names covered, an empty set to fall back to single reads,
        or None if the tick must stop because the connection is gone.
        """

        async def _fetch() -> set[str] | None:
            if (ctx := self._get_current(device_id=device_id, generation=generation)) is None or ctx.client is None:
                return None
            request_seq = self.begin_request()
            try:
                values = await ctx.client.fetch_device_state()
            except NotConnectedException as nce:
                await self._device_lost(device_id=device_id, generation=generation, reason=nce)
                return None
            except UnsupportedException:
                _LOGGER.debug("BULK_READ: %s: DeviceState is not supported, using single reads", device_id)
                return set()
            except BaseAlpacaException as bae:
                _LOGGER.debug(
                    "BULK_READ: %s: DeviceState failed, using single reads: %s [%s]",
                    device_id,
                    bae.name,
                    extract_exc_args(exc=bae),
                )
                return set()
            return await self._apply_bulk(
                device_id=device_id, generation=generation, values=values, request_seq=request_seq
            )

        return await self._coalescer.execute(
            key=fetch_key(device_id=device_id, name=DEVICE_STATE_ACTION), executor=_fetch
        )

    async def _apply_bulk(
        self,
        *,
        device_id: str,
        generation: int,
        values: Mapping[str, AlpacaValue],
        request_seq: int,
    ) -> set[str] | None:
        if (ctx := self._get_current(device_id=device_id, generation=generation)) is None or ctx.client is None:
            _LOGGER.debug("BULK_READ: %s: Discarding result of generation %i", device_id, generation)
            return None
        events: list[Event] = []
        covered: set[str] = set()
        for name, value in values.items():
            if not ctx.client.is_readable(name=name):
                continue
            covered.add(name)
            self._store_success(ctx=ctx, name=name, value=value, request_seq=request_seq, events=events)
        await self._publish(events=events)
        return covered

    # single property reads

    async def refresh_property(self, *, device_id: str, name: str) -> PropertyCacheEntry | None:
        """
        Read one property now, outside the poll interval.

        Joins a read that is already in flight. Never raises on read failures;
        the outcome is on the returned entry.
        """
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_connected or ctx.client is None:
            return None
        key = name.lower()
        if not ctx.client.is_readable(name=key):
            return ctx.entries.get(key)
        if ctx.capabilities is not None and ctx.capabilities.is_unsupported(member=key):
            return ctx.entries.get(key) or self._store_unavailable(ctx=ctx, name=key, reason=None, events=[])
        return await self._read_property(device_id=device_id, generation=ctx.generation, name=key)

    async def read_property(self, *, device_id: str, name: str) -> AlpacaValue:
        """
        Read one property for a client operation and return its value.

        Shares the coalesced path of refresh_property, so the result also
        updates the cache. Unlike refresh_property the outcome is raised.
        """
        if (entry := await self.refresh_property(device_id=device_id, name=name)) is None:
            raise NoConnectionException(i18n.tr("exception.store.device.not_connected", device_id=device_id))
        if not entry.available:
            raise UnsupportedException(
                i18n.tr("exception.client.member.unsupported", member=entry.name, device_id=device_id)
            )
        if entry.last_error is not None:
            raise entry.last_error
        return entry.value

    async def fetch_properties(self, *, device_id: str, names: Collection[str]) -> None:
        """Read several properties once, e.g. the static ones after connect."""
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_connected or ctx.client is None:
            return
        generation = ctx.generation
        client = ctx.client
        await asyncio.gather(
            *(
                self._read_property(device_id=device_id, generation=generation, name=name.lower())
                for name in names
                if client.is_readable(name=name)
            )
        )

    async def _read_property(self, *, device_id: str, generation: int, name: str) -> PropertyCacheEntry | None:
        async def _fetch() -> PropertyCacheEntry | None:
            if (ctx := self._get_current(device_id=device_id, generation=generation)) is None or ctx.client is None:
                return None
            request_seq = self.begin_request()
            try:
                value = await ctx.client.get_property(name=name)
            except NotConnectedException as nce:
                await self._device_lost(device_id=device_id, generation=generation, reason=nce)
                return None
            except BaseAlpacaException as bae:
                return await self._apply_failure(
                    device_id=device_id, generation=generation, name=name, error=bae, request_seq=request_seq
                )
            return await self._apply_success(
                device_id=device_id, generation=generation, name=name, value=value, request_seq=request_seq
            )

        return await self._coalescer.execute(key=fetch_key(device_id=device_id, name=name), executor=_fetch)

    async def _apply_success(
        self,
        *,
        device_id: str,
        generation: int,
        name: str,
        value: AlpacaValue,
        request_seq: int,
    ) -> PropertyCacheEntry | None:
        if (ctx := self._get_current(device_id=device_id, generation=generation)) is None:
            _LOGGER.debug("READ: %s: Discarding %s of generation %i", device_id, name, generation)
            return None
        events: list[Event] = []
        entry = self._store_success(ctx=ctx, name=name, value=value, request_seq=request_seq, events=events)
        await self._publish(events=events)
        return entry

    async def _apply_failure(
        self,
        *,
        device_id: str,
        generation: int,
        name: str,
        error: BaseAlpacaException,
        request_seq: int,
    ) -> PropertyCacheEntry | None:
        if (ctx := self._get_current(device_id=device_id, generation=generation)) is None:
            _LOGGER.debug("READ: %s: Discarding failure of %s of generation %i", device_id, name, generation)
            return None
        events: list[Event] = []
        if isinstance(error, UnsupportedException):
            entry = self._store_unavailable(ctx=ctx, name=name, reason=str(extract_exc_args(exc=error)), events=events)
        else:
            entry = self._store_failure(ctx=ctx, name=name, error=error, request_seq=request_seq, events=events)
        await self._publish(events=events)
        return entry

    # cache mutation, never suspends

    def _store_success(
        self,
        *,
        ctx: DeviceContext,
        name: str,
        value: AlpacaValue,
        request_seq: int,
        events: list[Event],
    ) -> PropertyCacheEntry:
        entry = ctx.entries.get(name) or PropertyCacheEntry(name=name)
        if not entry.available:
            return entry
        if request_seq < entry.request_seq:
            _LOGGER.debug(
                "STORE: %s: Ignoring stale %s (request %i < %i)", ctx.device_id, name, request_seq, entry.request_seq
            )
            return entry
        new_entry = replace(
            entry,
            value=value,
            has_value=True,
            updated_at=datetime.now(),
            last_error=None,
            failure_count=0,
            request_seq=request_seq,
        )
        ctx.entries[name] = new_entry
        if not entry.has_value or entry.value != value:
            events.append(
                PropertyChangedEvent(
                    device_id=ctx.device_id,
                    name=name,
                    old_value=entry.value,
                    new_value=value,
                )
            )
        return new_entry

    def _store_failure(
        self,
        *,
        ctx: DeviceContext,
        name: str,
        error: BaseAlpacaException,
        request_seq: int,
        events: list[Event],
    ) -> PropertyCacheEntry:
        entry = ctx.entries.get(name) or PropertyCacheEntry(name=name)
        if not entry.available or request_seq < entry.request_seq:
            return entry
        failure_count = entry.failure_count
        if isinstance(error, NetworkException):
            failure_count = min(failure_count + 1, self._failure_threshold)
        new_entry = replace(entry, last_error=error, failure_count=failure_count, request_seq=request_seq)
        ctx.entries[name] = new_entry
        _LOGGER.debug(
            "STORE: %s: Reading %s failed (%i/%i): %s [%s]",
            ctx.device_id,
            name,
            failure_count,
            self._failure_threshold,
            error.name,
            extract_exc_args(exc=error),
        )
        if failure_count >= self._failure_threshold:
            return self._store_unavailable(
                ctx=ctx, name=name, reason=str(extract_exc_args(exc=error)), events=events
            )
        return new_entry

    def _store_unavailable(
        self,
        *,
        ctx: DeviceContext,
        name: str,
        reason: str | None,
        events: list[Event],
    ) -> PropertyCacheEntry:
        entry = ctx.entries.get(name) or PropertyCacheEntry(name=name)
        if ctx.capabilities is not None:
            ctx.capabilities.mark_unsupported(member=name)
        if (task := self._scheduler.get_task(device_id=ctx.device_id)) is not None:
            task.remove_property(name=name)
        if not entry.available:
            return entry
        new_entry = replace(entry, available=False)
        ctx.entries[name] = new_entry
        events.append(
            PropertyAvailabilityChangedEvent(device_id=ctx.device_id, name=name, available=False, reason=reason)
        )
        return new_entry

    # writes and commands

    def handle_property_written(self, *, device_id: str, name: str, value: AlpacaValue, request_seq: int) -> None:
        """Apply a successful write to the cache right away."""
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_connected:
            return
        events: list[Event] = []
        self._store_success(ctx=ctx, name=name.lower(), value=value, request_seq=request_seq, events=events)
        if events:
            self._looper.create_task(target=self._publish(events=events), name=f"publish-{device_id}")

    def handle_command_completed(self, *, device_id: str, action: str) -> None:
        """Poll the device on the next tick to observe the effect of a command."""
        _LOGGER.debug("COMMAND: %s: %s completed, triggering poll", device_id, action)
        self._scheduler.trigger(device_id=device_id)

    async def handle_not_connected(self, *, device_id: str, error: BaseAlpacaException) -> None:
        """Disconnect a device that answered a write or command with NotConnected."""
        if (ctx := self._contexts.get(device_id)) is None or not ctx.is_connected:
            return
        await self._device_lost(device_id=device_id, generation=ctx.generation, reason=error)

    # helpers

    async def _device_lost(self, *, device_id: str, generation: int, reason: BaseAlpacaException) -> None:
        if self._get_current(device_id=device_id, generation=generation) is None:
            return
        _LOGGER.warning(  # i18n-log: ignore
            "DEVICE_LOST: %s: Device reports it is not connected, disconnecting: %s",
            device_id,
            extract_exc_args(exc=reason),
        )
        await self._on_device_lost(device_id, str(extract_exc_args(exc=reason)))

    async def _publish(self, *, events: list[Event]) -> None:
        for event in events:
            await self._event_bus.publish(event=event)

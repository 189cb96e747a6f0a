# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Request coalescing for device reads.

While a request for a key is pending, every further request for the same key
awaits the pending result instead of issuing another network call. Results
and exceptions are shared with every waiter. Once the request finished, the
next request for the key executes again; nothing is cached here.

Example:
-------
    coalescer = RequestCoalescer(name="telescope-0")

    async def read_altitude() -> float:
        return await client.get_property(name="altitude")

    # Both calls result in a single request to the device
    alt1, alt2 = await asyncio.gather(
        coalescer.execute(key="telescope-0/altitude", executor=read_altitude),
        coalescer.execute(key="telescope-0/altitude", executor=read_altitude),
    )

"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Final, TypeVar

from aioalpaca.central.event_bus import RequestCoalescedEvent

if TYPE_CHECKING:
    from aioalpaca.central.event_bus import EventBus

_LOGGER: Final = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class CoalescerMetrics:
    """Counters of a request coalescer."""

    total_requests: int = 0
    executed_requests: int = 0
    coalesced_requests: int = 0
    failed_requests: int = 0

    @property
    def coalesce_rate(self) -> float:
        """Return the share of requests that joined a pending request in percent."""
        if self.total_requests == 0:
            return 0.0
        return self.coalesced_requests / self.total_requests * 100


@dataclass(slots=True)
class _PendingRequest:
    future: asyncio.Future[Any]
    waiter_count: int = 1


class RequestCoalescer:
    """Merge concurrent requests with the same key into one execution."""

    __slots__ = ("_event_bus", "_metrics", "_name", "_pending", "_store_name")

    def __init__(
        self,
        *,
        name: str = "coalescer",
        event_bus: EventBus | None = None,
        store_name: str | None = None,
    ) -> None:
        """Init the coalescer."""
        self._name: Final = name
        self._event_bus: Final = event_bus
        self._store_name: Final = store_name
        self._metrics: Final = CoalescerMetrics()
        self._pending: Final[dict[str, _PendingRequest]] = {}

    @property
    def metrics(self) -> CoalescerMetrics:
        """Return the metrics."""
        return self._metrics

    @property
    def pending_count(self) -> int:
        """Return the number of pending keys."""
        return len(self._pending)

    def is_pending(self, *, key: str) -> bool:
        """Return True if a request for key is in flight."""
        return key in self._pending

    async def execute(self, *, key: str, executor: Callable[[], Awaitable[T]]) -> T:
        """Execute the request for key or join the pending one."""
        self._metrics.total_requests += 1

        if (pending := self._pending.get(key)) is not None:
            pending.waiter_count += 1
            self._metrics.coalesced_requests += 1
            _LOGGER.debug("EXECUTE: %s: coalesced request %s (waiters: %i)", self._name, key, pending.waiter_count)
            if self._event_bus is not None:
                await self._event_bus.publish(
                    event=RequestCoalescedEvent(
                        request_key=key,
                        coalesced_count=pending.waiter_count,
                        store_name=self._store_name,
                    )
                )
            return await asyncio.shield(pending.future)  # type: ignore[no-any-return]

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[key] = _PendingRequest(future=future)
        self._metrics.executed_requests += 1
        try:
            result = await executor()
        except asyncio.CancelledError:
            if not future.done():
                future.cancel()
            raise
        except Exception as exc:
            self._metrics.failed_requests += 1
            if not future.done():
                future.set_exception(exc)
                # waiters retrieve it; avoid the never-retrieved warning without waiters
                future.exception()
            raise
        else:
            if not future.done():
                future.set_result(result)
            return result
        finally:
            if self._pending.get(key) is not None and self._pending[key].future is future:
                del self._pending[key]

    def clear(self) -> None:
        """Cancel all pending futures and forget them."""
        for pending in self._pending.values():
            if not pending.future.done():
                pending.future.cancel()
        self._pending.clear()

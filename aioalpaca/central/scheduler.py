# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
The single poll loop of a device state store.

There is one PollTask per connected device, shared by all consumers of the
device. Each tick the scheduler launches every due task that is not already
running as a background task and returns immediately, so a slow device never
delays the tick of another one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timedelta
import logging
from typing import Final

from aioalpaca.async_support import Looper
from aioalpaca.const import DEFAULT_POLL_INTERVAL, DEFAULT_TICK_INTERVAL, SCHEDULER_LOOP_SLEEP_MIN

_LOGGER: Final = logging.getLogger(__name__)

type PollRunner = Callable[[PollTask], Awaitable[None]]


class PollTask:
    """Polling state of one connected device."""

    __slots__ = ("_properties", "device_id", "in_flight", "interval", "last_run", "next_run")

    def __init__(
        self,
        *,
        device_id: str,
        properties: Iterable[str] = (),
        interval: float = DEFAULT_POLL_INTERVAL,
        next_run: datetime | None = None,
    ) -> None:
        """Init the poll task. Without next_run the task is due immediately."""
        self.device_id: Final = device_id
        self.interval: float = interval
        self.in_flight: bool = False
        self.last_run: datetime | None = None
        self.next_run: datetime = next_run or datetime.now()
        self._properties: set[str] = {name.lower() for name in properties}

    @property
    def properties(self) -> frozenset[str]:
        """Return the tracked properties."""
        return frozenset(self._properties)

    @property
    def ready(self) -> bool:
        """Return True if the task is due and not running."""
        return not self.in_flight and self.next_run <= datetime.now()

    def add_properties(self, *, names: Iterable[str]) -> None:
        """Track additional properties."""
        self._properties.update(name.lower() for name in names)

    def remove_property(self, *, name: str) -> bool:
        """Stop tracking a property. Return True if it was tracked."""
        if (key := name.lower()) in self._properties:
            self._properties.discard(key)
            return True
        return False

    def schedule_next_execution(self) -> None:
        """Mark the task as started now and compute its next due time."""
        self.last_run = datetime.now()
        self.next_run = self.last_run + timedelta(seconds=self.interval)

    def trigger(self) -> None:
        """Make the task due on the next tick."""
        self.next_run = datetime.now()


class PollScheduler:
    """One loop driving all poll tasks of a store."""

    __slots__ = ("_looper", "_name", "_runner", "_scheduler_task", "_tasks", "_tick_interval")

    def __init__(
        self,
        *,
        name: str,
        runner: PollRunner,
        looper: Looper,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        """Init the scheduler. runner is awaited once per due task."""
        self._name: Final = name
        self._runner: Final = runner
        self._looper: Final = looper
        self._tick_interval: Final = max(tick_interval, SCHEDULER_LOOP_SLEEP_MIN)
        self._tasks: Final[dict[str, PollTask]] = {}
        self._scheduler_task: asyncio.Task[None] | None = None

    @property
    def is_active(self) -> bool:
        """Return True if the loop is running."""
        return self._scheduler_task is not None and not self._scheduler_task.done()

    @property
    def tasks(self) -> tuple[PollTask, ...]:
        """Return all poll tasks."""
        return tuple(self._tasks.values())

    def add_task(self, *, task: PollTask) -> None:
        """Register the poll task of a device, replacing an existing one."""
        self._tasks[task.device_id] = task

    def get_task(self, *, device_id: str) -> PollTask | None:
        """Return the poll task of a device."""
        return self._tasks.get(device_id)

    def remove_task(self, *, device_id: str) -> PollTask | None:
        """Remove the poll task of a device. A running poll is not interrupted."""
        return self._tasks.pop(device_id, None)

    def trigger(self, *, device_id: str) -> bool:
        """Make the task of a device due on the next tick."""
        if (task := self._tasks.get(device_id)) is None:
            return False
        task.trigger()
        return True

    def tick(self) -> int:
        """Launch all due tasks without waiting for them. Return how many were launched."""
        launched = 0
        for task in list(self._tasks.values()):
            if not task.ready:
                continue
            task.in_flight = True
            task.schedule_next_execution()
            self._looper.create_task(target=self._run_task(task=task), name=f"poll-{task.device_id}")
            launched += 1
        return launched

    async def _run_task(self, *, task: PollTask) -> None:
        started = datetime.now()
        try:
            await self._runner(task)
        except Exception:
            _LOGGER.exception(  # i18n-log: ignore
                "SCHEDULER: %s: Poll of %s failed", self._name, task.device_id
            )
        finally:
            task.in_flight = False
            if (elapsed := (datetime.now() - started).total_seconds()) > task.interval:
                _LOGGER.warning(  # i18n-log: ignore
                    "SCHEDULER: %s: Poll of %s took %.2fs, longer than its interval of %.2fs",
                    self._name,
                    task.device_id,
                    elapsed,
                    task.interval,
                )

    async def _run_scheduler_loop(self) -> None:
        _LOGGER.debug("SCHEDULER: %s: Loop started", self._name)
        while True:
            self.tick()
            await asyncio.sleep(self._tick_interval)

    def start(self) -> None:
        """Start the loop."""
        if self.is_active:
            return
        self._scheduler_task = asyncio.get_running_loop().create_task(
            self._run_scheduler_loop(), name=f"scheduler-{self._name}"
        )

    async def stop(self) -> None:
        """Stop the loop. Running polls are left to the looper."""
        if (task := self._scheduler_task) is None:
            return
        self._scheduler_task = None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        _LOGGER.debug("SCHEDULER: %s: Loop stopped", self._name)

# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Module with support for loop interaction."""

from __future__ import annotations

import asyncio
from collections.abc import Collection
import logging
import time
from typing import Any, Final

from aioalpaca.const import SHUTDOWN_WAIT_TIME
from aioalpaca.type_aliases import CoroutineAny

_LOGGER: Final = logging.getLogger(__name__)


class Looper:
    """Track background tasks so they can be awaited or cancelled on shutdown."""

    __slots__ = ("_tasks",)

    def __init__(self) -> None:
        """Init the loop helper."""
        self._tasks: Final[set[asyncio.Task[Any]]] = set()

    @property
    def task_count(self) -> int:
        """Return the number of running tasks."""
        return len(self._tasks)

    def create_task(self, *, target: CoroutineAny, name: str) -> asyncio.Task[Any]:
        """Create a tracked task on the running loop."""
        task = asyncio.get_running_loop().create_task(target, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            _LOGGER.error(  # i18n-log: ignore
                "LOOPER: Task %s failed: %s: %s", task.get_name(), exc.__class__.__name__, exc
            )

    async def block_till_done(self, *, wait_time: float | None = SHUTDOWN_WAIT_TIME) -> None:
        """Wait for all tracked tasks. Stop waiting once wait_time has passed."""
        deadline = None if wait_time is None else time.monotonic() + wait_time
        while pending := [task for task in self._tasks if not task.done()]:
            if not await self._await_and_log_pending(pending=pending, deadline=deadline):
                continue
            if deadline is not None and time.monotonic() >= deadline:
                _LOGGER.warning(  # i18n-log: ignore
                    "LOOPER: Shutdown timeout reached, %i tasks still pending: %s",
                    len(pending),
                    ", ".join(task.get_name() for task in pending),
                )
                return

    async def _await_and_log_pending(
        self, *, pending: Collection[asyncio.Task[Any]], deadline: float | None
    ) -> set[asyncio.Task[Any]]:
        """Wait for the pending tasks until they finish or the deadline passes."""
        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        return still_pending

    async def cancel_tasks(self) -> None:
        """Cancel all tracked tasks and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


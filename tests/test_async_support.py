# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Tests for the task tracker."""

from __future__ import annotations

import asyncio
import logging

import pytest

from aioalpaca.async_support import Looper


class TestLooper:
    """Tests for Looper."""

    @pytest.mark.asyncio
    async def test_block_till_done(self) -> None:
        """Test all tracked tasks are awaited and forgotten."""
        looper = Looper()
        done: list[int] = []

        async def work(value: int) -> None:
            await asyncio.sleep(0.01)
            done.append(value)

        for value in range(3):
            looper.create_task(target=work(value), name=f"work-{value}")
        assert looper.task_count == 3

        await looper.block_till_done()

        assert sorted(done) == [0, 1, 2]
        assert looper.task_count == 0

    @pytest.mark.asyncio
    async def test_block_till_done_gives_up(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test waiting stops after wait_time and reports the pending tasks."""
        caplog.set_level(logging.WARNING)
        looper = Looper()
        looper.create_task(target=asyncio.sleep(10), name="sleeper")

        await looper.block_till_done(wait_time=0.01)

        assert "sleeper" in caplog.text
        await looper.cancel_tasks()
        assert looper.task_count == 0

    @pytest.mark.asyncio
    async def test_failed_task_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a failing task is logged and does not break the tracker."""
        caplog.set_level(logging.ERROR)
        looper = Looper()

        async def fail() -> None:
            raise RuntimeError("task failed")

        looper.create_task(target=fail(), name="failing")
        await looper.block_till_done()

        assert "failing" in caplog.text
        assert "task failed" in caplog.text


"""Tests for src.core.alert_loop — the shared beep loop."""

import asyncio
from unittest.mock import MagicMock

import pytest

from src.core.alert_loop import AlertLoop


class TestAlertLoop:
    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self):
        beeper = MagicMock()
        loop = AlertLoop(beeper, interval=0.01)
        loop.start()
        first = loop._task
        loop.start()
        assert loop._task is first
        await asyncio.sleep(0.035)
        loop.stop()
        assert beeper.beep.call_count >= 2

    @pytest.mark.asyncio
    async def test_stop_when_stopped_is_noop(self):
        loop = AlertLoop(MagicMock(), interval=0.01)
        loop.stop()
        loop.stop()
        assert not loop.running

    @pytest.mark.asyncio
    async def test_sync_follows_ringing(self):
        loop = AlertLoop(MagicMock(), interval=0.01)
        loop.sync(True)
        assert loop.running
        loop.sync(True)
        loop.sync(False)
        assert not loop.running

    @pytest.mark.asyncio
    async def test_stop_silences(self):
        beeper = MagicMock()
        loop = AlertLoop(beeper, interval=0.01)
        loop.start()
        await asyncio.sleep(0.02)
        loop.stop()
        await asyncio.sleep(0)
        count = beeper.beep.call_count
        await asyncio.sleep(0.03)
        assert beeper.beep.call_count == count

    @pytest.mark.asyncio
    async def test_beep_failure_does_not_kill_loop(self):
        beeper = MagicMock()
        beeper.beep.side_effect = OSError("no tty")
        loop = AlertLoop(beeper, interval=0.01)
        loop.start()
        await asyncio.sleep(0.035)
        assert loop.running
        assert beeper.beep.call_count >= 2
        loop.stop()

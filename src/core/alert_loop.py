"""Shared audible alert loop.

One loop serves every ringing alarm and timer. It runs while anything is
ringing and stops when nothing is.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.ports.alert_port import AlertPort

logger = logging.getLogger(__name__)


class AlertLoop:
    """Beeps at a fixed interval until stopped.

    start() while running and stop() while stopped are no-ops, so at most
    one beep task exists at a time.
    """

    def __init__(self, beeper: AlertPort, interval: float | None = None) -> None:
        if interval is None:
            from src.config import settings
            interval = settings.BEEP_INTERVAL_SECONDS
        self._beeper = beeper
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Alert loop started")

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.debug("Alert loop stopped")

    def sync(self, is_ringing: bool) -> None:
        """Start or stop the loop to match whether anything is ringing."""
        if is_ringing:
            self.start()
        else:
            self.stop()

    async def _run(self) -> None:
        while True:
            try:
                self._beeper.beep()
            except OSError as exc:
                logger.warning("Beep failed: %s", exc)
            await asyncio.sleep(self._interval)

"""
Daybook — Entry Point.

Single entry point: `python main.py` loads the saved planner, starts the
reminder/alarm/timer loops and reads assistant commands from stdin.
"""

import asyncio
import logging
from datetime import date

from src.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.adapters.log_notifier import LogNotifier
from src.adapters.terminal_beeper import TerminalBeeper
from src.core.alarms import dismiss_alarm
from src.core.assistant import AssistantService, ErrorResponse
from src.core.scheduler import PlannerRuntime
from src.core.timers import dismiss_timer
from src.data.db import SnapshotDB

logger = logging.getLogger(__name__)


def _build_notifier():
    if settings.TELEGRAM_BOT_TOKEN and settings.NOTIFY_CHAT_IDS:
        from telegram import Bot

        from src.adapters.telegram_notifier import TelegramNotifier

        logger.info("Delivering notifications to %d Telegram chat(s)", len(settings.NOTIFY_CHAT_IDS))
        return TelegramNotifier(Bot(token=settings.TELEGRAM_BOT_TOKEN), settings.NOTIFY_CHAT_IDS)
    return LogNotifier()


async def run() -> None:
    db = SnapshotDB()
    runtime = PlannerRuntime(
        notifier=_build_notifier(),
        beeper=TerminalBeeper(),
        state=db.load(),
    )
    service = AssistantService()
    runtime.start()

    runtime.refresh_holidays(date.today().year)

    print("Daybook is running. Type a command (e.g. 'remind me to call mom tomorrow at 5pm'),")
    print("'dismiss' to silence ringing alarms and timers, or 'quit' to exit.")
    try:
        while True:
            line = await asyncio.to_thread(input, "> ")
            text = line.strip()
            if text.lower() in ("quit", "exit"):
                break
            if text.lower() == "dismiss":
                for alarm_id in runtime.state.ringing_alarm_ids:
                    runtime.dispatch(dismiss_alarm, alarm_id)
                for timer_id in runtime.state.ringing_timer_ids:
                    runtime.dispatch(dismiss_timer, timer_id)
                continue
            if not text:
                continue

            response = await runtime.run_command(service, text)
            print(("❌ " if isinstance(response, ErrorResponse) else "") + response.message)
            db.save(runtime.state)
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await runtime.stop()
        db.save(runtime.state)
        logger.info("Snapshot saved, bye")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()

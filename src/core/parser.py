"""
Daybook — Assistant command parser.

Converts free text into structured calls using the configured LLM provider.
The assistant may only emit four calls: addReminder, addAlarm, addTimer and
controlStopwatch. Anything else it says comes back as plain text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Union

from pydantic import BaseModel, Field, ValidationError

from src.core.llm import AssistantError, complete

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Call contract
# ---------------------------------------------------------------------------


class AddReminderCall(BaseModel):
    """{"name": "addReminder", "args": {"date": "2025-02-14", "time": "16:00", "description": "Dentist"}}"""

    date: str          # ISO format YYYY-MM-DD
    time: str          # HH:MM in 24h format
    description: str


class AddAlarmCall(BaseModel):
    """{"name": "addAlarm", "args": {"time": "07:00", "label": "Gym", "repeat": true, "days": [1, 3]}}"""

    time: str
    label: str | None = None
    repeat: bool = False
    days: list[int] | None = None


class AddTimerCall(BaseModel):
    """{"name": "addTimer", "args": {"hours": 0, "minutes": 15, "seconds": 0, "label": "Pizza"}}"""

    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)
    seconds: int = Field(default=0, ge=0)
    label: str | None = None


class ControlStopwatchCall(BaseModel):
    """{"name": "controlStopwatch", "args": {"action": "start"}}"""

    action: Literal["start", "stop", "lap", "reset"]


AssistantCall = Union[AddReminderCall, AddAlarmCall, AddTimerCall, ControlStopwatchCall]

_CALLS: dict[str, type[BaseModel]] = {
    "addReminder": AddReminderCall,
    "addAlarm": AddAlarmCall,
    "addTimer": AddTimerCall,
    "controlStopwatch": ControlStopwatchCall,
}


@dataclass
class CommandCalls:
    calls: list[AssistantCall] = field(default_factory=list)


@dataclass
class CommandText:
    text: str


CommandResult = Union[CommandCalls, CommandText]


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = """\
You are an intelligent assistant integrated into a calendar app. Your task is
to interpret user commands and manage their reminders, alarms, timers and
stopwatch. Today's date is {today}.

Reply with JSON only. Either an array of calls:
[{{"name": "<call>", "args": {{...}}}}, ...]
or, when no call applies, an object with a short answer:
{{"text": "..."}}

**addReminder** — adds a reminder for a specific date and time.
{{"name": "addReminder", "args": {{"date": "YYYY-MM-DD", "time": "HH:MM", "description": "string"}}}}
- When a time is mentioned without a date, assume today.
- If a day of the week is mentioned (e.g. "next Tuesday"), calculate the
  correct YYYY-MM-DD date based on today's date.

**addAlarm** — adds a one-time or weekly repeating alarm.
{{"name": "addAlarm", "args": {{"time": "HH:MM", "label": "string (optional)", "repeat": boolean, "days": [0-6] }}}}
- days: 0=Sunday, 1=Monday, ..., 6=Saturday. Required if repeat is true.
- If the user does not ask for a repeat, it is a one-time alarm.

**addTimer** — adds and immediately starts a countdown timer.
{{"name": "addTimer", "args": {{"hours": int, "minutes": int, "seconds": int, "label": "string (optional)"}}}}

**controlStopwatch** — controls the stopwatch.
{{"name": "controlStopwatch", "args": {{"action": "start" | "stop" | "lap" | "reset"}}}}

Times are always 24-hour HH:MM. No markdown, no explanation outside the JSON.
"""


def _clean_llm_response(raw_text: str) -> str:
    """Remove markdown code block delimiters from the model's raw response."""
    cleaned_text = raw_text.strip()
    if cleaned_text.startswith("```json"):
        cleaned_text = cleaned_text.removeprefix("```json")
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text.removeprefix("```")
    if cleaned_text.endswith("```"):
        cleaned_text = cleaned_text.removesuffix("```")
    return cleaned_text.strip()


def _instantiate_call(item: object) -> AssistantCall:
    """Validate one {"name", "args"} object. Raises AssistantError if invalid."""
    if not isinstance(item, dict):
        raise AssistantError(f"Unexpected call entry: {item!r}")
    name = item.get("name")
    if not isinstance(name, str):
        logger.warning("LLM returned a call without a valid name: %r", name)
        raise AssistantError("The assistant returned an answer I couldn't understand.")
    model = _CALLS.get(name)
    if model is None:
        logger.warning("LLM returned unknown call: '%s'", name)
        raise AssistantError(f"The assistant asked for an unsupported action: {name!r}.")
    args = item.get("args") or {}
    try:
        call = model.model_validate(args)
    except ValidationError as exc:
        logger.error("Invalid arguments for %s: %s", name, exc)
        raise AssistantError(f"The assistant sent invalid details for {name}.") from exc
    logger.info("Parsed %s: %s", name, call.model_dump())
    return call


def interpret_response(raw_text: str) -> CommandResult:
    """Turn the model's raw answer into calls or text.

    The whole answer is validated before anything is returned, so a single
    bad call rejects the lot.
    """
    cleaned = _clean_llm_response(raw_text)
    logger.debug("LLM raw response: %s", cleaned)
    if not cleaned:
        raise AssistantError("The assistant returned an empty answer.")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Plain prose is a legitimate text answer
        return CommandText(text=cleaned)

    if isinstance(data, dict) and "text" in data and "name" not in data:
        return CommandText(text=str(data["text"]))
    if isinstance(data, str):
        return CommandText(text=data)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise AssistantError("The assistant returned an answer I couldn't understand.")
    if not data:
        return CommandText(text="I couldn't find anything to do in that request.")

    return CommandCalls(calls=[_instantiate_call(item) for item in data])


async def parse_command(user_message: str, today: date | None = None) -> CommandResult:
    """Ask the LLM to interpret `user_message`.

    Raises AssistantError when the provider fails or the answer is neither
    valid calls nor text.
    """
    system_prompt = _SYSTEM_PROMPT.format(today=(today or date.today()).isoformat())
    raw_text = await complete(system=system_prompt, user_message=user_message, max_tokens=1024)
    return interpret_response(raw_text)

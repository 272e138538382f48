"""Tests for src.core.parser — LLM-based command parsing."""

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from src.core.llm import AssistantError
from src.core.parser import (
    AddAlarmCall,
    AddReminderCall,
    AddTimerCall,
    CommandCalls,
    CommandText,
    ControlStopwatchCall,
    _clean_llm_response,
    interpret_response,
    parse_command,
)


# ---------------------------------------------------------------------------
# Unit tests for _clean_llm_response
# ---------------------------------------------------------------------------


class TestCleanLlmResponse:
    def test_strips_json_code_block(self):
        raw = '```json\n[{"name": "addTimer"}]\n```'
        assert _clean_llm_response(raw) == '[{"name": "addTimer"}]'

    def test_strips_plain_code_block(self):
        assert _clean_llm_response("```\n{}\n```") == "{}"

    def test_strips_whitespace(self):
        assert _clean_llm_response("  hello  ") == "hello"


# ---------------------------------------------------------------------------
# interpret_response
# ---------------------------------------------------------------------------


class TestInterpretResponse:
    def test_multiple_calls(self):
        raw = (
            '[{"name": "addReminder", "args": {"date": "2024-01-11", "time": "17:00", "description": "Call mom"}},'
            ' {"name": "addTimer", "args": {"minutes": 10, "label": "Pasta"}}]'
        )
        result = interpret_response(raw)
        assert isinstance(result, CommandCalls)
        assert isinstance(result.calls[0], AddReminderCall)
        assert result.calls[0].description == "Call mom"
        assert isinstance(result.calls[1], AddTimerCall)
        assert result.calls[1].hours == 0
        assert result.calls[1].minutes == 10

    def test_single_object_is_wrapped(self):
        result = interpret_response('{"name": "controlStopwatch", "args": {"action": "start"}}')
        assert isinstance(result, CommandCalls)
        assert result.calls == [ControlStopwatchCall(action="start")]

    def test_alarm_defaults(self):
        result = interpret_response('[{"name": "addAlarm", "args": {"time": "07:00"}}]')
        call = result.calls[0]
        assert isinstance(call, AddAlarmCall)
        assert call.repeat is False
        assert call.label is None

    def test_text_object(self):
        result = interpret_response('{"text": "I can only manage reminders and alarms."}')
        assert result == CommandText(text="I can only manage reminders and alarms.")

    def test_plain_prose_is_text(self):
        result = interpret_response("Sorry, I didn't get that.")
        assert result == CommandText(text="Sorry, I didn't get that.")

    def test_empty_list_is_text(self):
        assert isinstance(interpret_response("[]"), CommandText)

    def test_unknown_call_rejected(self):
        with pytest.raises(AssistantError, match="unsupported action"):
            interpret_response('[{"name": "deleteEverything", "args": {}}]')

    def test_invalid_args_reject_whole_batch(self):
        raw = (
            '[{"name": "addTimer", "args": {"minutes": 5}},'
            ' {"name": "controlStopwatch", "args": {"action": "explode"}}]'
        )
        with pytest.raises(AssistantError, match="invalid details"):
            interpret_response(raw)

    def test_negative_timer_rejected(self):
        with pytest.raises(AssistantError):
            interpret_response('[{"name": "addTimer", "args": {"minutes": -5}}]')

    def test_empty_answer(self):
        with pytest.raises(AssistantError):
            interpret_response("   ")

    def test_scalar_json_rejected(self):
        with pytest.raises(AssistantError):
            interpret_response("42")

    def test_json_string_is_text(self):
        assert interpret_response('"Sure, it\'s sunny"') == CommandText(text="Sure, it's sunny")

    def test_non_string_call_name_rejected(self):
        with pytest.raises(AssistantError):
            interpret_response('[{"name": ["addTimer"], "args": {}}]')

    def test_object_call_name_rejected(self):
        with pytest.raises(AssistantError):
            interpret_response('{"name": {"call": "addTimer"}, "args": {}}')


# ---------------------------------------------------------------------------
# parse_command (LLM mocked)
# ---------------------------------------------------------------------------


class TestParseCommand:
    @pytest.mark.asyncio
    async def test_prompt_carries_today(self):
        mock_complete = AsyncMock(return_value='{"text": "ok"}')
        with patch("src.core.parser.complete", mock_complete):
            result = await parse_command("hello", today=date(2024, 1, 10))

        assert result == CommandText(text="ok")
        system = mock_complete.await_args.kwargs["system"]
        assert "2024-01-10" in system
        assert mock_complete.await_args.kwargs["user_message"] == "hello"

    @pytest.mark.asyncio
    async def test_fenced_json(self):
        llm_response = '```json\n[{"name": "addTimer", "args": {"seconds": 30}}]\n```'
        with patch("src.core.parser.complete", AsyncMock(return_value=llm_response)):
            result = await parse_command("30 second timer")
        assert result.calls == [AddTimerCall(seconds=30)]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        with patch(
            "src.core.parser.complete",
            AsyncMock(side_effect=AssistantError("Failed to process your request with the AI assistant.")),
        ):
            with pytest.raises(AssistantError):
                await parse_command("anything")

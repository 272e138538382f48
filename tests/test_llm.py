"""Tests for src.core.llm — provider selection and error wrapping."""

from unittest.mock import AsyncMock, patch

import pytest

import src.core.llm as llm
from src.core.llm import AssistantError, complete


@pytest.fixture(autouse=True)
def reset_provider():
    llm._provider = None
    yield
    llm._provider = None


class TestSelectProvider:
    def test_missing_key(self):
        with patch("src.config.settings.LLM_API_KEY", ""):
            with pytest.raises(AssistantError, match="not configured"):
                llm._select_provider()

    def test_unknown_provider(self):
        with patch("src.config.settings.LLM_PROVIDER", "cohere"):
            with pytest.raises(AssistantError, match="Unknown LLM_PROVIDER"):
                llm._select_provider()

    def test_default_model(self):
        with patch("src.config.settings.LLM_PROVIDER", "openai"), \
             patch("src.config.settings.LLM_MODEL", ""):
            fn, model, _ = llm._select_provider()
        assert model == "gpt-4o-mini"


class TestComplete:
    @pytest.mark.asyncio
    async def test_routes_to_provider(self):
        fake = AsyncMock(return_value="[]")
        llm._provider = (fake, "model-x", "key")
        assert await complete("sys", "hi", max_tokens=64) == "[]"
        fake.assert_awaited_once_with("key", "model-x", "sys", "hi", 64)

    @pytest.mark.asyncio
    async def test_provider_failure_wrapped(self):
        llm._provider = (AsyncMock(side_effect=RuntimeError("quota")), "m", "k")
        with pytest.raises(AssistantError, match="Failed to process"):
            await complete("sys", "hi")

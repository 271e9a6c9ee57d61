"""Tests for src.core.llm — provider routing and error mapping."""

from unittest.mock import AsyncMock, patch

import pytest

from src.core import llm
from src.core.llm import LLMAuthError, LLMError, _status_of, complete


class _ProviderFailure(Exception):
    def __init__(self, status_code):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


def _provider(fn, key="test-key"):
    return patch.multiple(llm, _provider_fn=fn, _model="test-model", _api_key=key)


class TestComplete:
    @pytest.mark.asyncio
    async def test_routes_to_provider(self):
        fn = AsyncMock(return_value='{"reply": "hi"}')
        with _provider(fn):
            result = await complete("sys", "hello", max_tokens=100, json_output=True)
        assert result == '{"reply": "hi"}'
        fn.assert_awaited_once_with("test-key", "test-model", "sys", "hello", 100, True)

    @pytest.mark.asyncio
    async def test_missing_key(self):
        with _provider(AsyncMock(), key=""):
            with pytest.raises(LLMAuthError):
                await complete("sys", "hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_status_mapped(self, status):
        with _provider(AsyncMock(side_effect=_ProviderFailure(status))):
            with pytest.raises(LLMAuthError):
                await complete("sys", "hello")

    @pytest.mark.asyncio
    async def test_other_failure_mapped(self):
        with _provider(AsyncMock(side_effect=_ProviderFailure(503))):
            with pytest.raises(LLMError) as exc_info:
                await complete("sys", "hello")
        assert not isinstance(exc_info.value, LLMAuthError)

    @pytest.mark.asyncio
    async def test_network_error_mapped(self):
        with _provider(AsyncMock(side_effect=ConnectionError("reset"))):
            with pytest.raises(LLMError):
                await complete("sys", "hello")


class TestSelectProvider:
    def test_unknown_provider(self):
        with patch("src.config.settings.LLM_PROVIDER", "nope"):
            with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
                llm._select_provider()

    def test_default_model(self):
        with patch("src.config.settings.LLM_PROVIDER", "openai"), \
             patch("src.config.settings.LLM_MODEL", ""):
            fn, model, _ = llm._select_provider()
        assert fn is llm._complete_openai
        assert model == "gpt-4o-mini"


class TestStatusOf:
    def test_reads_status_code(self):
        assert _status_of(_ProviderFailure(401)) == 401

    def test_no_status(self):
        assert _status_of(ValueError("x")) is None

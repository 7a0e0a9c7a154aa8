"""Tests for the OpenRouter completion client."""
import sys
import types
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from semantic_architect import llm_client
from semantic_architect.llm_client import get_client, get_model


class TestGetModel:
    def test_get_model_returns_default_when_blank(self):
        with patch("semantic_architect.llm_client.settings") as mock_settings:
            mock_settings.default_model = "openai/gpt-4o-mini"

            assert get_model() == "openai/gpt-4o-mini"
            assert get_model("  ") == "openai/gpt-4o-mini"

    def test_get_model_returns_explicit_model(self):
        assert get_model(" anthropic/claude-3.5-haiku ") == "anthropic/claude-3.5-haiku"


class TestGetClient:
    def test_get_client_uses_openrouter(self):
        with patch("semantic_architect.llm_client.settings") as mock_settings:
            mock_settings.openrouter_api_key = "sk-or-default"
            mock_settings.openrouter_base_url = "https://openrouter.ai/api/v1"
            mock_settings.llm_timeout_seconds = 120.0

            openai_module = types.ModuleType("openai")
            mock_openai = MagicMock()
            openai_module.AsyncOpenAI = mock_openai

            with patch.dict(sys.modules, {"openai": openai_module}):
                get_client("sk-or-run-key")

            mock_openai.assert_called_once_with(
                api_key="sk-or-run-key",
                base_url="https://openrouter.ai/api/v1",
                timeout=120.0,
            )


class TestComplete:
    @pytest.mark.asyncio
    async def test_complete_returns_message_text(self):
        fake_client = MagicMock()
        fake_client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content="0.8"))],
                usage=SimpleNamespace(prompt_tokens=12, completion_tokens=1),
            )
        )

        with patch("semantic_architect.llm_client.client", return_value=fake_client):
            reply = await llm_client.complete(
                "openai/gpt-4o-mini",
                [{"role": "user", "content": "score"}],
                0.1,
                api_key="k",
            )

        assert reply == "0.8"
        kwargs = fake_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.1
        assert kwargs["model"] == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_complete_returns_empty_string_without_choices(self):
        fake_client = MagicMock()
        fake_client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(choices=[], usage=None)
        )

        with patch("semantic_architect.llm_client.client", return_value=fake_client):
            assert await llm_client.complete("m", [], 0.7) == ""

    @pytest.mark.asyncio
    async def test_complete_reraises_provider_errors(self):
        fake_client = MagicMock()
        fake_client.chat.completions.create = AsyncMock(side_effect=RuntimeError("402 credits"))

        with patch("semantic_architect.llm_client.client", return_value=fake_client):
            with pytest.raises(RuntimeError, match="402 credits"):
                await llm_client.complete("m", [], 0.7)


class TestListModels:
    @pytest.mark.asyncio
    async def test_list_models_keeps_entries_with_ids(self, monkeypatch):
        captured = {}

        async def fake_get(self, url, **kwargs):
            captured["url"] = url
            captured.update(kwargs)
            return httpx.Response(
                200,
                json={"data": [{"id": "openai/gpt-4o-mini", "name": "GPT-4o mini"}, {"name": "x"}]},
                request=httpx.Request("GET", url),
            )

        monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)

        models = await llm_client.list_models("sk-or-key")

        assert [m["id"] for m in models] == ["openai/gpt-4o-mini"]
        assert captured["url"].endswith("/models")
        assert captured["headers"]["Authorization"] == "Bearer sk-or-key"

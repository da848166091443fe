"""Tests for the idea suggestion client"""
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, Mock, patch

from conftest import make_settings

from ideapage_api.core.kv import MemoryBackend
from ideapage_api.core.openai_client import OpenAIClient
from ideapage_api.core.prompts import IDEA_USER_PROMPT
from ideapage_api.core.services import build_services
from ideapage_api.models.errors import ApplicationError, ErrorCode


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def mock_sdk(**create_kwargs):
    sdk = Mock()
    sdk.chat.completions.create = AsyncMock(**create_kwargs)
    sdk.close = AsyncMock()
    return sdk


class TestSuggestIdea:

    @pytest.mark.asyncio
    async def test_returns_trimmed_idea(self):
        sdk = mock_sdk(return_value=completion("  A marketplace for used lab gear.  "))
        client = OpenAIClient(api_key="", model="gpt-test", temperature=0.9, client=sdk)

        assert await client.suggest_idea() == "A marketplace for used lab gear."
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.9
        assert kwargs["messages"][1] == {"role": "user", "content": IDEA_USER_PROMPT}

    @pytest.mark.asyncio
    async def test_without_key_is_configuration_error(self):
        with pytest.raises(ApplicationError) as exc_info:
            await OpenAIClient(api_key="").suggest_idea()
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    @pytest.mark.asyncio
    async def test_sdk_failure_is_upstream_error(self):
        client = OpenAIClient(api_key="", client=mock_sdk(side_effect=RuntimeError("503")))
        with pytest.raises(ApplicationError) as exc_info:
            await client.suggest_idea()
        assert exc_info.value.code == ErrorCode.UPSTREAM_ERROR
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_empty_answer_rejected(self):
        client = OpenAIClient(api_key="", client=mock_sdk(return_value=completion(None)))
        with pytest.raises(ApplicationError):
            await client.suggest_idea()


class TestClientConstruction:

    def test_sdk_client_built_from_settings(self):
        with patch("ideapage_api.core.openai_client.AsyncOpenAI") as sdk_cls:
            client = OpenAIClient(api_key="sk-test", base_url="https://proxy.test/v1")
        sdk_cls.assert_called_once_with(api_key="sk-test", base_url="https://proxy.test/v1")
        assert client.client is sdk_cls.return_value

    def test_no_sdk_client_without_key(self):
        with patch("ideapage_api.core.openai_client.AsyncOpenAI") as sdk_cls:
            client = OpenAIClient(api_key="")
        sdk_cls.assert_not_called()
        assert client.client is None


class TestServiceWiring:

    def test_stream_and_idea_clients_share_one_sdk_client(self):
        with patch("ideapage_api.core.services.AsyncOpenAI") as sdk_cls:
            services = build_services(make_settings(openai_api_key="sk-test"), backend=MemoryBackend())

        sdk_cls.assert_called_once()
        assert services.pipeline.stream_client.client is sdk_cls.return_value
        assert services.openai_client.client is sdk_cls.return_value

    def test_no_sdk_client_without_key(self):
        services = build_services(make_settings(), backend=MemoryBackend())
        assert services.pipeline.stream_client.client is None
        assert services.openai_client.client is None

"""Tests for LLM providers."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from stayscout.llm.anthropic import AnthropicConfig, AnthropicProvider
from stayscout.llm.base import LLMProviderFactory, ResponseResult
from stayscout.llm.ollama import OllamaConfig, OllamaProvider
from stayscout.llm.openai import OpenAIConfig, OpenAIProvider


class TestLLMProviderFactory:
    """Test the LLM provider factory."""

    def test_list_providers(self):
        """Test listing registered providers."""
        providers = LLMProviderFactory.list_providers()
        assert "ollama" in providers
        assert "openai" in providers
        assert "gemini" in providers
        assert "anthropic" in providers

    def test_create_ollama_provider(self):
        """Test creating Ollama provider."""
        provider = LLMProviderFactory.create("ollama", host="http://test:11434")
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"

    def test_create_openai_provider(self):
        """Test creating OpenAI provider."""
        provider = LLMProviderFactory.create("openai", api_key="test-key")
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.api_key == "test-key"

    def test_create_unknown_provider(self):
        """Test creating unknown provider raises error."""
        with pytest.raises(ValueError, match="Unknown provider 'unknown'") as exc_info:
            LLMProviderFactory.create("unknown")

        for name in LLMProviderFactory.list_providers():
            assert name in str(exc_info.value)


class TestOllamaProvider:
    """Test Ollama provider."""

    @pytest.fixture
    def ollama_provider(self):
        """Create Ollama provider for testing."""
        config = OllamaConfig(host="http://test:11434")
        return OllamaProvider(config=config)

    @pytest.mark.asyncio
    async def test_generate_response_success(self, ollama_provider):
        """Test successful response generation."""
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "response": "This is a test response",
            "eval_count": 50,
            "done_reason": "stop",
        }
        mock_response.raise_for_status.return_value = None

        with patch.object(ollama_provider.client, "post", return_value=mock_response):
            result = await ollama_provider.generate_response("test prompt")

            assert isinstance(result, ResponseResult)
            assert result.content == "This is a test response"
            assert result.model == "llama3.2"
            assert result.token_count == 50
            assert result.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_generate_response_with_system(self, ollama_provider):
        """Test that system instructions are sent alongside the prompt."""
        mock_response = MagicMock()
        mock_response.json.return_value = {"response": "{}", "eval_count": 5}
        mock_response.raise_for_status.return_value = None

        with patch.object(ollama_provider.client, "post", return_value=mock_response) as mock_post:
            await ollama_provider.generate_response("test prompt", "reply in JSON")

            payload = mock_post.call_args[1]["json"]
            assert payload["prompt"] == "test prompt"
            assert payload["system"] == "reply in JSON"
            assert payload["stream"] is False

    @pytest.mark.asyncio
    async def test_generate_response_timeout(self, ollama_provider):
        """Test that timeouts surface as RuntimeError."""
        with patch.object(
            ollama_provider.client,
            "post",
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            with pytest.raises(RuntimeError, match="timed out"):
                await ollama_provider.generate_response("test prompt")

    @pytest.mark.asyncio
    async def test_health_check_success(self, ollama_provider):
        """Test successful health check."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        with patch.object(ollama_provider.client, "get", return_value=mock_response):
            result = await ollama_provider.health_check()
            assert result is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self, ollama_provider):
        """Test failed health check."""
        with patch.object(ollama_provider.client, "get", side_effect=Exception("Connection error")):
            result = await ollama_provider.health_check()
            assert result is False


class TestOpenAIProvider:
    """Test OpenAI provider."""

    @pytest.fixture
    def openai_provider(self):
        """Create OpenAI provider for testing."""
        config = OpenAIConfig(api_key="test-key")
        return OpenAIProvider(config=config)

    @pytest.mark.asyncio
    async def test_generate_response_success(self, openai_provider):
        """Test successful response generation."""
        mock_choice = MagicMock()
        mock_choice.message.content = "This is a test response"
        mock_choice.finish_reason = "stop"

        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        mock_response.usage.total_tokens = 50

        with patch.object(
            openai_provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ):
            result = await openai_provider.generate_response("test prompt")

            assert isinstance(result, ResponseResult)
            assert result.content == "This is a test response"
            assert result.model == "gpt-4o-mini"
            assert result.token_count == 50
            assert result.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_generate_response_with_system(self, openai_provider):
        """Test that system instructions become a system message."""
        mock_choice = MagicMock()
        mock_choice.message.content = "Response"
        mock_choice.finish_reason = "stop"

        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        mock_response.usage.total_tokens = 75

        with patch.object(
            openai_provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ) as mock_create:
            await openai_provider.generate_response("test prompt", "be brief")

            messages = mock_create.call_args[1]["messages"]
            assert len(messages) == 2
            assert messages[0] == {"role": "system", "content": "be brief"}
            assert messages[1]["content"] == "test prompt"


class TestAnthropicProvider:
    """Test Anthropic provider."""

    @pytest.fixture
    def anthropic_provider(self):
        """Create Anthropic provider for testing."""
        return AnthropicProvider(config=AnthropicConfig(api_key="test-key"))

    @pytest.mark.asyncio
    async def test_generate_response_joins_text_blocks(self, anthropic_provider):
        """Test that text blocks are concatenated and system is passed through."""
        first = MagicMock(type="text", text="Hello ")
        second = MagicMock(type="text", text="there")
        mock_response = MagicMock()
        mock_response.content = [first, second]
        mock_response.usage.input_tokens = 10
        mock_response.usage.output_tokens = 5
        mock_response.stop_reason = "end_turn"

        with patch.object(
            anthropic_provider.client.messages,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ) as mock_create:
            result = await anthropic_provider.generate_response("hi", system="be kind")

            assert result.content == "Hello there"
            assert result.token_count == 15
            assert result.finish_reason == "end_turn"
            assert mock_create.call_args[1]["system"] == "be kind"

"""Tests for LLM factory functions."""

from unittest.mock import MagicMock, patch

import pytest

from stayscout.config import LLMProvider as LLMProviderEnum
from stayscout.llm.anthropic import AnthropicProvider
from stayscout.llm.factory import create_llm_provider
from stayscout.llm.gemini import GeminiProvider
from stayscout.llm.ollama import OllamaProvider
from stayscout.llm.openai import OpenAIProvider

class TestLLMFactory:
    """Test LLM factory functions."""

    @patch("stayscout.llm.factory.get_settings")
    def test_create_ollama_provider(self, mock_get_settings):
        """Test creating Ollama provider."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.OLLAMA
        mock_settings.ollama_host = "http://test:11434"
        mock_settings.ollama_model = "llama3.2"

        provider = create_llm_provider()
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"
        assert provider.config.model == "llama3.2"

    @patch("stayscout.llm.factory.get_settings")
    def test_create_openai_provider(self, mock_get_settings):
        """Test creating OpenAI provider."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.OPENAI
        mock_settings.openai_api_key = "test-key"
        mock_settings.openai_model = "gpt-4o-mini"

        provider = create_llm_provider()
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.api_key == "test-key"
        assert provider.config.model == "gpt-4o-mini"

    @patch("stayscout.llm.factory.get_settings")
    def test_create_openai_provider_missing_key(self, mock_get_settings):
        """Test creating OpenAI provider without API key."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.OPENAI
        mock_settings.openai_api_key = None

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            create_llm_provider()

    @patch("stayscout.llm.factory.get_settings")
    def test_create_gemini_provider(self, mock_get_settings):
        """Test creating Gemini provider."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.GEMINI
        mock_settings.gemini_api_key = "test-key"
        mock_settings.gemini_model = "gemini-1.5-flash"

        with patch("stayscout.llm.gemini.genai") as mock_genai:
            provider = create_llm_provider()

            assert isinstance(provider, GeminiProvider)
            assert provider.config.model == "gemini-1.5-flash"
            mock_genai.configure.assert_called_once_with(api_key="test-key")

    @patch("stayscout.llm.factory.get_settings")
    def test_create_gemini_provider_missing_key(self, mock_get_settings):
        """Test creating Gemini provider without API key."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.GEMINI
        mock_settings.gemini_api_key = None

        with pytest.raises(ValueError, match="Gemini API key is required"):
            create_llm_provider()

    @patch("stayscout.llm.factory.get_settings")
    def test_create_anthropic_provider_missing_key(self, mock_get_settings):
        """Test creating Anthropic provider without API key."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.ANTHROPIC
        mock_settings.anthropic_api_key = None

        with pytest.raises(ValueError, match="Anthropic API key is required"):
            create_llm_provider()

    @patch("stayscout.llm.factory.get_settings")
    def test_provider_name_overrides_settings(self, mock_get_settings):
        """Test that an explicit provider name wins over settings."""
        mock_settings = mock_get_settings.return_value
        mock_settings.llm_provider = LLMProviderEnum.OPENAI
        mock_settings.anthropic_api_key = "test-key"
        mock_settings.anthropic_model = "claude-3-5-haiku-20241022"

        provider = create_llm_provider("anthropic")
        assert isinstance(provider, AnthropicProvider)
        assert provider.config.model == "claude-3-5-haiku-20241022"

    def test_explicit_settings_are_used(self):
        """Test passing settings directly instead of the global instance."""
        settings = MagicMock()
        settings.llm_provider = LLMProviderEnum.OLLAMA
        settings.ollama_host = "http://other:11434"
        settings.ollama_model = "mistral"

        with patch("stayscout.llm.factory.get_settings") as mock_get_settings:
            provider = create_llm_provider(settings=settings)
            mock_get_settings.assert_not_called()

        assert isinstance(provider, OllamaProvider)
        assert provider.config.model == "mistral"

    @patch("stayscout.llm.factory.get_settings")
    def test_unknown_provider(self, mock_get_settings):
        """Test that an unknown provider name is rejected."""
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_llm_provider("mystery")

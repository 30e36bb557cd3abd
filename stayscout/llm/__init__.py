"""LLM providers module."""

from stayscout.llm.anthropic import AnthropicConfig, AnthropicProvider
from stayscout.llm.base import LLMProvider, LLMProviderFactory, ResponseResult
from stayscout.llm.factory import create_llm_provider
from stayscout.llm.gemini import GeminiConfig, GeminiProvider
from stayscout.llm.ollama import OllamaConfig, OllamaProvider
from stayscout.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("gemini", GeminiProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "GeminiConfig",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_llm_provider",
]

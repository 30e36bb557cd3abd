"""Google Gemini LLM provider implementation."""

import logging
from typing import Any

import google.generativeai as genai
from pydantic import BaseModel

from stayscout.llm.base import LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class GeminiConfig(BaseModel):
    """Configuration for Gemini provider."""

    api_key: str
    model: str = "gemini-1.5-flash"
    max_tokens: int = 600
    temperature: float = 0.4
    timeout: int = 30


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation."""

    def __init__(self, config: GeminiConfig | None = None, **kwargs: Any) -> None:
        """Initialize Gemini provider.

        Args:
            config: Gemini configuration
            **kwargs: Additional configuration options
        """
        self.config = config or GeminiConfig(**kwargs)
        genai.configure(api_key=self.config.api_key)
        self.model = genai.GenerativeModel(self.config.model)

    async def generate_response(self, prompt: str, system: str | None = None) -> ResponseResult:
        model = self.model
        if system:
            model = genai.GenerativeModel(self.config.model, system_instruction=system)

        try:
            response = await model.generate_content_async(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                ),
            )

            return ResponseResult(
                content=response.text,
                model=self.config.model,
                token_count=response.usage_metadata.total_token_count
                if response.usage_metadata
                else None,
                finish_reason=response.candidates[0].finish_reason.name
                if response.candidates
                else None,
            )

        except Exception as e:
            logger.error(f"Gemini response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

    async def health_check(self) -> bool:
        """Check if Gemini service is accessible."""
        try:
            await self.model.count_tokens_async("health check")
            return True
        except Exception as e:
            logger.warning(f"Gemini health check failed: {e}")
            return False

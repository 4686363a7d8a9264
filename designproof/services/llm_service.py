"""LLM service for Google Gemini integration."""

import asyncio
import logging

from google import genai
from google.genai import types

from designproof.config import Settings

logger = logging.getLogger(__name__)


class LLMService:
    """Service for Google Gemini LLM operations."""

    def __init__(self, settings: Settings):
        self.client = genai.Client(api_key=settings.gemini_api_key)
        self.model = settings.gemini_model
        self.max_tokens = settings.llm_max_tokens
        self.temperature = settings.llm_temperature

    async def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        """Generate text completion using Gemini.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt

        Returns:
            Generated text
        """
        try:
            config = types.GenerateContentConfig(
                max_output_tokens=self.max_tokens,
                temperature=self.temperature,
                system_instruction=system_prompt,
            )

            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=config,
            )
            return response.text or ""
        except Exception as e:
            logger.error(f"LLM generation failed: {e}")
            raise

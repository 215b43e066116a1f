"""
Gemini Text Generation

Thin wrapper over the google-generativeai SDK. The advisor prompt and the
learn-page prompts are built elsewhere; this class only sends them and
returns the text.
"""

from typing import Optional

import google.generativeai as genai
import structlog

from finwise.config import GeminiSettings, get_settings
from finwise.services.llm.interface import (
    TextGenerationError,
    TextGenerator,
    TextGeneratorNotConfiguredError,
)


logger = structlog.get_logger(__name__)


class GeminiTextGenerator(TextGenerator):
    """TextGenerator backed by Gemini."""

    name = "gemini"

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        if not self._settings.api_key:
            raise TextGeneratorNotConfiguredError("Gemini API key is not configured")
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._model.generate_content_async(prompt)
        except Exception as e:
            logger.error("gemini_request_failed", error=str(e))
            raise TextGenerationError(f"Gemini request failed: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Blocked or empty candidates: the SDK refuses to produce .text
            raise TextGenerationError("Invalid response format from Gemini API") from e

        if not text:
            raise TextGenerationError("Invalid response format from Gemini API")
        return text

"""Text generation services package."""

from finwise.services.llm.interface import (
    TextGenerationError,
    TextGenerator,
    TextGeneratorNotConfiguredError,
)
from finwise.services.llm.gemini_service import GeminiTextGenerator
from finwise.services.llm.openai_service import OpenAITextGenerator

__all__ = [
    "GeminiTextGenerator",
    "OpenAITextGenerator",
    "TextGenerationError",
    "TextGenerator",
    "TextGeneratorNotConfiguredError",
]

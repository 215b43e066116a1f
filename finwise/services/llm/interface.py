"""
Text Generation Interface

The advisor and the learn page only need "prompt in, text out".
Gemini and OpenAI both implement this interface, so the provider can be
switched in configuration without touching the agents.
"""

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """A text-generation backend."""

    #: Short provider name used in logs and audit events
    name: str = "text_generator"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Returns:
            The generated text, verbatim

        Raises:
            TextGenerationError: On transport failure or a response
                without text
        """
        pass


class TextGenerationError(Exception):
    """Base exception for text generation failures."""
    pass


class TextGeneratorNotConfiguredError(TextGenerationError):
    """The backend is missing its API key."""
    pass

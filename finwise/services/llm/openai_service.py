"""
OpenAI Text Generation

Chat-completions wrapper used by the learn page (and selectable for the
advisor). Rate-limit responses (HTTP 429) are retried a fixed number of
times with a fixed delay; every other failure surfaces immediately.
"""

from typing import Optional

import structlog
from openai import AsyncOpenAI, OpenAIError, RateLimitError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from finwise.config import OpenAISettings, get_settings
from finwise.services.llm.interface import (
    TextGenerationError,
    TextGenerator,
    TextGeneratorNotConfiguredError,
)


logger = structlog.get_logger(__name__)


def _log_rate_limited(retry_state) -> None:
    logger.warning(
        "openai_rate_limited",
        attempt=retry_state.attempt_number,
        retry_in_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
    )


class OpenAITextGenerator(TextGenerator):
    """TextGenerator backed by OpenAI chat completions."""

    name = "openai"

    def __init__(
        self,
        settings: Optional[OpenAISettings] = None,
        rate_limit_retries: Optional[int] = None,
        rate_limit_backoff_seconds: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self._settings = settings or get_settings().openai
        if not self._settings.api_key:
            raise TextGeneratorNotConfiguredError("OpenAI API key is not configured")

        if rate_limit_retries is None or rate_limit_backoff_seconds is None:
            app_settings = get_settings().app
            if rate_limit_retries is None:
                rate_limit_retries = app_settings.rate_limit_retries
            if rate_limit_backoff_seconds is None:
                rate_limit_backoff_seconds = app_settings.rate_limit_backoff_seconds
        self._retries = rate_limit_retries
        self._backoff = rate_limit_backoff_seconds
        self._client = client or AsyncOpenAI(api_key=self._settings.api_key)

    async def _complete(self, prompt: str):
        return await self._client.chat.completions.create(
            model=self._settings.model_name,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
            presence_penalty=self._settings.presence_penalty,
            frequency_penalty=self._settings.frequency_penalty,
        )

    async def generate(self, prompt: str) -> str:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retries + 1),
                wait=wait_fixed(self._backoff),
                retry=retry_if_exception_type(RateLimitError),
                before_sleep=_log_rate_limited,
                reraise=True,
            ):
                with attempt:
                    response = await self._complete(prompt)
        except OpenAIError as e:
            logger.error("openai_request_failed", error=str(e))
            raise TextGenerationError(f"OpenAI request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise TextGenerationError("Invalid response format from OpenAI")
        return content

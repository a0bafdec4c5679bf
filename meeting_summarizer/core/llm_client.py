"""Text generation clients.

Every client exposes ``generate(prompt) -> str`` and reports failures as
``GenerationFailed``, ``QuotaExceeded`` or ``ContentRejected``. Nothing here
retries; a failed call is reported to the caller as-is.
"""

from enum import Enum
from typing import Any, Dict, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from meeting_summarizer.core.config import LLMSettings
from meeting_summarizer.core.exceptions import (
    ConfigurationError,
    ContentRejected,
    GenerationFailed,
    QuotaExceeded,
)
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


class TextGenerator(Protocol):
    """Anything that turns a prompt into text."""

    async def generate(self, prompt: str) -> str:
        ...


def _mentions_quota(message: str) -> bool:
    lowered = message.lower()
    return "quota" in lowered or "rate limit" in lowered or "resource_exhausted" in lowered


class GeminiClient:
    """Wrapper for Google Gemini API client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        temperature: float = 0.3,
        timeout: int = 60,
        client: Optional[genai.Client] = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name to use
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Pre-built SDK client, mainly for tests
        """
        if not api_key and client is None:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        self.model = model
        self.temperature = temperature
        self.timeout = timeout

        try:
            self.client = client or genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=timeout * 1000),
            )
        except Exception as e:
            LOGGER.error(f"Failed to initialize Gemini client: {e}")
            raise ConfigurationError(f"Failed to initialize Gemini client: {e}", original_error=e) from e

        LOGGER.info(f"Initialized Gemini client with model {self.model}")

    async def generate(self, prompt: str) -> str:
        """Generate text for a single prompt.

        Raises:
            QuotaExceeded: If the API reports a rate or usage limit
            ContentRejected: If the prompt or the answer was blocked
            GenerationFailed: On any other failure or an empty answer
        """
        config = types.GenerateContentConfig(temperature=self.temperature)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            raise self._map_api_error(e) from e
        except Exception as e:
            LOGGER.error(f"Gemini request failed: {e}", exc_info=True)
            raise GenerationFailed(f"Gemini generation failed: {e}", original_error=e) from e

        self._raise_if_blocked(response)

        text = response.text
        if not text or not text.strip():
            LOGGER.warning("Empty response from Gemini")
            raise GenerationFailed("Gemini returned an empty response")

        return text

    def _map_api_error(self, error: genai_errors.APIError) -> GenerationFailed:
        code = getattr(error, "code", None)
        status = str(getattr(error, "status", "") or "")
        message = str(error)

        if code == 429 or status == "RESOURCE_EXHAUSTED" or _mentions_quota(message):
            LOGGER.warning(f"Gemini quota exceeded: {message}")
            return QuotaExceeded(f"Gemini quota exceeded: {message}", original_error=error)

        if "safety" in message.lower():
            LOGGER.warning(f"Gemini rejected content: {message}")
            return ContentRejected(f"Gemini rejected content: {message}", original_error=error)

        LOGGER.error(f"Gemini API error {code}: {message}")
        return GenerationFailed(f"Gemini API error {code}: {message}", original_error=error)

    @staticmethod
    def _raise_if_blocked(response: Any) -> None:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            LOGGER.warning(f"Gemini blocked the prompt: {block_reason}")
            raise ContentRejected(f"Prompt blocked: {block_reason}")

        for candidate in getattr(response, "candidates", None) or []:
            reason = getattr(candidate, "finish_reason", None)
            reason_name = getattr(reason, "name", None) or str(reason or "")
            if reason_name in BLOCKING_FINISH_REASONS:
                LOGGER.warning(f"Gemini stopped generation: {reason_name}")
                raise ContentRejected(f"Response blocked: {reason_name}")


class OpenRouterClient:
    """Chat-completions client for OpenRouter."""

    def __init__(
        self,
        api_key: str,
        model: str = "google/gemini-2.0-flash-001",
        base_url: str = "https://openrouter.ai/api/v1/chat/completions",
        temperature: float = 0.3,
        timeout: int = 60,
    ):
        if not api_key:
            raise ConfigurationError("OPENROUTER_API_KEY is not configured")

        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.timeout = timeout

        LOGGER.info(f"Initialized OpenRouter client with model {self.model}")

    async def generate(self, prompt: str) -> str:
        """Generate text for a single prompt.

        Raises:
            QuotaExceeded: On HTTP 429 or a rate-limit error payload
            ContentRejected: On moderation errors or a content_filter finish
            GenerationFailed: On timeouts, other HTTP errors or malformed payloads
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.base_url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            LOGGER.warning(f"OpenRouter request timed out after {self.timeout}s")
            raise GenerationFailed("OpenRouter request timed out", original_error=e) from e
        except httpx.HTTPError as e:
            LOGGER.error(f"OpenRouter transport error: {e}")
            raise GenerationFailed(f"OpenRouter transport error: {e}", original_error=e) from e

        if response.status_code >= 400:
            raise self._map_status(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationFailed("OpenRouter returned invalid JSON", original_error=e) from e

        return self._extract_text(data)

    @staticmethod
    def _map_status(status_code: int, body: str) -> GenerationFailed:
        LOGGER.warning(
            "OpenRouter HTTP error",
            extra={"status_code": status_code, "error_body": body[:500]},
        )
        if status_code == 429:
            return QuotaExceeded(f"OpenRouter rate limit: {body[:200]}")
        if status_code == 403:
            return ContentRejected(f"OpenRouter moderation: {body[:200]}")
        return GenerationFailed(f"OpenRouter error {status_code}: {body[:200]}")

    def _extract_text(self, data: Dict[str, Any]) -> str:
        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            if code == 429 or _mentions_quota(message):
                raise QuotaExceeded(f"OpenRouter rate limit: {message}")
            if code == 403:
                raise ContentRejected(f"OpenRouter moderation: {message}")
            raise GenerationFailed(f"OpenRouter error: {message}")

        try:
            choice = data["choices"][0]
            content = choice["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationFailed("OpenRouter response missing choices", original_error=e) from e

        if choice.get("finish_reason") == "content_filter":
            raise ContentRejected("OpenRouter response blocked by content filter")

        if not content or not content.strip():
            raise GenerationFailed("OpenRouter returned an empty response")

        return content


def create_text_generator(llm_settings: LLMSettings) -> TextGenerator:
    """Build the text generator selected by configuration.

    Raises:
        ConfigurationError: If the provider is unknown or its key is missing
    """
    try:
        provider = LLMProvider(llm_settings.provider.lower())
    except ValueError as e:
        raise ConfigurationError(f"Unsupported LLM provider: {llm_settings.provider}") from e

    if provider == LLMProvider.GEMINI:
        return GeminiClient(
            api_key=llm_settings.gemini_api_key,
            model=llm_settings.gemini_model,
            temperature=llm_settings.temperature,
            timeout=llm_settings.timeout,
        )

    return OpenRouterClient(
        api_key=llm_settings.openrouter_api_key,
        model=llm_settings.openrouter_model,
        base_url=llm_settings.openrouter_api_url,
        temperature=llm_settings.temperature,
        timeout=llm_settings.timeout,
    )

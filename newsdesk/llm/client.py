from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import anthropic
from langchain_anthropic import ChatAnthropic
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from newsdesk.core.config import Settings, settings

logger = logging.getLogger(__name__)


class LLMServiceError(Exception):
    """Base error raised when the LLM service cannot fulfill a request."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class LLMUnavailableError(LLMServiceError):
    """LLM is unavailable (timeout, rate limit, or upstream outage)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_unavailable")


class LLMAuthenticationError(LLMServiceError):
    """LLM authentication failed (service credentials invalid)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_auth_failed")


class LLMInvalidResponseError(LLMServiceError):
    """LLM returned an invalid or unexpected response."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_response_invalid")


class LLMNotConfiguredError(LLMServiceError):
    """No provider credentials are configured."""

    def __init__(self, message: str = "No LLM provider is configured") -> None:
        super().__init__(message, "llm_not_configured")


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's text answer to ``user_prompt``."""
        raise NotImplementedError


class OpenAIClient(LLMClient):
    """OpenAI implementation of LLM client."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Initialize OpenAI client."""
        self.client = AsyncOpenAI(api_key=api_key or settings.openai_api_key)
        self.model = model or settings.openai_model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.llm_max_tokens

    def _handle_errors(self, error: Exception) -> LLMServiceError:
        """Log error with appropriate message based on error type."""
        if isinstance(error, APITimeoutError):
            logger.error(f"OpenAI API request timed out. Error: {error}")
            return LLMUnavailableError("LLM request timed out. Try again.")
        elif isinstance(error, APIConnectionError):
            logger.error(f"OpenAI API connection failed. Error: {error}")
            return LLMUnavailableError("LLM service unreachable. Try again shortly.")
        elif isinstance(error, RateLimitError):
            logger.error(f"OpenAI API rate limit exceeded. Error: {error}")
            return LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        elif isinstance(error, AuthenticationError):
            logger.error(f"OpenAI API authentication failed. Error: {error}")
            return LLMAuthenticationError("LLM authentication failed.")
        elif isinstance(error, APIError):
            logger.error(f"OpenAI API error. Error: {error}")
            return LLMUnavailableError("LLM service error. Try again later.")
        elif isinstance(error, (IndexError, AttributeError)):
            logger.error(f"Unexpected response structure from OpenAI. Error: {error}")
            return LLMInvalidResponseError("LLM returned an unexpected response.")
        elif isinstance(error, ValueError):
            logger.error(f"Invalid value encountered. Error: {error}")
            return LLMInvalidResponseError(str(error))
        else:
            logger.error(f"Unexpected error generating content. Error: {error}")
            return LLMServiceError("LLM request failed. Try again later.", "llm_error")

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Generate text with the OpenAI chat completions API."""
        try:
            response: ChatCompletion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content
            if not content:
                raise ValueError("Empty response from OpenAI")
            return content.strip()
        except Exception as e:
            raise self._handle_errors(e) from e


class AnthropicClient(LLMClient):
    """Anthropic implementation running a LangChain prompt | model | parser chain."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        chat_model = ChatAnthropic(
            model=model or settings.anthropic_model,
            api_key=api_key or settings.anthropic_api_key,
            temperature=settings.llm_temperature if temperature is None else temperature,
            max_tokens=max_tokens or settings.llm_max_tokens,
        )
        prompt = ChatPromptTemplate.from_messages(
            [("system", "{system_prompt}"), ("human", "{user_prompt}")]
        )
        self.chain: Any = prompt | chat_model | StrOutputParser()

    def _handle_errors(self, error: Exception) -> LLMServiceError:
        if isinstance(error, anthropic.APITimeoutError):
            logger.error(f"Anthropic API request timed out. Error: {error}")
            return LLMUnavailableError("LLM request timed out. Try again.")
        elif isinstance(error, anthropic.APIConnectionError):
            logger.error(f"Anthropic API connection failed. Error: {error}")
            return LLMUnavailableError("LLM service unreachable. Try again shortly.")
        elif isinstance(error, anthropic.RateLimitError):
            logger.error(f"Anthropic API rate limit exceeded. Error: {error}")
            return LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        elif isinstance(error, anthropic.AuthenticationError):
            logger.error(f"Anthropic API authentication failed. Error: {error}")
            return LLMAuthenticationError("LLM authentication failed.")
        elif isinstance(error, anthropic.APIError):
            logger.error(f"Anthropic API error. Error: {error}")
            return LLMUnavailableError("LLM service error. Try again later.")
        elif isinstance(error, ValueError):
            logger.error(f"Invalid value encountered. Error: {error}")
            return LLMInvalidResponseError(str(error))
        else:
            logger.error(f"Unexpected error generating content. Error: {error}")
            return LLMServiceError("LLM request failed. Try again later.", "llm_error")

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            content = await self.chain.ainvoke(
                {"system_prompt": system_prompt, "user_prompt": user_prompt}
            )
            if not content or not content.strip():
                raise ValueError("Empty response from Anthropic")
            return content.strip()
        except Exception as e:
            raise self._handle_errors(e) from e


def build_llm_client(app_settings: Settings | None = None) -> LLMClient:
    """Pick a provider: the explicit ``LLM_PROVIDER``, else whichever key is set (OpenAI first).

    Raises:
        LLMNotConfiguredError: If the chosen provider has no API key.
    """
    app_settings = app_settings or settings
    provider = app_settings.llm_provider
    if provider is None:
        if app_settings.openai_api_key:
            provider = "openai"
        elif app_settings.anthropic_api_key:
            provider = "anthropic"
        else:
            raise LLMNotConfiguredError("Set OPENAI_API_KEY or ANTHROPIC_API_KEY")

    if provider == "openai":
        if not app_settings.openai_api_key:
            raise LLMNotConfiguredError("OPENAI_API_KEY is not set")
        return OpenAIClient(
            app_settings.openai_api_key,
            model=app_settings.openai_model,
            temperature=app_settings.llm_temperature,
            max_tokens=app_settings.llm_max_tokens,
        )
    if not app_settings.anthropic_api_key:
        raise LLMNotConfiguredError("ANTHROPIC_API_KEY is not set")
    return AnthropicClient(
        app_settings.anthropic_api_key,
        model=app_settings.anthropic_model,
        temperature=app_settings.llm_temperature,
        max_tokens=app_settings.llm_max_tokens,
    )

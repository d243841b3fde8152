"""OpenAI chat-completions adapter."""

import logging
import os
from typing import Any, Optional

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    OpenAI,
    RateLimitError,
)

from .adapter import LLMAdapter
from .exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    OracleError,
    OracleTimeoutError,
)
from .models import Message

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


def _retry_after(error: RateLimitError) -> Optional[float]:
    """Seconds from the Retry-After header of a 429, if present."""
    response = getattr(error, "response", None)
    header = response.headers.get("retry-after") if response is not None else None
    if not header:
        return None
    try:
        return float(header)
    except ValueError:
        return None


def translate_openai_error(error: APIError) -> OracleError:
    """Map an openai SDK error onto the oracle error taxonomy."""
    # APITimeoutError subclasses APIConnectionError
    if isinstance(error, APITimeoutError):
        return OracleTimeoutError(f"OpenAI request timed out: {error}")
    if isinstance(error, APIConnectionError):
        return LLMConnectionError(f"Failed to connect to OpenAI: {error}")
    if isinstance(error, AuthenticationError):
        return LLMAuthenticationError(f"OpenAI authentication failed: {error}")
    if isinstance(error, RateLimitError):
        return LLMRateLimitError(f"OpenAI rate limit exceeded: {error}", _retry_after(error))
    return LLMResponseError(f"OpenAI API error: {error}")


def _response_text(response: Any) -> str:
    if not response.choices:
        raise LLMResponseError("No choices in OpenAI response")
    content = response.choices[0].message.content
    if not content:
        raise LLMResponseError("Empty content in OpenAI response", raw_response=content)
    return content


class OpenAIAdapter(LLMAdapter):
    """LLMAdapter over the OpenAI chat-completions API.

    The SDK client is created on first use with retries disabled: the
    oracle's rate limiter decides when calls happen, and its deadline
    bounds how long one may take.

    Example:
        adapter = OpenAIAdapter()  # reads OPENAI_API_KEY
        adapter = OpenAIAdapter(model="gpt-4o", timeout=10.0)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: float = 15.0,
    ):
        """
        Args:
            api_key: OpenAI API key. Defaults to the OPENAI_API_KEY env var.
            model: Model to use. Defaults to gpt-4o-mini.
            organization: Optional OpenAI organization ID.
            timeout: HTTP timeout in seconds for each request.

        Raises:
            LLMAuthenticationError: If no API key is available.
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise LLMAuthenticationError(
                "OpenAI API key not provided. Set OPENAI_API_KEY or pass api_key."
            )
        self._model = model or DEFAULT_MODEL
        self._organization = organization
        self._timeout = timeout
        self._client: Optional[OpenAI] = None

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self._api_key,
                organization=self._organization,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def complete(
        self,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> str:
        request = {
            "model": self._model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object" if json_mode else "text"},
        }
        logger.debug("OpenAI request model=%s json_mode=%s", self._model, json_mode)
        try:
            response = self._get_client().chat.completions.create(**request)
        except APIError as e:
            raise translate_openai_error(e) from e

        text = _response_text(response)
        if response.usage:
            logger.debug(
                "OpenAI usage: %d prompt + %d completion tokens",
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return text

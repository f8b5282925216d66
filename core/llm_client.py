"""
Completion Service
Client creation and the text-completion interface used by the pipeline
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from openai import AsyncOpenAI

from .providers import (
    LLMProvider, PROVIDER_CONFIGS, is_reasoning_model, supports_json_mode, token_limit_param
)
from errors import GenerationServiceError
from config import (
    DEFAULT_MODEL, DEFAULT_TEMPERATURE, DEFAULT_MAX_TOKENS,
    HTTP_MAX_CONNECTIONS, HTTP_MAX_KEEPALIVE,
    HTTP_KEEPALIVE_EXPIRY, HTTP_TIMEOUT, HTTP_CONNECT_TIMEOUT
)

logger = logging.getLogger(__name__)


def create_http_client() -> httpx.AsyncClient:
    """Create a configured HTTP client for LLM requests"""
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=HTTP_MAX_KEEPALIVE,
            keepalive_expiry=HTTP_KEEPALIVE_EXPIRY
        ),
        timeout=httpx.Timeout(HTTP_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT)
    )


def get_client(provider: LLMProvider, api_key: str, base_url: Optional[str] = None,
               http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
    """Create an AsyncOpenAI client for the provider.

    SDK retries are disabled: retrying a generation is the caller's decision.
    """
    config = PROVIDER_CONFIGS[provider]
    effective_key = api_key if config.requires_api_key else "dummy"
    effective_url = base_url or config.base_url

    kwargs: Dict[str, Any] = {
        "api_key": effective_key,
        "base_url": effective_url,
        "max_retries": 0,
    }
    if http_client:
        kwargs["http_client"] = http_client
    if config.default_headers:
        kwargs["default_headers"] = dict(config.default_headers)

    return AsyncOpenAI(**kwargs)


class CompletionService(ABC):
    """
    Text-completion collaborator.

    Implementations take a system prompt and a user prompt and return the
    model's text, which is expected (not guaranteed) to contain JSON.
    Failures must surface as ``GenerationServiceError``.
    """

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str, **options) -> str:
        pass


class OpenAICompletionService(CompletionService):
    """Completion service backed by any OpenAI-compatible chat endpoint"""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = DEFAULT_MODEL,
        temperature: Optional[float] = DEFAULT_TEMPERATURE,
        max_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
        provider: LLMProvider = LLMProvider.OPENAI,
        json_mode: bool = True
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.provider = provider
        self.json_mode = json_mode and supports_json_mode(provider, model)

    @classmethod
    def from_provider(cls, provider: LLMProvider, api_key: str,
                      base_url: Optional[str] = None, model: Optional[str] = None,
                      **kwargs) -> "OpenAICompletionService":
        client = get_client(provider, api_key, base_url, create_http_client())
        model = model or PROVIDER_CONFIGS[provider].default_model or DEFAULT_MODEL
        return cls(client, model=model, provider=provider, **kwargs)

    def _request_kwargs(self, system_prompt: str, user_prompt: str, options: Dict[str, Any]) -> Dict[str, Any]:
        model = options.get("model", self.model)
        temperature = options.get("temperature", self.temperature)
        max_tokens = options.get("max_tokens", self.max_tokens)

        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
        }

        # Temperature: only if set AND model supports it
        if temperature is not None and not is_reasoning_model(model):
            kwargs["temperature"] = temperature

        if max_tokens is not None:
            kwargs[token_limit_param(model)] = max_tokens

        if options.get("json_mode", self.json_mode) and not is_reasoning_model(model):
            kwargs["response_format"] = {"type": "json_object"}

        return kwargs

    async def complete(self, system_prompt: str, user_prompt: str, **options) -> str:
        """Send one chat completion and return its text (empty string if none)"""
        kwargs = self._request_kwargs(system_prompt, user_prompt, options)
        start = time.time()
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except Exception as e:
            error = GenerationServiceError.from_exception(e)
            logger.warning(
                "Completion failed after %.2fs: %s",
                time.time() - start, error.error_info.error_type.value
            )
            raise error from e

        logger.debug("Completion from %s in %.2fs", kwargs["model"], time.time() - start)
        return response.choices[0].message.content or ""

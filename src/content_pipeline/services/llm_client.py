"""
Text-generation client used by every agent.

Wraps the Anthropic and OpenAI async SDKs behind one call. Each call is a
single provider round-trip bounded by LLM_TIMEOUT; nothing is retried here,
failures surface as ConfigurationError or ProviderError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Optional

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from content_pipeline.config import settings
from content_pipeline.services.exceptions import (
    ConfigurationError,
    LLMTimeoutError,
    ProviderError,
)

logger = logging.getLogger(__name__)


async def _round_trip(label: str, request: Awaitable[Any], timeout: float) -> Any:
    """Await a provider request, mapping timeouts and SDK errors to client errors."""
    try:
        return await asyncio.wait_for(request, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise LLMTimeoutError(f"{label} call exceeded timeout of {timeout}s") from e
    except Exception as e:
        raise ProviderError(f"{label} API error: {str(e)}") from e


class LLMClient:
    """
    Generates text with the configured provider.

    SDK clients are only built for providers whose API key is set, so a
    missing key is reported when that provider is first used.
    """

    def __init__(self, provider: Optional[str] = None):
        self.provider = (provider or settings.LLM_PROVIDER).lower()
        self.anthropic_client = (
            AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY) if settings.ANTHROPIC_API_KEY else None
        )
        self.openai_client = (
            AsyncOpenAI(api_key=settings.OPENAI_API_KEY) if settings.OPENAI_API_KEY else None
        )

    async def call_anthropic(
        self,
        model_name: str,
        user_message: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> Dict[str, Any]:
        """Send one Messages API request to Claude."""
        if not self.anthropic_client:
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")

        kwargs: Dict[str, Any] = {
            "model": model_name,
            "messages": [{"role": "user", "content": user_message}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = await _round_trip(
            "Anthropic", self.anthropic_client.messages.create(**kwargs), timeout
        )

        text = "".join(
            block.text for block in (response.content or [])
            if getattr(block, "type", "text") == "text"
        )
        if not text:
            raise ProviderError("Anthropic API error: response contained no text")

        return {
            "content": text,
            "usage": {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            "model": response.model,
        }

    async def call_openai(
        self,
        model_name: str,
        user_message: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> Dict[str, Any]:
        """Send one Chat Completions request to OpenAI."""
        if not self.openai_client:
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set")

        messages = [{"role": "user", "content": user_message}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        response = await _round_trip(
            "OpenAI",
            self.openai_client.chat.completions.create(
                model=model_name,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            ),
            timeout,
        )

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise ProviderError("OpenAI API error: response contained no text")

        usage = response.usage
        return {
            "content": content,
            "usage": {
                "input_tokens": usage.prompt_tokens if usage else 0,
                "output_tokens": usage.completion_tokens if usage else 0,
            },
            "model": response.model,
        }

    async def call(
        self,
        provider: str,
        model_name: str,
        user_message: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Call a provider and return its reply with token usage.

        Args:
            provider: "anthropic" or "openai"
            model_name: Model identifier
            user_message: Prompt text
            system_prompt: Optional system prompt
            temperature: Defaults to LLM_TEMPERATURE
            max_tokens: Defaults to LLM_MAX_TOKENS
            timeout: Seconds, defaults to LLM_TIMEOUT

        Returns:
            Dict with content, usage (input_tokens, output_tokens) and model

        Raises:
            ConfigurationError: Unknown provider or missing API key
            LLMTimeoutError: Provider did not answer within the timeout
            ProviderError: Provider request failed or returned no text
        """
        handlers = {
            "anthropic": self.call_anthropic,
            "openai": self.call_openai,
        }
        handler = handlers.get(provider.lower())
        if handler is None:
            raise ConfigurationError(f"Unsupported provider: {provider}")

        return await handler(
            model_name=model_name,
            user_message=user_message,
            system_prompt=system_prompt,
            temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
            max_tokens=settings.LLM_MAX_TOKENS if max_tokens is None else max_tokens,
            timeout=settings.LLM_TIMEOUT if timeout is None else timeout,
        )

    async def generate(self, prompt: str, model: Optional[str] = None) -> str:
        """
        Generate text for a single prompt.

        Args:
            prompt: Non-empty prompt text
            model: Model identifier (defaults to DEFAULT_MODEL)

        Returns:
            Generated text

        Raises:
            ValueError: If prompt is empty
            ConfigurationError: If the provider credential is missing
            ProviderError: If the provider call fails
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        model_name = model or settings.DEFAULT_MODEL
        logger.debug("LLM request to %s/%s (%d chars)", self.provider, model_name, len(prompt))

        response = await self.call(
            provider=self.provider,
            model_name=model_name,
            user_message=prompt,
        )
        return response["content"]

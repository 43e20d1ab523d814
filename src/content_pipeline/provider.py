"""Generation provider contract and the litellm-backed implementation."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Protocol

from litellm import acompletion

from content_pipeline.config import LLMConfig
from content_pipeline.models import GenerationRequest
from content_pipeline.request_budget import RequestBudget

logger = logging.getLogger(__name__)


class GenerationProvider(Protocol):
    """Protocol for text generation.

    Implementations return raw text or raise. They are not expected to retry,
    cache or time out on behalf of the pipeline.
    """

    async def call(self, request: GenerationRequest) -> str:
        """Send a generation request and return the raw text response."""
        ...


def build_messages(request: GenerationRequest) -> list[dict[str, str]]:
    """Convert a generation request into chat messages."""
    messages: list[dict[str, str]] = []
    if request.system_instructions:
        messages.append({"role": "system", "content": request.system_instructions})
    messages.append({"role": "user", "content": request.user_instructions})
    return messages


class LiteLLMProvider:
    """LiteLLM-backed implementation of the generation provider protocol."""

    def __init__(self, *, llm_config: LLMConfig, encoding_name: str = "o200k_base") -> None:
        """Initialize the provider.

        Args:
            llm_config: LLM connection configuration.
            encoding_name: tiktoken encoding used to size requests.

        Raises:
            KeyError: If the API key environment variable is not set.
        """
        if llm_config.api_key_env not in os.environ:
            raise KeyError(f"Missing required environment variable: {llm_config.api_key_env}")
        self._llm_config = llm_config
        self._api_key = os.environ[llm_config.api_key_env]
        self._budget = RequestBudget(
            context_window=llm_config.context_window,
            threshold_percent=llm_config.context_window_threshold,
            encoding_name=encoding_name,
        )

    async def preflight(self, *, timeout_seconds: int) -> None:
        """Send a one-token completion to confirm the model answers with the configured key.

        Raises:
            ConnectionError: If the model cannot be reached or rejects the request.
        """
        llm_config = self._llm_config
        logger.info("Pre-flight completion: model=%s api_base=%s (timeout=%ds)", llm_config.model, llm_config.api_base, timeout_seconds)
        try:
            await acompletion(
                model=llm_config.model,
                api_base=llm_config.api_base,
                api_key=self._api_key,
                messages=[{"role": "user", "content": "ping"}],
                temperature=0.0,
                max_tokens=1,
                timeout=timeout_seconds,
                stream=False,
            )
        except Exception as exc:
            raise ConnectionError(f"Model {llm_config.model} did not answer the pre-flight request: {type(exc).__name__}: {exc}") from exc

    async def call(self, request: GenerationRequest) -> str:
        """Call LiteLLM with the configured transport retry behavior.

        Raises:
            RequestTooLargeError: If the request does not fit the context window budget.
        """
        llm_config = self._llm_config
        size = self._budget.check(request, default_max_tokens=llm_config.max_tokens)
        messages = build_messages(request)
        temperature = request.temperature if request.temperature is not None else llm_config.temperature
        max_tokens = size.completion_tokens
        agent_name = request.agent_name or "request"

        attempts = 0
        total_attempts = llm_config.max_retries + 1
        while True:
            attempts += 1
            logger.info(
                "LLM request (%s): attempt %d/%d model=%s prompt_tokens=%d max_tokens=%d temperature=%.2f",
                agent_name,
                attempts,
                total_attempts,
                llm_config.model,
                size.prompt_tokens,
                max_tokens,
                temperature,
            )
            started_at = time.perf_counter()
            try:
                response = await acompletion(
                    model=llm_config.model,
                    api_base=llm_config.api_base,
                    api_key=self._api_key,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    timeout=llm_config.timeout_seconds,
                    stream=False,
                )
                elapsed = time.perf_counter() - started_at
                content = response.choices[0].message.content
                if content is None:
                    raise ValueError("LLM returned empty content")
                logger.info(
                    "LLM response (%s): attempt %d/%d succeeded in %.1fs, response_chars=%d",
                    agent_name,
                    attempts,
                    total_attempts,
                    elapsed,
                    len(content),
                )
                return content
            except Exception as exc:
                elapsed = time.perf_counter() - started_at
                logger.error(
                    "LLM request (%s) failed: attempt %d/%d after %.1fs — %s: %s",
                    agent_name,
                    attempts,
                    total_attempts,
                    elapsed,
                    type(exc).__name__,
                    exc,
                )

                if attempts >= total_attempts:
                    logger.error("LLM retries exhausted for %s after %d attempts", agent_name, total_attempts)
                    raise

                logger.info("LLM retrying in %.1fs...", llm_config.retry_delay)
                await asyncio.sleep(llm_config.retry_delay)

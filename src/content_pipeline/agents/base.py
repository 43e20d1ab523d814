"""Base class for the pipeline stage agents."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from content_pipeline.config import AgentCallSettings
from content_pipeline.models import AgentResult, GenerationRequest
from content_pipeline.provider import GenerationProvider

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")
PayloadT = TypeVar("PayloadT", bound=BaseModel)


def format_list(items: list[str], *, empty: str = "(none)") -> str:
    """Join short strings into a comma separated prompt fragment."""
    return ", ".join(items) if items else empty


def format_bullets(items: list[str], *, empty: str = "- (none)") -> str:
    """Render short strings as a markdown bullet list."""
    return "\n".join(f"- {item}" for item in items) if items else empty


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Builds a request, calls the provider and parses a typed result.

    ``run`` never raises for provider or parse failures; they are returned as
    ``AgentResult(success=False)``. Cancellation still propagates.
    """

    def __init__(self, *, call_settings: AgentCallSettings) -> None:
        self._call_settings = call_settings
        self._agent_name = self.__class__.__name__
        self._logger = logging.getLogger(f"{__name__}.{self._agent_name}")

    async def run(self, provider: GenerationProvider, agent_input: InputT) -> AgentResult[OutputT]:
        """Run the agent once against the provider."""
        started_at = time.perf_counter()
        try:
            request = self.build_request(agent_input)
            self._logger.info(
                "Calling provider: system_chars=%d user_chars=%d temperature=%s",
                len(request.system_instructions),
                len(request.user_instructions),
                request.temperature,
            )
            response = await provider.call(request)
            data = self.parse_response(response, agent_input)
        except Exception as exc:
            elapsed = time.perf_counter() - started_at
            self._logger.warning("%s failed after %.1fs — %s: %s", self._agent_name, elapsed, type(exc).__name__, exc)
            return AgentResult(success=False, error=str(exc) or type(exc).__name__, duration_seconds=elapsed)

        elapsed = time.perf_counter() - started_at
        self._logger.info("%s completed in %.1fs", self._agent_name, elapsed)
        return AgentResult(success=True, data=data, duration_seconds=elapsed)

    @abstractmethod
    def build_request(self, agent_input: InputT) -> GenerationRequest:
        """Build the provider request for one invocation."""

    @abstractmethod
    def parse_response(self, response: str, agent_input: InputT) -> OutputT:
        """Parse the raw provider text into the agent's typed result."""

    def _request(self, *, system_instructions: str, user_instructions: str) -> GenerationRequest:
        return GenerationRequest(
            system_instructions=system_instructions,
            user_instructions=user_instructions,
            temperature=self._call_settings.temperature,
            max_tokens=self._call_settings.max_tokens,
            agent_name=self._agent_name,
        )

    def _parse_json_response(self, response: str, model_class: type[PayloadT]) -> PayloadT:
        """Parse and validate JSON output, stripping markdown fences when present."""
        text = response.strip()
        if text.startswith("```"):
            text = text[7:] if text.startswith("```json") else text[3:]
            text = text.rsplit("```", 1)[0].strip()
        self._logger.debug("Parsing JSON response into %s (chars=%d)", model_class.__name__, len(text))
        return model_class.model_validate_json(text)

"""Context window budgeting for agent generation requests."""

from __future__ import annotations

from dataclasses import dataclass

import tiktoken

from content_pipeline.models import GenerationRequest

# Role tags and separators added around the system and user turns.
_CHAT_FRAMING_TOKENS = 10


@dataclass(frozen=True)
class RequestSize:
    """Token footprint of one generation request."""

    system_tokens: int
    user_tokens: int
    completion_tokens: int

    @property
    def prompt_tokens(self) -> int:
        return self.system_tokens + self.user_tokens + _CHAT_FRAMING_TOKENS

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class RequestTooLargeError(ValueError):
    """Raised when an agent request cannot fit the allowed share of the context window."""

    def __init__(self, agent_name: str, size: RequestSize, limit_tokens: int, context_window: int) -> None:
        self.agent_name = agent_name
        self.size = size
        self.limit_tokens = limit_tokens
        self.context_window = context_window
        larger_part = "user instructions" if size.user_tokens >= size.system_tokens else "system instructions"
        super().__init__(
            f"{agent_name} request needs {size.prompt_tokens:,} prompt tokens plus "
            f"{size.completion_tokens:,} completion tokens, over the {limit_tokens:,} token limit "
            f"of a {context_window:,} token context window (largest part: {larger_part})"
        )


class RequestBudget:
    """Checks agent requests against a share of the model context window.

    The completion allowance of each request is reserved up front, so a long
    research brief cannot starve the draft it is asking for.
    """

    def __init__(self, *, context_window: int, threshold_percent: int, encoding_name: str = "o200k_base") -> None:
        self._context_window = context_window
        self._limit_tokens = context_window * threshold_percent // 100
        self._encoding = tiktoken.get_encoding(encoding_name)

    @property
    def limit_tokens(self) -> int:
        return self._limit_tokens

    def measure(self, request: GenerationRequest, *, default_max_tokens: int) -> RequestSize:
        """Count the tokens a request will occupy, including its completion allowance."""
        completion_tokens = request.max_tokens if request.max_tokens is not None else default_max_tokens
        return RequestSize(
            system_tokens=len(self._encoding.encode(request.system_instructions)),
            user_tokens=len(self._encoding.encode(request.user_instructions)),
            completion_tokens=completion_tokens,
        )

    def check(self, request: GenerationRequest, *, default_max_tokens: int) -> RequestSize:
        """Return the request size, or raise when it does not fit.

        Raises:
            RequestTooLargeError: If prompt plus completion allowance exceeds the limit.
        """
        size = self.measure(request, default_max_tokens=default_max_tokens)
        if size.total_tokens > self._limit_tokens:
            raise RequestTooLargeError(
                agent_name=request.agent_name or "Unnamed",
                size=size,
                limit_tokens=self._limit_tokens,
                context_window=self._context_window,
            )
        return size

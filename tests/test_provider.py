"""Tests for the litellm-backed generation provider."""

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest
import tiktoken

from content_pipeline import provider as provider_module
from content_pipeline.config import LLMConfig
from content_pipeline.models import GenerationRequest
from content_pipeline.provider import LiteLLMProvider, build_messages
from content_pipeline.request_budget import RequestTooLargeError


class _WordEncoding:
    def encode(self, text: str) -> list[str]:
        return text.split()


def _llm_config(**overrides: Any) -> LLMConfig:
    data: dict[str, Any] = {
        "model": "openai/test-model",
        "api_base": "http://127.0.0.1:1234/v1",
        "api_key_env": "TEST_PIPELINE_API_KEY",
        "context_window": 1000,
        "max_tokens": 256,
        "temperature": 0.7,
        "context_window_threshold": 90,
        "max_retries": 2,
        "retry_delay": 0.0,
        "timeout_seconds": 30,
    }
    data.update(overrides)
    return LLMConfig.model_validate(data)


def _response(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class _FakeCompletion:
    """Replays scripted outcomes and records call kwargs."""

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = outcomes
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        outcome = self._outcomes[len(self.calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return _response(outcome)


@pytest.fixture(autouse=True)
def _environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_PIPELINE_API_KEY", "secret")
    monkeypatch.setattr(tiktoken, "get_encoding", lambda name: _WordEncoding())


def _install(monkeypatch: pytest.MonkeyPatch, outcomes: list[Any]) -> _FakeCompletion:
    fake = _FakeCompletion(outcomes)
    monkeypatch.setattr(provider_module, "acompletion", fake)
    return fake


REQUEST = GenerationRequest(system_instructions="You are terse.", user_instructions="Say hi", temperature=0.3, agent_name="SEOAgent")


class TestBuildMessages:
    """Tests for build_messages."""

    def test_system_and_user(self) -> None:
        """Test that both roles are emitted in order."""
        assert build_messages(REQUEST) == [
            {"role": "system", "content": "You are terse."},
            {"role": "user", "content": "Say hi"},
        ]

    def test_empty_system_omitted(self) -> None:
        """Test that an empty system instruction is not sent."""
        request = GenerationRequest(system_instructions="", user_instructions="Say hi")
        assert build_messages(request) == [{"role": "user", "content": "Say hi"}]


class TestLiteLLMProvider:
    """Tests for LiteLLMProvider."""

    def test_missing_api_key_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing API key variable fails at construction."""
        monkeypatch.delenv("TEST_PIPELINE_API_KEY")
        with pytest.raises(KeyError, match="TEST_PIPELINE_API_KEY"):
            LiteLLMProvider(llm_config=_llm_config())

    def test_call_returns_content(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a successful call and the request hints passed to litellm."""
        fake = _install(monkeypatch, ["hello"])
        result = asyncio.run(LiteLLMProvider(llm_config=_llm_config()).call(REQUEST))

        assert result == "hello"
        kwargs = fake.calls[0]
        assert kwargs["model"] == "openai/test-model"
        assert kwargs["api_key"] == "secret"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 256
        assert kwargs["timeout"] == 30

    def test_defaults_used_without_hints(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that config defaults fill missing request hints."""
        fake = _install(monkeypatch, ["hello"])
        request = GenerationRequest(system_instructions="s", user_instructions="u", max_tokens=64)
        asyncio.run(LiteLLMProvider(llm_config=_llm_config()).call(request))
        assert fake.calls[0]["temperature"] == 0.7
        assert fake.calls[0]["max_tokens"] == 64

    def test_retries_transport_failures(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a transient failure is retried."""
        fake = _install(monkeypatch, [ConnectionError("reset"), "recovered"])
        result = asyncio.run(LiteLLMProvider(llm_config=_llm_config()).call(REQUEST))
        assert result == "recovered"
        assert len(fake.calls) == 2

    def test_retries_exhausted_reraises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the last error is raised after max_retries."""
        fake = _install(monkeypatch, [ConnectionError("one"), ConnectionError("two"), ConnectionError("three")])
        with pytest.raises(ConnectionError, match="three"):
            asyncio.run(LiteLLMProvider(llm_config=_llm_config()).call(REQUEST))
        assert len(fake.calls) == 3

    def test_empty_content_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a response without content is an error."""
        _install(monkeypatch, [None])
        with pytest.raises(ValueError, match="empty content"):
            asyncio.run(LiteLLMProvider(llm_config=_llm_config(max_retries=0)).call(REQUEST))

    def test_oversized_request_not_sent(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an agent request over the context budget is rejected before calling litellm."""
        fake = _install(monkeypatch, ["unused"])
        request = GenerationRequest(system_instructions="s", user_instructions="word " * 100, agent_name="DraftAgent")
        with pytest.raises(RequestTooLargeError, match="^DraftAgent request"):
            asyncio.run(LiteLLMProvider(llm_config=_llm_config(context_window=100)).call(request))
        assert fake.calls == []

    def test_completion_allowance_counts_against_budget(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the configured max_tokens is reserved inside the context budget."""
        fake = _install(monkeypatch, ["unused"])
        provider = LiteLLMProvider(llm_config=_llm_config(context_window=300, max_tokens=280))
        with pytest.raises(RequestTooLargeError):
            asyncio.run(provider.call(REQUEST))
        assert fake.calls == []


class TestPreflight:
    """Tests for the one-token pre-flight completion."""

    def test_preflight_sends_minimal_request(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the pre-flight asks for a single token with its own timeout."""
        fake = _install(monkeypatch, ["ok"])
        asyncio.run(LiteLLMProvider(llm_config=_llm_config()).preflight(timeout_seconds=5))

        assert len(fake.calls) == 1
        assert fake.calls[0]["max_tokens"] == 1
        assert fake.calls[0]["timeout"] == 5
        assert fake.calls[0]["api_key"] == "secret"

    def test_preflight_works_without_api_base(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that hosted models without an api_base can still be checked."""
        fake = _install(monkeypatch, ["ok"])
        asyncio.run(LiteLLMProvider(llm_config=_llm_config(api_base=None)).preflight(timeout_seconds=5))
        assert fake.calls[0]["api_base"] is None

    def test_preflight_failure_is_not_retried(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a failing pre-flight raises ConnectionError naming the model after one attempt."""
        fake = _install(monkeypatch, [PermissionError("bad key"), "unused"])
        with pytest.raises(ConnectionError, match="openai/test-model") as exc_info:
            asyncio.run(LiteLLMProvider(llm_config=_llm_config()).preflight(timeout_seconds=5))
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert len(fake.calls) == 1

"""Configuration loader for the content generation pipeline."""

from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class LLMConfig(BaseModel):
    """Configuration for the LLM connection used by the generation provider."""

    model: str = Field(
        ...,
        description="litellm model string (e.g., 'openai/gpt-4o', 'anthropic/claude-3-5-sonnet', 'openai/local-model' for LM Studio)",
    )
    api_base: str | None = Field(..., description="API base URL (for LM Studio or custom endpoints, None for standard providers)")
    api_key_env: str = Field(..., description="Environment variable name for API key")
    context_window: int = Field(..., gt=0, description="Model context window size in tokens")
    max_tokens: int = Field(..., gt=0, description="Default maximum tokens for response/completion")
    temperature: float = Field(..., ge=0.0, le=2.0, description="Default sampling temperature")
    context_window_threshold: int = Field(
        ...,
        description="Percentage threshold (0-100) for context window usage before raising an error",
        ge=0,
        le=100,
    )
    max_retries: int = Field(..., ge=0, description="Transport-level retries per provider call")
    retry_delay: float = Field(..., ge=0.0, description="Seconds to wait between transport retries")
    timeout_seconds: int = Field(..., gt=0, description="Per-request timeout in seconds")

    model_config = ConfigDict(frozen=True, extra="forbid")


class PipelineSettings(BaseModel):
    """Runtime policy for one pipeline run."""

    retry_budget: int = Field(2, ge=0, description="Additional generation attempts shared by the outline and completeness gates")
    draft_concurrency: int = Field(3, gt=0, description="Maximum number of sections drafted concurrently")
    voice_tone_threshold: int = Field(80, ge=0, le=100, description="Minimum alignment score for the voice/tone gate")
    timeout_seconds: float | None = Field(None, gt=0, description="Abort the run after this many seconds (None disables)")
    encoding_name: str = Field("o200k_base", description="tiktoken encoding used for request size validation")

    model_config = ConfigDict(frozen=True, extra="forbid")


class AgentCallSettings(BaseModel):
    """Request hints for a single stage agent."""

    temperature: float = Field(..., ge=0.0, le=2.0, description="Sampling temperature for this agent")
    max_tokens: int | None = Field(None, gt=0, description="Response size hint (None uses the LLM default)")

    model_config = ConfigDict(frozen=True, extra="forbid")


class AgentSettings(BaseModel):
    """Request hints for all five stage agents."""

    research: AgentCallSettings = Field(default_factory=lambda: AgentCallSettings(temperature=0.5))
    outline: AgentCallSettings = Field(default_factory=lambda: AgentCallSettings(temperature=0.5))
    draft: AgentCallSettings = Field(default_factory=lambda: AgentCallSettings(temperature=0.7))
    seo: AgentCallSettings = Field(default_factory=lambda: AgentCallSettings(temperature=0.3))
    voice_tone: AgentCallSettings = Field(default_factory=lambda: AgentCallSettings(temperature=0.3))

    model_config = ConfigDict(frozen=True, extra="forbid")


T = TypeVar("T", bound=BaseModel)


def _format_validation_error(error: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors())


class Config:
    """Configuration class that loads and provides access to config.yaml."""

    def __init__(self, config_path: str | Path) -> None:
        """Initialize the Config by loading the YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If required keys are missing from the config.
            ValueError: If a section is invalid or missing required fields.
        """
        self.config_path = Path(config_path)
        self._load(self.config_path)

        self._llm = self._validate_llm()
        self._pipeline = self._validate_section("pipeline", PipelineSettings)
        self._agents = self._validate_section("agents", AgentSettings)

    def _load(self, config_path: Path) -> None:
        """Load the configuration from a YAML file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            KeyError: If the file is empty.
            ValueError: If the YAML root is not a mapping.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            raise KeyError("Missing required key 'llm' in config file")
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {config_path}")

        self._data: dict[str, Any] = data

    def _validate_llm(self) -> LLMConfig:
        """Validate the required llm section.

        Raises:
            KeyError: If the llm section is missing.
            ValueError: If the llm section is invalid.
        """
        if "llm" not in self._data:
            raise KeyError("Missing required key 'llm' in config file")

        try:
            return LLMConfig.model_validate(self._data["llm"])
        except ValidationError as e:
            raise ValueError(f"LLM configuration validation failed: {_format_validation_error(e)}") from e

    def _validate_section(self, key: str, model_class: type[T]) -> T:
        """Validate an optional section, falling back to model defaults when absent.

        Raises:
            ValueError: If the section is present but invalid.
        """
        raw = self._data.get(key)
        try:
            return model_class.model_validate(raw if raw is not None else {})
        except ValidationError as e:
            raise ValueError(f"{key.capitalize()} configuration validation failed: {_format_validation_error(e)}") from e

    def get_llm_config(self) -> LLMConfig:
        """Get the LLM connection configuration."""
        return self._llm

    def get_pipeline_settings(self) -> PipelineSettings:
        """Get pipeline runtime settings."""
        return self._pipeline

    def get_agent_settings(self) -> AgentSettings:
        """Get per-agent request hints."""
        return self._agents

    def getConfigPath(self) -> Path:
        """Get the path to config.yaml."""
        return self.config_path

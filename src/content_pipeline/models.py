"""Pydantic models for the blog post generation pipeline."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Records exchanged with the provider use camelCase keys on the wire.
_PAYLOAD_CONFIG = ConfigDict(frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True)

SectionType = Literal["intro", "body", "conclusion", "cta"]
Severity = Literal["low", "medium", "high"]


class ClientProfile(BaseModel):
    """Key facts about the client and its audience."""

    product_service_summary: str = ""
    target_audience: str = ""
    key_facts: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


class MarketingContext(BaseModel):
    """Brand voice and messaging guidelines.

    Optional fields left as None fall back to ``DEFAULT_MARKETING_VALUES``.
    """

    brand_name: str
    brand_voice: list[str] | None = None
    brand_tone: str | None = None
    target_audience: str = ""
    value_proposition: str = ""
    key_messages: list[str] = Field(default_factory=list)
    content_donts: list[str] | None = None
    competitor_differentiators: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


class PipelineInput(BaseModel):
    """Immutable input for one pipeline run."""

    topic: str = Field(..., min_length=1)
    target_keyword: str | None = None
    word_count_goal: int = Field(..., gt=0)
    client_profile: ClientProfile = Field(default_factory=ClientProfile)
    marketing_context: MarketingContext | None = None
    reference_id: str | None = Field(None, description="Caller bookkeeping identifier, only used in log labels")

    model_config = ConfigDict(frozen=True, extra="forbid")


class GenerationRequest(BaseModel):
    """A single request to the generation provider."""

    system_instructions: str
    user_instructions: str
    temperature: float | None = None
    max_tokens: int | None = None
    agent_name: str | None = Field(None, description="Agent that built the request, for diagnostics")

    model_config = ConfigDict(frozen=True, extra="forbid")


class ResearchData(BaseModel):
    """Background research gathered for a topic."""

    pain_points: list[str] = Field(default_factory=list)
    key_facts: list[str] = Field(default_factory=list)
    differentiators: list[str] = Field(default_factory=list)
    related_subtopics: list[str] = Field(default_factory=list)
    suggested_angles: list[str] = Field(default_factory=list)

    model_config = _PAYLOAD_CONFIG


class OutlineSection(BaseModel):
    """A single planned section of the post."""

    key: str = Field(..., min_length=1)
    title: str
    type: SectionType
    key_points: list[str] = Field(default_factory=list)
    estimated_words: int = Field(..., ge=0)

    model_config = _PAYLOAD_CONFIG


class Outline(BaseModel):
    """Ordered section plan for the post."""

    sections: list[OutlineSection]
    total_estimated_words: int = Field(0, ge=0)

    model_config = _PAYLOAD_CONFIG


class DraftResponse(BaseModel):
    """Raw draft agent payload."""

    content: str
    word_count: int | None = None

    model_config = _PAYLOAD_CONFIG


class SectionContent(BaseModel):
    """A realized outline section."""

    key: str
    content: str
    word_count: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class SEOMetadata(BaseModel):
    """Search metadata generated for the finished draft."""

    title: str
    meta_description: str
    slug: str
    og_title: str | None = None
    og_description: str | None = None
    suggestions: list[str] = Field(default_factory=list)
    keyword_density: float = Field(..., ge=0.0)
    readability_score: str = "Good"

    model_config = _PAYLOAD_CONFIG


class VoiceToneIssue(BaseModel):
    """A single brand voice violation."""

    section_key: str | None = None
    issue: str
    suggestion: str = ""
    severity: Severity

    model_config = _PAYLOAD_CONFIG


class VoiceToneReport(BaseModel):
    """Brand voice audit of the finished draft."""

    alignment_score: int = Field(..., ge=0, le=100)
    issues: list[VoiceToneIssue] = Field(default_factory=list)
    overall_feedback: str = ""
    passed: bool = False

    model_config = _PAYLOAD_CONFIG


class QualityGateResult(BaseModel):
    """Uniform verdict returned by every quality gate."""

    passed: bool
    score: int = Field(..., ge=0, le=100)
    issues: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


T = TypeVar("T")


class AgentResult(BaseModel, Generic[T]):
    """Outcome of one agent run; never raised, always returned."""

    success: bool
    data: T | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    model_config = ConfigDict(frozen=True, extra="forbid")


PipelineStageName = Literal["researching", "outlining", "drafting", "seo_optimizing", "voice_auditing", "succeeded", "failed"]


class PipelineResult(BaseModel):
    """Complete pipeline result, returned once at termination."""

    success: bool
    error: str | None = None
    research: ResearchData | None = None
    outline: Outline | None = None
    sections: list[SectionContent] = Field(default_factory=list)
    full_draft: str | None = None
    seo_metadata: SEOMetadata | None = None
    voice_tone_report: VoiceToneReport | None = None
    quality_gates: dict[str, QualityGateResult] = Field(default_factory=dict)
    retry_count: int = Field(0, ge=0)
    final_stage: PipelineStageName

    model_config = ConfigDict(frozen=True, extra="forbid")

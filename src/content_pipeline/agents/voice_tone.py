"""Voice/tone agent auditing the draft against the brand voice."""

from pydantic import BaseModel, ConfigDict

from content_pipeline import prompts
from content_pipeline.agents.base import BaseAgent, format_bullets
from content_pipeline.config import AgentCallSettings
from content_pipeline.marketing import resolve_brand_tone, resolve_brand_voice, resolve_content_donts
from content_pipeline.models import GenerationRequest, MarketingContext, VoiceToneIssue, VoiceToneReport

# Upper bound on reviewed draft characters; instructions are never truncated.
VOICE_TONE_CONTENT_CHAR_LIMIT = 3000


class VoiceToneInput(BaseModel):
    """Input for the voice/tone agent."""

    full_draft: str
    marketing_context: MarketingContext | None
    section_contents: dict[str, str]

    model_config = ConfigDict(frozen=True, extra="forbid")


class VoiceToneAgent(BaseAgent[VoiceToneInput, VoiceToneReport]):
    """Scores brand voice alignment and lists violations."""

    def __init__(self, *, call_settings: AgentCallSettings, threshold: int = 80) -> None:
        super().__init__(call_settings=call_settings)
        self._threshold = threshold

    def build_request(self, agent_input: VoiceToneInput) -> GenerationRequest:
        context = agent_input.marketing_context
        user_prompt = prompts.VOICE_TONE_USER_PROMPT_TEMPLATE.format(
            brand_voice=", ".join(resolve_brand_voice(context)),
            brand_tone=resolve_brand_tone(context),
            content_donts=format_bullets(resolve_content_donts(context)),
            section_keys=", ".join(agent_input.section_contents) or "(none)",
            content=truncate_content(agent_input.full_draft),
            threshold=self._threshold,
        )
        return self._request(system_instructions=prompts.VOICE_TONE_SYSTEM_PROMPT, user_instructions=user_prompt)

    def parse_response(self, response: str, agent_input: VoiceToneInput) -> VoiceToneReport:
        report = self._parse_json_response(response, VoiceToneReport)
        self._logger.info(
            "Voice/tone parsed: alignment_score=%d issues=%d high=%d",
            report.alignment_score,
            len(report.issues),
            len(get_high_severity_issues(report.issues)),
        )
        return report


def truncate_content(content: str, limit: int = VOICE_TONE_CONTENT_CHAR_LIMIT) -> str:
    """Cut reviewed content down to ``limit`` characters."""
    return content if len(content) <= limit else content[:limit]


def get_high_severity_issues(issues: list[VoiceToneIssue]) -> list[VoiceToneIssue]:
    """Return only the high-severity issues."""
    return [issue for issue in issues if issue.severity == "high"]

"""Research agent gathering background insights for a topic."""

from pydantic import BaseModel, ConfigDict

from content_pipeline import prompts
from content_pipeline.agents.base import BaseAgent, format_bullets
from content_pipeline.marketing import resolve_brand_tone, resolve_brand_voice
from content_pipeline.models import ClientProfile, GenerationRequest, MarketingContext, ResearchData


class ResearchInput(BaseModel):
    """Input for the research agent."""

    topic: str
    target_keyword: str | None
    client_profile: ClientProfile
    marketing_context: MarketingContext | None

    model_config = ConfigDict(frozen=True, extra="forbid")


class ResearchAgent(BaseAgent[ResearchInput, ResearchData]):
    """Gathers pain points, facts, differentiators and angles for a topic."""

    def build_request(self, agent_input: ResearchInput) -> GenerationRequest:
        user_prompt = prompts.RESEARCH_USER_PROMPT_TEMPLATE.format(
            topic=agent_input.topic,
            target_keyword=agent_input.target_keyword or agent_input.topic,
            product_service_summary=agent_input.client_profile.product_service_summary,
            target_audience=agent_input.client_profile.target_audience,
            client_key_facts=format_bullets(agent_input.client_profile.key_facts),
            brand_voice=", ".join(resolve_brand_voice(agent_input.marketing_context)),
            brand_tone=resolve_brand_tone(agent_input.marketing_context),
        )
        return self._request(system_instructions=prompts.RESEARCH_SYSTEM_PROMPT, user_instructions=user_prompt)

    def parse_response(self, response: str, agent_input: ResearchInput) -> ResearchData:
        research = self._parse_json_response(response, ResearchData)
        self._logger.info(
            "Research parsed: pain_points=%d key_facts=%d angles=%d",
            len(research.pain_points),
            len(research.key_facts),
            len(research.suggested_angles),
        )
        return research

"""Outline agent planning the post structure."""

from pydantic import BaseModel, ConfigDict

from content_pipeline import prompts
from content_pipeline.agents.base import BaseAgent, format_list
from content_pipeline.marketing import resolve_brand_tone
from content_pipeline.models import ClientProfile, GenerationRequest, MarketingContext, Outline, ResearchData


class OutlineInput(BaseModel):
    """Input for the outline agent."""

    topic: str
    target_keyword: str | None
    research: ResearchData
    client_profile: ClientProfile
    marketing_context: MarketingContext | None
    word_count_goal: int

    model_config = ConfigDict(frozen=True, extra="forbid")


class OutlineAgent(BaseAgent[OutlineInput, Outline]):
    """Turns research into an ordered section plan sized to the word-count goal."""

    def build_request(self, agent_input: OutlineInput) -> GenerationRequest:
        research = agent_input.research
        user_prompt = prompts.OUTLINE_USER_PROMPT_TEMPLATE.format(
            topic=agent_input.topic,
            target_keyword=agent_input.target_keyword or agent_input.topic,
            word_count_goal=agent_input.word_count_goal,
            product_service_summary=agent_input.client_profile.product_service_summary,
            target_audience=agent_input.client_profile.target_audience,
            brand_tone=resolve_brand_tone(agent_input.marketing_context),
            pain_points=format_list(research.pain_points),
            key_facts=format_list(research.key_facts),
            differentiators=format_list(research.differentiators),
            related_subtopics=format_list(research.related_subtopics),
            suggested_angles=format_list(research.suggested_angles),
        )
        return self._request(system_instructions=prompts.OUTLINE_SYSTEM_PROMPT, user_instructions=user_prompt)

    def parse_response(self, response: str, agent_input: OutlineInput) -> Outline:
        outline = self._parse_json_response(response, Outline)
        if outline.total_estimated_words == 0 and outline.sections:
            outline = outline.model_copy(update={"total_estimated_words": sum(s.estimated_words for s in outline.sections)})
        self._logger.info(
            "Outline parsed: sections=%d total_estimated_words=%d goal=%d",
            len(outline.sections),
            outline.total_estimated_words,
            agent_input.word_count_goal,
        )
        return outline

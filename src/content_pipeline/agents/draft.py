"""Draft agent writing one outline section."""

from pydantic import BaseModel, ConfigDict

from content_pipeline import prompts
from content_pipeline.agents.base import BaseAgent, format_bullets, format_list
from content_pipeline.marketing import resolve_brand_tone, resolve_brand_voice, resolve_content_donts
from content_pipeline.models import (
    ClientProfile,
    DraftResponse,
    GenerationRequest,
    MarketingContext,
    OutlineSection,
    ResearchData,
    SectionContent,
)
from content_pipeline.quality_gates import count_words


class DraftInput(BaseModel):
    """Input for drafting a single section."""

    topic: str
    target_keyword: str | None
    section: OutlineSection
    research: ResearchData
    client_profile: ClientProfile
    marketing_context: MarketingContext | None

    model_config = ConfigDict(frozen=True, extra="forbid")


class DraftAgent(BaseAgent[DraftInput, SectionContent]):
    """Writes the content of one outline section in the brand voice."""

    def build_request(self, agent_input: DraftInput) -> GenerationRequest:
        section = agent_input.section
        context = agent_input.marketing_context
        user_prompt = prompts.DRAFT_USER_PROMPT_TEMPLATE.format(
            topic=agent_input.topic,
            section_title=section.title,
            section_type=section.type,
            key_points=format_bullets(section.key_points),
            estimated_words=section.estimated_words,
            target_keyword=agent_input.target_keyword or agent_input.topic,
            product_service_summary=agent_input.client_profile.product_service_summary,
            target_audience=agent_input.client_profile.target_audience,
            key_facts=format_list(agent_input.research.key_facts),
            pain_points=format_list(agent_input.research.pain_points),
            brand_voice=", ".join(resolve_brand_voice(context)),
            brand_tone=resolve_brand_tone(context),
            content_donts=format_bullets(resolve_content_donts(context)),
        )
        return self._request(system_instructions=prompts.DRAFT_SYSTEM_PROMPT, user_instructions=user_prompt)

    def parse_response(self, response: str, agent_input: DraftInput) -> SectionContent:
        draft = self._parse_json_response(response, DraftResponse)
        word_count = count_words(draft.content)
        if draft.word_count is not None and draft.word_count != word_count:
            self._logger.debug(
                "Section %s reported %d words, counted %d",
                agent_input.section.key,
                draft.word_count,
                word_count,
            )
        return SectionContent(key=agent_input.section.key, content=draft.content, word_count=word_count)


def combine_sections(sections: list[SectionContent]) -> str:
    """Combine drafted sections into a full draft, preserving their order."""
    return "\n\n".join(section.content for section in sections)

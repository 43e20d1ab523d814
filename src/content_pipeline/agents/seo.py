"""SEO agent producing search metadata for the finished draft."""

from pydantic import BaseModel, ConfigDict

from content_pipeline import prompts
from content_pipeline.agents.base import BaseAgent
from content_pipeline.models import GenerationRequest, SEOMetadata

SEO_CONTENT_CHAR_LIMIT = 2000


class SEOInput(BaseModel):
    """Input for the SEO agent."""

    full_draft: str
    topic: str
    target_keyword: str | None

    model_config = ConfigDict(frozen=True, extra="forbid")


class SEOAgent(BaseAgent[SEOInput, SEOMetadata]):
    """Generates title, meta description, slug and keyword metrics."""

    def build_request(self, agent_input: SEOInput) -> GenerationRequest:
        content = agent_input.full_draft
        if len(content) > SEO_CONTENT_CHAR_LIMIT:
            content = content[:SEO_CONTENT_CHAR_LIMIT] + "... [truncated]"
        user_prompt = prompts.SEO_USER_PROMPT_TEMPLATE.format(
            topic=agent_input.topic,
            target_keyword=agent_input.target_keyword or agent_input.topic,
            content=content,
        )
        return self._request(system_instructions=prompts.SEO_SYSTEM_PROMPT, user_instructions=user_prompt)

    def parse_response(self, response: str, agent_input: SEOInput) -> SEOMetadata:
        seo = self._parse_json_response(response, SEOMetadata)
        self._logger.info("SEO parsed: title=%r slug=%s keyword_density=%.2f", seo.title, seo.slug, seo.keyword_density)
        return seo

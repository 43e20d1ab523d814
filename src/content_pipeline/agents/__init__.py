"""Stage agents for the blog post generation pipeline."""

from content_pipeline.agents.base import BaseAgent
from content_pipeline.agents.draft import DraftAgent, DraftInput, combine_sections
from content_pipeline.agents.outline import OutlineAgent, OutlineInput
from content_pipeline.agents.research import ResearchAgent, ResearchInput
from content_pipeline.agents.seo import SEOAgent, SEOInput
from content_pipeline.agents.voice_tone import VoiceToneAgent, VoiceToneInput, get_high_severity_issues

__all__ = [
    "BaseAgent",
    "ResearchAgent",
    "ResearchInput",
    "OutlineAgent",
    "OutlineInput",
    "DraftAgent",
    "DraftInput",
    "SEOAgent",
    "SEOInput",
    "VoiceToneAgent",
    "VoiceToneInput",
    "combine_sections",
    "get_high_severity_issues",
]

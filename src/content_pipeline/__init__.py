"""Multi-stage blog post generation pipeline."""

from content_pipeline.models import PipelineInput, PipelineResult
from content_pipeline.orchestrator import PipelineOrchestrator, PipelineStage, run_pipeline
from content_pipeline.provider import GenerationProvider, LiteLLMProvider

__all__ = [
    "GenerationProvider",
    "LiteLLMProvider",
    "PipelineInput",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineStage",
    "run_pipeline",
]

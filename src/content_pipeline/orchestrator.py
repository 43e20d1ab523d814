"""Pipeline orchestrator: an explicit state machine over the five stage agents."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from content_pipeline.agents import (
    DraftAgent,
    DraftInput,
    OutlineAgent,
    OutlineInput,
    ResearchAgent,
    ResearchInput,
    SEOAgent,
    SEOInput,
    VoiceToneAgent,
    VoiceToneInput,
    combine_sections,
)
from content_pipeline.config import AgentSettings, PipelineSettings
from content_pipeline.models import (
    Outline,
    OutlineSection,
    PipelineInput,
    PipelineResult,
    QualityGateResult,
    ResearchData,
    SectionContent,
    SEOMetadata,
    VoiceToneReport,
)
from content_pipeline.provider import GenerationProvider
from content_pipeline.quality_gates import (
    COMPLETENESS_MAX_PERCENT,
    COMPLETENESS_MIN_PERCENT,
    find_incomplete_sections,
    validate_completeness,
    validate_outline,
    validate_research,
    validate_seo,
    validate_voice_tone,
)

logger = logging.getLogger(__name__)

CANCELLED_ERROR = "cancelled"


class PipelineStage(str, Enum):
    """States of the pipeline state machine."""

    RESEARCHING = "researching"
    OUTLINING = "outlining"
    DRAFTING = "drafting"
    SEO_OPTIMIZING = "seo_optimizing"
    VOICE_AUDITING = "voice_auditing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({PipelineStage.SUCCEEDED, PipelineStage.FAILED})


@dataclass
class PipelineState:
    """Mutable accumulator owned by the orchestrator for one run.

    ``redraft_indices`` holds the outline positions to regenerate on the next
    drafting pass; None means every section.
    """

    stage: PipelineStage = PipelineStage.RESEARCHING
    retry_count: int = 0
    error: str | None = None
    research: ResearchData | None = None
    outline: Outline | None = None
    sections: list[SectionContent] = field(default_factory=list)
    redraft_indices: list[int] | None = None
    full_draft: str | None = None
    seo_metadata: SEOMetadata | None = None
    voice_tone_report: VoiceToneReport | None = None
    quality_gates: dict[str, QualityGateResult] = field(default_factory=dict)


StageHandler = Callable[[PipelineInput, PipelineState, str], Awaitable[None]]


class PipelineOrchestrator:
    """Runs research, outline, drafting, SEO and voice/tone stages with gated retries."""

    def __init__(
        self,
        *,
        provider: GenerationProvider,
        settings: PipelineSettings,
        agent_settings: AgentSettings,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._research_agent = ResearchAgent(call_settings=agent_settings.research)
        self._outline_agent = OutlineAgent(call_settings=agent_settings.outline)
        self._draft_agent = DraftAgent(call_settings=agent_settings.draft)
        self._seo_agent = SEOAgent(call_settings=agent_settings.seo)
        self._voice_tone_agent = VoiceToneAgent(
            call_settings=agent_settings.voice_tone,
            threshold=settings.voice_tone_threshold,
        )
        self._handlers: dict[PipelineStage, StageHandler] = {
            PipelineStage.RESEARCHING: self._handle_research,
            PipelineStage.OUTLINING: self._handle_outline,
            PipelineStage.DRAFTING: self._handle_drafting,
            PipelineStage.SEO_OPTIMIZING: self._handle_seo,
            PipelineStage.VOICE_AUDITING: self._handle_voice_tone,
        }

    async def run(self, pipeline_input: PipelineInput, *, cancel_event: asyncio.Event | None = None) -> PipelineResult:
        """Run the pipeline to a terminal state.

        Args:
            pipeline_input: The post brief.
            cancel_event: Optional token; setting it aborts in-flight provider calls.

        Returns:
            The pipeline result. Failures are reported through ``success`` and
            ``error`` rather than raised.
        """
        run_label = pipeline_input.reference_id or pipeline_input.topic
        state = PipelineState()

        stage_task = asyncio.ensure_future(self._run_stages(pipeline_input, state, run_label))
        waiters: set[asyncio.Future[Any]] = {stage_task}
        cancel_task: asyncio.Future[Any] | None = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=self._settings.timeout_seconds, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            stage_task.cancel()
            raise
        finally:
            if cancel_task is not None:
                cancel_task.cancel()

        if stage_task not in done:
            reason = "cancel requested" if cancel_task is not None and cancel_task in done else "timeout reached"
            self._progress(run_label=run_label, message=f"Aborting in {state.stage.value}: {reason}")
            stage_task.cancel()
            await asyncio.wait({stage_task})
            return PipelineResult(
                success=False,
                error=CANCELLED_ERROR,
                retry_count=state.retry_count,
                final_stage=PipelineStage.FAILED.value,
            )

        try:
            stage_task.result()
        except Exception as exc:
            logger.exception("[%s] Pipeline failed with unexpected exception", run_label)
            state.stage = PipelineStage.FAILED
            state.error = f"Pipeline error: {exc}"

        return self._build_result(state)

    async def _run_stages(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        self._progress(run_label=run_label, message=f"Starting pipeline (goal={pipeline_input.word_count_goal} words)")
        while state.stage not in TERMINAL_STAGES:
            handler = self._handlers[state.stage]
            await handler(pipeline_input, state, run_label)
        self._progress(
            run_label=run_label,
            message=f"Finished in {state.stage.value} with {state.retry_count} retries"
            + (f": {state.error}" if state.error else ""),
        )

    async def _handle_research(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        self._progress(run_label=run_label, message="Researching topic")
        result = await self._research_agent.run(
            self._provider,
            ResearchInput(
                topic=pipeline_input.topic,
                target_keyword=pipeline_input.target_keyword,
                client_profile=pipeline_input.client_profile,
                marketing_context=pipeline_input.marketing_context,
            ),
        )
        if not result.success or result.data is None:
            state.error = f"Research failed: {result.error}"
            state.stage = PipelineStage.FAILED
            return

        state.research = result.data
        research_gate = validate_research(result.data)
        state.quality_gates["research"] = research_gate
        if not research_gate.passed:
            self._progress(run_label=run_label, message=f"Research gaps: {'; '.join(research_gate.issues)}")
        state.stage = PipelineStage.OUTLINING

    async def _handle_outline(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        if state.research is None:
            self._fail_missing(state, "Outline requires research data")
            return
        self._progress(run_label=run_label, message=f"Generating outline (attempt {state.retry_count + 1})")
        result = await self._outline_agent.run(
            self._provider,
            OutlineInput(
                topic=pipeline_input.topic,
                target_keyword=pipeline_input.target_keyword,
                research=state.research,
                client_profile=pipeline_input.client_profile,
                marketing_context=pipeline_input.marketing_context,
                word_count_goal=pipeline_input.word_count_goal,
            ),
        )
        if result.success and result.data is not None:
            state.outline = result.data
            gate = validate_outline(result.data, pipeline_input.word_count_goal)
        else:
            gate = QualityGateResult(passed=False, score=0, issues=[f"Outline agent failed: {result.error}"])
        state.quality_gates["outline"] = gate

        if gate.passed:
            self._progress(run_label=run_label, message=f"Outline passed with score {gate.score}")
            state.stage = PipelineStage.DRAFTING
            return

        self._progress(run_label=run_label, message=f"Outline gate failed: {'; '.join(gate.issues)}")
        self._consume_retry(state, gate_name="Outline", gate=gate, run_label=run_label)

    async def _handle_drafting(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        if state.outline is None or state.research is None:
            self._fail_missing(state, "Drafting requires research data and an outline")
            return
        outline_sections = state.outline.sections
        indices = state.redraft_indices if state.redraft_indices is not None else list(range(len(outline_sections)))
        self._progress(run_label=run_label, message=f"Drafting {len(indices)} of {len(outline_sections)} sections")

        drafted = await self._draft_sections(
            pipeline_input=pipeline_input,
            research=state.research,
            sections=[outline_sections[index] for index in indices],
        )

        # Merge worker results back in outline order.
        merged = list(state.sections) if len(state.sections) == len(outline_sections) else [
            SectionContent(key=section.key, content="", word_count=0) for section in outline_sections
        ]
        for index, section_content in zip(indices, drafted, strict=True):
            merged[index] = section_content
        state.sections = merged
        state.full_draft = combine_sections(merged)

        gate = validate_completeness(merged, pipeline_input.word_count_goal)
        state.quality_gates["completeness"] = gate
        if gate.passed:
            self._progress(run_label=run_label, message=f"Completeness passed with score {gate.score}")
            state.redraft_indices = None
            state.stage = PipelineStage.SEO_OPTIMIZING
            return

        self._progress(run_label=run_label, message=f"Completeness gate failed: {'; '.join(gate.issues)}")
        if self._consume_retry(state, gate_name="Completeness", gate=gate, run_label=run_label):
            state.redraft_indices = select_redraft_indices(outline_sections, merged)

    async def _draft_sections(
        self,
        *,
        pipeline_input: PipelineInput,
        research: ResearchData,
        sections: list[OutlineSection],
    ) -> list[SectionContent]:
        """Draft sections concurrently, bounded by ``draft_concurrency``; results keep input order."""
        semaphore = asyncio.Semaphore(self._settings.draft_concurrency)

        async def draft_one(section: OutlineSection) -> SectionContent:
            async with semaphore:
                result = await self._draft_agent.run(
                    self._provider,
                    DraftInput(
                        topic=pipeline_input.topic,
                        target_keyword=pipeline_input.target_keyword,
                        section=section,
                        research=research,
                        client_profile=pipeline_input.client_profile,
                        marketing_context=pipeline_input.marketing_context,
                    ),
                )
            if result.success and result.data is not None:
                return result.data
            logger.warning("Draft for section %s failed: %s", section.key, result.error)
            return SectionContent(key=section.key, content="", word_count=0)

        return list(await asyncio.gather(*(draft_one(section) for section in sections)))

    async def _handle_seo(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        self._progress(run_label=run_label, message="Generating SEO metadata")
        result = await self._seo_agent.run(
            self._provider,
            SEOInput(
                full_draft=state.full_draft or "",
                topic=pipeline_input.topic,
                target_keyword=pipeline_input.target_keyword,
            ),
        )
        if result.success and result.data is not None:
            state.seo_metadata = result.data
            gate = validate_seo(result.data)
        else:
            gate = QualityGateResult(passed=False, score=0, issues=[f"SEO agent failed: {result.error}"])
        state.quality_gates["seo"] = gate
        if not gate.passed:
            self._progress(run_label=run_label, message=f"SEO gate failed (advisory): {'; '.join(gate.issues)}")
        state.stage = PipelineStage.VOICE_AUDITING

    async def _handle_voice_tone(self, pipeline_input: PipelineInput, state: PipelineState, run_label: str) -> None:
        self._progress(run_label=run_label, message="Auditing brand voice")
        result = await self._voice_tone_agent.run(
            self._provider,
            VoiceToneInput(
                full_draft=state.full_draft or "",
                marketing_context=pipeline_input.marketing_context,
                section_contents={section.key: section.content for section in state.sections},
            ),
        )
        if result.success and result.data is not None:
            state.voice_tone_report = result.data
            gate = validate_voice_tone(result.data, threshold=self._settings.voice_tone_threshold)
        else:
            gate = QualityGateResult(passed=False, score=0, issues=[f"Voice/tone agent failed: {result.error}"])
        state.quality_gates["voice_tone"] = gate
        if not gate.passed:
            self._progress(run_label=run_label, message=f"Voice/tone gate failed (advisory): {'; '.join(gate.issues)}")
        state.stage = PipelineStage.SUCCEEDED

    @staticmethod
    def _fail_missing(state: PipelineState, error: str) -> None:
        state.error = error
        state.stage = PipelineStage.FAILED

    def _consume_retry(self, state: PipelineState, *, gate_name: str, gate: QualityGateResult, run_label: str) -> bool:
        """Spend one retry from the shared budget, or fail the pipeline when it is exhausted.

        Returns:
            True when a retry was granted and the current stage should run again.
        """
        if state.retry_count >= self._settings.retry_budget:
            state.error = f"{gate_name} quality gate failed after {state.retry_count} retries: {'; '.join(gate.issues)}"
            state.stage = PipelineStage.FAILED
            return False

        state.retry_count += 1
        self._progress(
            run_label=run_label,
            message=f"Retrying {gate_name.lower()} ({state.retry_count}/{self._settings.retry_budget})",
        )
        return True

    def _build_result(self, state: PipelineState) -> PipelineResult:
        return PipelineResult(
            success=state.stage is PipelineStage.SUCCEEDED,
            error=state.error,
            research=state.research,
            outline=state.outline,
            sections=state.sections,
            full_draft=state.full_draft,
            seo_metadata=state.seo_metadata,
            voice_tone_report=state.voice_tone_report,
            quality_gates=dict(state.quality_gates),
            retry_count=state.retry_count,
            final_stage=state.stage.value,
        )

    def _progress(self, *, run_label: str, message: str) -> None:
        """Emit pipeline progress updates."""
        logger.info("[%s] %s", run_label, message)


def select_redraft_indices(outline_sections: list[OutlineSection], sections: list[SectionContent]) -> list[int]:
    """Pick the sections to regenerate after a failed completeness check.

    Empty or too-short sections are chosen first. Otherwise sections that
    drifted outside 80%-120% of their own estimate, and failing that, all.
    """
    flagged = set(find_incomplete_sections(sections))
    indices = [index for index, section in enumerate(sections) if section.key in flagged]
    if indices:
        return indices

    indices = [
        index
        for index, (planned, section) in enumerate(zip(outline_sections, sections, strict=True))
        if planned.estimated_words > 0
        and not (
            planned.estimated_words * COMPLETENESS_MIN_PERCENT
            <= section.word_count * 100
            <= planned.estimated_words * COMPLETENESS_MAX_PERCENT
        )
    ]
    return indices or list(range(len(sections)))


async def run_pipeline(
    provider: GenerationProvider,
    pipeline_input: PipelineInput,
    *,
    settings: PipelineSettings | None = None,
    agent_settings: AgentSettings | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PipelineResult:
    """Run the blog post generation pipeline once.

    Args:
        provider: Any object satisfying the ``GenerationProvider`` protocol.
        pipeline_input: The post brief.
        settings: Retry budget, concurrency, threshold and timeout (defaults when None).
        agent_settings: Per-agent request hints (defaults when None).
        cancel_event: Optional cancellation token.

    Returns:
        The final ``PipelineResult``; never raises for stage failures.
    """
    orchestrator = PipelineOrchestrator(
        provider=provider,
        settings=settings or PipelineSettings(),
        agent_settings=agent_settings or AgentSettings(),
    )
    return await orchestrator.run(pipeline_input, cancel_event=cancel_event)

#!/usr/bin/env python3
"""Generate blog posts from brief files with the multi-stage content pipeline."""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

from content_pipeline.brief_loader import load_brief
from content_pipeline.config import Config
from content_pipeline.orchestrator import run_pipeline
from content_pipeline.provider import LiteLLMProvider

logger = logging.getLogger(__name__)

_BRIEF_SUFFIXES = {".yaml", ".yml", ".json"}


def _collect_briefs(brief_path: Path) -> list[Path]:
    if brief_path.is_dir():
        return sorted(path for path in brief_path.iterdir() if path.suffix.lower() in _BRIEF_SUFFIXES and not path.name.startswith("."))
    return [brief_path]


def process_brief(
    *,
    brief_path: Path,
    output_dir: Path,
    provider: LiteLLMProvider,
    config: Config,
) -> bool:
    """Run the pipeline for a single brief and write the result JSON."""
    try:
        started_at = time.perf_counter()
        logger.info("Loading brief: %s", brief_path)
        pipeline_input = load_brief(brief_path)
        if pipeline_input.reference_id is None:
            pipeline_input = pipeline_input.model_copy(update={"reference_id": brief_path.stem})

        result = asyncio.run(
            run_pipeline(
                provider,
                pipeline_input,
                settings=config.get_pipeline_settings(),
                agent_settings=config.get_agent_settings(),
            )
        )

        output_path = output_dir / f"{brief_path.stem}.json"
        with open(output_path, "w", encoding="utf-8") as handle:
            json.dump(result.model_dump(mode="json", by_alias=True), handle, indent=2, ensure_ascii=False)

        elapsed_seconds = time.perf_counter() - started_at
        if result.success:
            logger.info("Post generated: %s -> %s (%.1fs, retries=%d)", brief_path.name, output_path, elapsed_seconds, result.retry_count)
            return True

        logger.error("Generation failed: %s — %s (%.1fs)", brief_path.name, result.error, elapsed_seconds)
        return False

    except Exception as exc:
        logger.exception("Unexpected error processing brief %s: %s", brief_path, exc)
        return False


def main() -> int:
    """Run the blog post generation pipeline."""
    parser = argparse.ArgumentParser(description="Generate blog posts from brief files using the content pipeline")
    parser.add_argument("brief", type=Path, help="Brief file (.yaml/.yml/.json) or a directory of briefs")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(__file__).parent.parent / "config" / "config.yaml",
        help="Path to config.yaml",
    )
    parser.add_argument("--output-dir", type=Path, default=Path("output"), help="Directory for result JSON files")
    parser.add_argument("--skip-preflight", action="store_true", help="Skip the one-token LLM pre-flight completion")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger.info("=== Content Pipeline ===")

    logger.info("Loading configuration from %s", args.config)
    try:
        config = Config(args.config)
        llm_config = config.get_llm_config()
        settings = config.get_pipeline_settings()
    except Exception as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    logger.info(
        "Configuration loaded: model=%s retry_budget=%d draft_concurrency=%d voice_tone_threshold=%d",
        llm_config.model,
        settings.retry_budget,
        settings.draft_concurrency,
        settings.voice_tone_threshold,
    )

    try:
        provider = LiteLLMProvider(llm_config=llm_config, encoding_name=settings.encoding_name)
    except KeyError as exc:
        logger.error("Failed to initialize provider: %s", exc)
        return 1

    if not args.skip_preflight:
        logger.info("Running pre-flight completion...")
        try:
            asyncio.run(provider.preflight(timeout_seconds=10))
        except ConnectionError as exc:
            logger.error("Pre-flight check FAILED: %s", exc)
            return 1
        logger.info("Pre-flight check passed")

    if not args.brief.exists():
        logger.error("Brief path does not exist: %s", args.brief)
        return 1

    brief_paths = _collect_briefs(args.brief)
    if len(brief_paths) == 0:
        logger.error("No brief files found in %s", args.brief)
        return 1

    args.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Found %d briefs", len(brief_paths))

    success_count = 0
    failure_count = 0
    for idx, brief_path in enumerate(brief_paths, start=1):
        logger.info("[%d/%d] Processing brief: %s", idx, len(brief_paths), brief_path.name)
        if process_brief(brief_path=brief_path, output_dir=args.output_dir, provider=provider, config=config):
            success_count += 1
        else:
            failure_count += 1

    logger.info(
        "=== Generation Complete === success=%d failures=%d total=%d",
        success_count,
        failure_count,
        len(brief_paths),
    )

    return 1 if failure_count > 0 else 0


if __name__ == "__main__":
    sys.exit(main())

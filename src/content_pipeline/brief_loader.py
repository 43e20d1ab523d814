"""Loader for post brief files used by the command-line runner.

A brief is a YAML or JSON mapping with the ``PipelineInput`` fields. When the
``marketing_context`` section only names the brand, the remaining voice fields
are filled from ``DEFAULT_MARKETING_VALUES``.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from content_pipeline.marketing import create_marketing_context
from content_pipeline.models import PipelineInput

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}
_JSON_SUFFIXES = {".json"}


def _read_mapping(brief_path: Path) -> dict[str, Any]:
    suffix = brief_path.suffix.lower()
    with open(brief_path, encoding="utf-8") as handle:
        if suffix in _JSON_SUFFIXES:
            raw = json.load(handle)
        elif suffix in _YAML_SUFFIXES:
            raw = yaml.safe_load(handle)
        else:
            raise ValueError(f"Unsupported brief format '{suffix}' (expected .yaml, .yml or .json): {brief_path}")

    if not isinstance(raw, dict):
        raise ValueError(f"Brief root must be a mapping: {brief_path}")
    return raw


def load_brief(brief_path: Path, *, fill_marketing_defaults: bool = True) -> PipelineInput:
    """Load and validate a post brief.

    Args:
        brief_path: Path to a .yaml/.yml/.json brief.
        fill_marketing_defaults: Fill absent brand voice fields from the fallback table.

    Returns:
        The validated pipeline input.

    Raises:
        FileNotFoundError: If the brief does not exist.
        ValueError: If the brief is not a mapping or fails validation.
    """
    if not brief_path.exists():
        raise FileNotFoundError(f"Brief file not found: {brief_path}")

    raw = _read_mapping(brief_path)

    marketing = raw.get("marketing_context")
    if fill_marketing_defaults and isinstance(marketing, dict) and marketing.get("brand_name"):
        overrides = {key: value for key, value in marketing.items() if key != "brand_name"}
        try:
            raw = {**raw, "marketing_context": create_marketing_context(marketing["brand_name"], **overrides)}
        except ValidationError as e:
            raise ValueError(f"Invalid marketing_context in brief {brief_path}: {e}") from e

    try:
        pipeline_input = PipelineInput.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid brief {brief_path}: {e}") from e

    logger.info(
        "Loaded brief: topic=%r keyword=%r goal=%d brand=%s",
        pipeline_input.topic,
        pipeline_input.target_keyword,
        pipeline_input.word_count_goal,
        pipeline_input.marketing_context.brand_name if pipeline_input.marketing_context else "(none)",
    )
    return pipeline_input

"""Deterministic quality gates scoring pipeline artifacts.

Every gate is a pure function returning a ``QualityGateResult`` so the
orchestrator can treat them uniformly.
"""

import re

from content_pipeline.models import Outline, QualityGateResult, ResearchData, SectionContent, SEOMetadata, VoiceToneReport

OUTLINE_PASS_SCORE = 70
SEO_PASS_SCORE = 75
DEFAULT_VOICE_TONE_THRESHOLD = 80

# Outline penalties per missing section type; any missing type fails the gate.
_REQUIRED_SECTION_PENALTIES = {"intro": 40, "body": 20, "conclusion": 15, "cta": 15}
_MISSING_KEY_POINTS_PENALTY = 10
_OUTLINE_UNDERSIZED_PENALTY = 15

COMPLETENESS_MIN_PERCENT = 80
COMPLETENESS_MAX_PERCENT = 120
MIN_SECTION_WORDS = 20
_BELOW_GOAL_PENALTY = 40
_ABOVE_GOAL_PENALTY = 20
_SHORT_SECTION_PENALTY = 15

SEO_TITLE_MIN_CHARS = 30
SEO_TITLE_MAX_CHARS = 70
META_DESCRIPTION_MIN_CHARS = 100
META_DESCRIPTION_MAX_CHARS = 170
KEYWORD_DENSITY_MIN = 0.5
KEYWORD_DENSITY_MAX = 3.5
_SEO_WEIGHTS = {"title": 30, "meta_description": 30, "keyword_density": 30, "slug": 10}
_POOR_READABILITY_PENALTY = 5

# Two or more high-severity violations block the voice/tone gate at any threshold.
BLOCKING_HIGH_SEVERITY_COUNT = 2

_WORD_PATTERN = re.compile(r"[^\W_]")
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def count_words(text: str) -> int:
    """Count whitespace-delimited words that contain a letter or digit.

    Bare markdown markers such as ``##``, ``-`` or ``---`` are not counted.
    """
    return sum(1 for token in text.split() if _WORD_PATTERN.search(token))


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def validate_outline(outline: Outline, word_count_goal: int | None = None) -> QualityGateResult:
    """Validate that an outline is usable for drafting.

    Args:
        outline: The outline to check.
        word_count_goal: When given, the estimated total must reach 80% of it or the outline fails.

    Returns:
        Gate result; fails when a required section type is missing, the estimate
        falls short of the goal, or the score drops below 70.
    """
    if not outline.sections:
        return QualityGateResult(passed=False, score=0, issues=["Outline has no sections"])

    issues: list[str] = []
    score = 100
    present_types = {section.type for section in outline.sections}

    missing_types = [section_type for section_type in _REQUIRED_SECTION_PENALTIES if section_type not in present_types]
    for section_type in missing_types:
        issues.append(f"Missing {section_type} section")
        score -= _REQUIRED_SECTION_PENALTIES[section_type]

    without_key_points = [section for section in outline.sections if not section.key_points]
    if without_key_points:
        issues.append(f"{len(without_key_points)} sections missing key points")
        score -= _MISSING_KEY_POINTS_PENALTY * len(without_key_points)

    undersized = False
    if word_count_goal is not None:
        estimated_total = outline.total_estimated_words or sum(section.estimated_words for section in outline.sections)
        if estimated_total * 100 < word_count_goal * COMPLETENESS_MIN_PERCENT:
            issues.append(f"Estimated word count {estimated_total} below goal {word_count_goal}")
            score -= _OUTLINE_UNDERSIZED_PENALTY
            undersized = True

    score = _clamp(score)
    return QualityGateResult(passed=not missing_types and not undersized and score >= OUTLINE_PASS_SCORE, score=score, issues=issues)


def find_incomplete_sections(sections: list[SectionContent], min_words: int = MIN_SECTION_WORDS) -> list[str]:
    """Return keys of sections that are empty or shorter than ``min_words``."""
    return [section.key for section in sections if count_words(section.content) < min_words]


def validate_completeness(sections: list[SectionContent], word_count_goal: int) -> QualityGateResult:
    """Validate the drafted sections against the word-count goal.

    The combined count must lie within 80%-120% of the goal (inclusive), and
    every section must carry at least ``MIN_SECTION_WORDS`` words.
    """
    issues: list[str] = []
    score = 100

    total_words = sum(count_words(section.content) for section in sections)
    if total_words * 100 < word_count_goal * COMPLETENESS_MIN_PERCENT:
        minimum = -(-word_count_goal * COMPLETENESS_MIN_PERCENT // 100)
        issues.append(f"Total word count {total_words} below goal minimum {minimum} (goal {word_count_goal})")
        score -= _BELOW_GOAL_PENALTY
    elif total_words * 100 > word_count_goal * COMPLETENESS_MAX_PERCENT:
        maximum = word_count_goal * COMPLETENESS_MAX_PERCENT // 100
        issues.append(f"Total word count {total_words} above goal maximum {maximum} (goal {word_count_goal})")
        score -= _ABOVE_GOAL_PENALTY

    incomplete = find_incomplete_sections(sections)
    if incomplete:
        issues.append(f"{_plural(len(incomplete), 'section')} empty or too short: {', '.join(incomplete)}")
        score -= _SHORT_SECTION_PENALTY * len(incomplete)

    return QualityGateResult(passed=not issues, score=_clamp(score), issues=issues)


def validate_seo(seo: SEOMetadata) -> QualityGateResult:
    """Score SEO metadata; passes at 75 or above."""
    issues: list[str] = []
    score = 100

    title_length = len(seo.title)
    if not SEO_TITLE_MIN_CHARS <= title_length <= SEO_TITLE_MAX_CHARS:
        issues.append(f"SEO title length {title_length} outside {SEO_TITLE_MIN_CHARS}-{SEO_TITLE_MAX_CHARS} characters")
        score -= _SEO_WEIGHTS["title"]

    description_length = len(seo.meta_description)
    if not META_DESCRIPTION_MIN_CHARS <= description_length <= META_DESCRIPTION_MAX_CHARS:
        issues.append(
            f"Meta description length {description_length} outside {META_DESCRIPTION_MIN_CHARS}-{META_DESCRIPTION_MAX_CHARS} characters"
        )
        score -= _SEO_WEIGHTS["meta_description"]

    if seo.keyword_density > KEYWORD_DENSITY_MAX:
        issues.append(f"Keyword density {seo.keyword_density:.1f}% indicates keyword stuffing (max {KEYWORD_DENSITY_MAX}%)")
        score -= _SEO_WEIGHTS["keyword_density"]
    elif seo.keyword_density < KEYWORD_DENSITY_MIN:
        issues.append(f"Keyword density {seo.keyword_density:.1f}% below minimum {KEYWORD_DENSITY_MIN}%")
        score -= _SEO_WEIGHTS["keyword_density"]

    if not _SLUG_PATTERN.match(seo.slug):
        issues.append(f"Slug '{seo.slug}' is not URL-friendly")
        score -= _SEO_WEIGHTS["slug"]

    if seo.readability_score.strip().lower() == "needs improvement":
        issues.append("Readability rated 'Needs Improvement'")
        score -= _POOR_READABILITY_PENALTY

    score = _clamp(score)
    return QualityGateResult(passed=score >= SEO_PASS_SCORE, score=score, issues=issues)


def validate_voice_tone(report: VoiceToneReport, threshold: int = DEFAULT_VOICE_TONE_THRESHOLD) -> QualityGateResult:
    """Check brand voice alignment against a caller-supplied threshold.

    Passes iff the alignment score reaches ``threshold`` and fewer than
    ``BLOCKING_HIGH_SEVERITY_COUNT`` high-severity issues were reported.
    """
    high_count = sum(1 for issue in report.issues if issue.severity == "high")
    score_ok = report.alignment_score >= threshold
    blocked = high_count >= BLOCKING_HIGH_SEVERITY_COUNT
    passed = score_ok and not blocked

    issues: list[str] = []
    if not passed:
        if not score_ok:
            issues.append(f"Alignment score {report.alignment_score} below threshold {threshold}")
        issues.append(_plural(high_count, "high-severity brand voice violation"))

    return QualityGateResult(passed=passed, score=_clamp(report.alignment_score), issues=issues)


def validate_research(research: ResearchData) -> QualityGateResult:
    """Flag empty research lists; advisory only, never blocks the pipeline."""
    fields = {
        "pain points": research.pain_points,
        "key facts": research.key_facts,
        "differentiators": research.differentiators,
        "related subtopics": research.related_subtopics,
        "suggested angles": research.suggested_angles,
    }
    issues = [f"Research returned no {name}" for name, values in fields.items() if not values]
    score = _clamp(100 - 20 * len(issues))
    return QualityGateResult(passed=not issues, score=score, issues=issues)
